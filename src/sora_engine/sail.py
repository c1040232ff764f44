"""SAIL resolution from final GRC and residual ARC."""

from __future__ import annotations

from dataclasses import dataclass

from .tables import ARC, MAX_IN_SCOPE_GRC, SAIL, SAIL_MATRIX


@dataclass(frozen=True)
class OutOfScope:
    """Terminal classification for a final GRC beyond the SAIL matrix.

    Such operations need a non-SORA (certified category) approval pathway.
    """

    final_grc: int
    max_grc: int = MAX_IN_SCOPE_GRC

    def __str__(self) -> str:
        return f"out of scope (final GRC {self.final_grc} > {self.max_grc})"


def resolve_sail(final_grc: int, residual_arc: ARC | str) -> SAIL | OutOfScope:
    """Look up the SAIL, or return OutOfScope when the GRC exceeds the matrix."""

    arc = ARC.parse(residual_arc)
    if final_grc < 0:
        raise ValueError("final GRC must be non-negative")
    if final_grc > MAX_IN_SCOPE_GRC:
        return OutOfScope(final_grc=final_grc)
    # The matrix starts at GRC 1; lower values share its first row.
    row = max(final_grc, min(SAIL_MATRIX))
    return SAIL_MATRIX[row][arc]


def highest_sail(sails: list[SAIL]) -> SAIL | None:
    """Return the SAIL with the highest rank, or None for an empty list."""

    if not sails:
        return None
    return max(sails, key=lambda sail: sail.rank)
