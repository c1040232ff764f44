"""Error taxonomy for the classification engine."""

from __future__ import annotations

from typing import Any, Iterable


class InvalidCategory(ValueError):
    """An input key is not present in the reference tables."""

    def __init__(self, kind: str, value: Any, detail: str | None = None) -> None:
        self.kind = kind
        self.value = value
        message = f"Unknown {kind}: {value!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class IncompleteAssessment(ValueError):
    """Required assessment fields are missing, so no SAIL can be produced."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"Assessment incomplete, missing: {', '.join(self.missing)}")
