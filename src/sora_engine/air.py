"""Air risk resolution: residual ARC after tactical mitigation."""

from __future__ import annotations

from typing import Mapping

from .errors import IncompleteAssessment
from .tables import ARC, TACTICAL_MITIGATIONS, Robustness, TacticalMitigationType


def step_down(arc: ARC | str, steps: int) -> ARC:
    """Lower ``arc`` by ``steps`` levels, absorbing anything below ARC-a."""

    arc = ARC.parse(arc)
    if steps < 0:
        raise ValueError("ARC reduction steps must be non-negative")
    levels = list(ARC)
    return levels[max(0, arc.rank - steps)]


def tmpr_reduction(tmpr_type: TacticalMitigationType | str, robustness: Robustness | str) -> int:
    """ARC steps credited for a tactical mitigation at a robustness level."""

    definition = TACTICAL_MITIGATIONS[TacticalMitigationType.parse(tmpr_type)]
    return definition.reductions[Robustness.parse(robustness)]


def resolve_air_risk(initial_arc: ARC | str, tmpr: object | None = None) -> ARC:
    """Resolve the residual ARC.

    ``tmpr`` may be a pydantic selection or a mapping with ``enabled``,
    ``type`` and ``robustness``. A disabled or absent TMPR leaves the initial
    ARC unchanged.
    """

    initial = ARC.parse(initial_arc)
    if tmpr is None:
        return initial
    if isinstance(tmpr, Mapping):
        enabled = bool(tmpr.get("enabled", False))
        tmpr_type = tmpr.get("type")
        robustness = tmpr.get("robustness", Robustness.NONE)
    else:
        enabled = bool(getattr(tmpr, "enabled", False))
        tmpr_type = getattr(tmpr, "type", None)
        robustness = getattr(tmpr, "robustness", Robustness.NONE)
    if not enabled:
        return initial
    if tmpr_type is None:
        raise IncompleteAssessment(["tmpr.type"])
    return step_down(initial, tmpr_reduction(tmpr_type, robustness))
