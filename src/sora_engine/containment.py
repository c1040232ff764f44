"""Containment requirement for operations next to more populated areas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .tables import (
    CONTAINMENT_METHODS,
    CONTAINMENT_ROBUSTNESS,
    SAIL,
    ContainmentMethodId,
    PopulationCategory,
    Robustness,
)

# Adjacent area extent: 3 minutes of flight at max speed, bounded to 5-35 km.
ADJACENT_AREA_FLIGHT_TIME_S = 180
ADJACENT_AREA_MIN_M = 5_000
ADJACENT_AREA_MAX_M = 35_000


@dataclass(frozen=True)
class ContainmentReport:
    adjacent_is_riskier: bool
    required_robustness: Robustness
    achievable_robustness: Robustness
    meets_requirement: bool
    adjacent_distance_m: float
    method: ContainmentMethodId | None
    evidence_required: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "adjacent_is_riskier": self.adjacent_is_riskier,
            "required_robustness": str(self.required_robustness),
            "achievable_robustness": str(self.achievable_robustness),
            "meets_requirement": self.meets_requirement,
            "adjacent_distance_m": self.adjacent_distance_m,
            "method": str(self.method) if self.method is not None else None,
            "evidence_required": list(self.evidence_required),
        }


def adjacent_area_distance(max_speed: float) -> float:
    """Adjacent area buffer distance in metres for a max speed in m/s."""

    if max_speed < 0:
        raise ValueError("max_speed must be non-negative")
    distance = max_speed * ADJACENT_AREA_FLIGHT_TIME_S
    return float(min(ADJACENT_AREA_MAX_M, max(ADJACENT_AREA_MIN_M, distance)))


def containment_requirement(adjacent_population: PopulationCategory | str, sail: SAIL | str) -> Robustness:
    return CONTAINMENT_ROBUSTNESS[PopulationCategory.parse(adjacent_population)][SAIL.parse(sail)]


def _method_of(containment: object | None) -> ContainmentMethodId | None:
    if containment is None:
        return None
    if isinstance(containment, Mapping):
        method = containment.get("method")
    else:
        method = getattr(containment, "method", containment)
    if method is None or method == "":
        return None
    return ContainmentMethodId.parse(method)


def resolve_containment(
    sail: SAIL | str,
    operational_population: PopulationCategory | str,
    adjacent_population: PopulationCategory | str,
    containment: object | None,
    max_speed: float,
) -> ContainmentReport:
    """Check the declared containment method against the adjacent area risk.

    A site with no method selected achieves no containment robustness.
    """

    sail = SAIL.parse(sail)
    operational = PopulationCategory.parse(operational_population)
    adjacent = PopulationCategory.parse(adjacent_population)
    method = _method_of(containment)
    achievable = CONTAINMENT_METHODS[method].achievable if method is not None else Robustness.NONE
    evidence_required = CONTAINMENT_METHODS[method].evidence_required if method is not None else ()
    distance = adjacent_area_distance(max_speed)

    adjacent_is_riskier = adjacent.rank > operational.rank
    if not adjacent_is_riskier:
        required = Robustness.NONE
    else:
        required = containment_requirement(adjacent, sail)
    return ContainmentReport(
        adjacent_is_riskier=adjacent_is_riskier,
        required_robustness=required,
        achievable_robustness=achievable,
        meets_requirement=achievable.rank >= required.rank,
        adjacent_distance_m=distance,
        method=method,
        evidence_required=evidence_required,
    )
