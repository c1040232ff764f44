"""Ground risk resolution: intrinsic GRC lookup and mitigation credit."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Mapping

from .errors import InvalidCategory
from .tables import (
    GROUND_MITIGATIONS,
    INTRINSIC_GRC,
    MAX_IN_SCOPE_GRC,
    GroundMitigationId,
    PopulationCategory,
    Robustness,
    UACharacteristic,
)

logger = logging.getLogger(__name__)

GRC_FLOOR = 0


@dataclass(frozen=True)
class AppliedMitigation:
    """Mitigation credit actually taken for a ground risk result."""

    mitigation: GroundMitigationId
    robustness: Robustness
    reduction: int


@dataclass(frozen=True)
class GroundRisk:
    """Intrinsic and final ground risk class for one operation."""

    intrinsic_grc: int
    final_grc: int
    reduction: int
    applied: tuple[AppliedMitigation, ...] = ()

    @property
    def within_scope(self) -> bool:
        return self.final_grc <= MAX_IN_SCOPE_GRC


def intrinsic_grc(population: PopulationCategory | str, ua_characteristic: UACharacteristic | str) -> int:
    """Look up the intrinsic GRC; sparse cells are reported, never inferred."""

    population = PopulationCategory.parse(population)
    ua_characteristic = UACharacteristic.parse(ua_characteristic)
    value = INTRINSIC_GRC[population][ua_characteristic]
    if value is None:
        raise InvalidCategory(
            "population/UA combination",
            f"{population}/{ua_characteristic}",
            "not covered by the intrinsic GRC table",
        )
    return value


def _selection_fields(selection: object) -> tuple[bool, object]:
    # Accept pydantic selections as well as plain mappings.
    if isinstance(selection, Mapping):
        return bool(selection.get("enabled", False)), selection.get("robustness", Robustness.NONE)
    return bool(getattr(selection, "enabled", False)), getattr(selection, "robustness", Robustness.NONE)


def mitigation_reductions(mitigations: Mapping[str, object] | None) -> tuple[AppliedMitigation, ...]:
    """Return the GRC credit of every enabled mitigation.

    Robustness levels a mitigation does not define earn no credit, and M1(B)
    earns no credit while M1(A) is enabled at medium robustness.
    """

    enabled: dict[GroundMitigationId, Robustness] = {}
    for key, selection in (mitigations or {}).items():
        mitigation_id = GroundMitigationId.parse(key)
        is_enabled, robustness = _selection_fields(selection)
        robustness = Robustness.parse(robustness)
        if is_enabled:
            enabled[mitigation_id] = robustness

    sheltering_at_medium = enabled.get(GroundMitigationId.M1A) == Robustness.MEDIUM
    applied: list[AppliedMitigation] = []
    for mitigation_id in GroundMitigationId:
        if mitigation_id not in enabled:
            continue
        robustness = enabled[mitigation_id]
        if mitigation_id is GroundMitigationId.M1B and sheltering_at_medium:
            logger.warning(
                "mitigation_combination_rejected",
                extra={"mitigation": str(mitigation_id), "conflicts_with": str(GroundMitigationId.M1A)},
            )
            reduction = 0
        else:
            reductions = GROUND_MITIGATIONS[mitigation_id].reductions
            if robustness not in reductions:
                logger.warning(
                    "mitigation_robustness_unavailable",
                    extra={"mitigation": str(mitigation_id), "robustness": str(robustness)},
                )
            reduction = reductions.get(robustness, 0)
        applied.append(AppliedMitigation(mitigation_id, robustness, reduction))
    return tuple(applied)


def resolve_ground_risk(
    population: PopulationCategory | str,
    ua_characteristic: UACharacteristic | str,
    mitigations: Mapping[str, object] | None = None,
) -> GroundRisk:
    """Compute intrinsic GRC and the final GRC after mitigation credit."""

    igrc = intrinsic_grc(population, ua_characteristic)
    applied = mitigation_reductions(mitigations)
    reduction = sum(item.reduction for item in applied)
    final_grc = max(GRC_FLOOR, min(igrc - reduction, igrc))
    return GroundRisk(intrinsic_grc=igrc, final_grc=final_grc, reduction=reduction, applied=applied)
