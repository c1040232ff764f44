"""SFOC triggers and Manufacturer Performance Declaration (MPD) levels.

Transport Canada requires a Special Flight Operations Certificate (SFOC)
for operations outside the standard framework (CAR 903.01). The evidence
expected in the manufacturer declaration scales with the SAIL.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from .errors import InvalidCategory
from .oso import high_robustness_osos
from .tables import SAIL

SFOC_PROCESSING_DAYS = 60
LARGE_RPAS_WEIGHT_KG = 150
MAX_UNCONTROLLED_ALTITUDE_FT = 400


@dataclass(frozen=True)
class SFOCTrigger:
    id: str
    label: str
    car_reference: str
    complexity: str
    requires_mpd: bool


SFOC_TRIGGERS: Mapping[str, SFOCTrigger] = MappingProxyType(
    {
        "weight_over_150kg": SFOCTrigger("weight_over_150kg", "RPAS Weight >150kg", "CAR 903.01(a)", "medium", True),
        "altitude_over_400ft": SFOCTrigger(
            "altitude_over_400ft", "Altitude >400ft AGL", "CAR 903.01(b)", "medium", False
        ),
        "bvlos_extended": SFOCTrigger("bvlos_extended", "Extended BVLOS", "CAR 903.01(g)", "high", True),
        "bvlos_aerodrome": SFOCTrigger(
            "bvlos_aerodrome", "BVLOS in Aerodrome Environment", "CAR 903.01(h)", "high", True
        ),
        "hazardous_payload": SFOCTrigger("hazardous_payload", "Hazardous Payload", "CAR 903.01(j)", "high", False),
    }
)


@dataclass(frozen=True)
class OperationProfile:
    weight_kg: float = 0.0
    max_altitude_ft: float = 0.0
    controlled_airspace: bool = False
    is_bvlos: bool = False
    bvlos_type: str | None = None
    near_aerodrome: bool = False
    hazardous_payload: bool = False


@dataclass(frozen=True)
class SFOCAssessment:
    required: bool
    triggers: tuple[SFOCTrigger, ...]
    complexity: str
    requires_mpd: bool
    processing_days: int = SFOC_PROCESSING_DAYS


@dataclass(frozen=True)
class MPDLevel:
    label: str
    declaration_type: str
    description: str
    evidence_level: str
    third_party_required: bool
    notes: str


MPD_REQUIREMENTS_BY_SAIL: Mapping[SAIL, MPDLevel] = MappingProxyType(
    {
        SAIL.I: MPDLevel("SAIL I - Minimal", "self", "Self-declaration by operator/manufacturer sufficient",
                         "low", False, "Straightforward declaration with basic documentation"),
        SAIL.II: MPDLevel("SAIL II - Low", "self", "Self-declaration with supporting documentation",
                          "low", False, "Declaration with means of compliance documented"),
        SAIL.III: MPDLevel("SAIL III - Medium", "detailed", "Detailed declaration with means of compliance",
                           "medium", False, "TC will want to see details on compliance methods used"),
        SAIL.IV: MPDLevel("SAIL IV - Medium-High", "detailed", "Detailed declaration with verification evidence",
                          "medium", False, "May request test reports and supporting evidence"),
        SAIL.V: MPDLevel("SAIL V - High", "verified", "Third-party verified declaration",
                         "high", True, "Third-party audit or verification typically required"),
        SAIL.VI: MPDLevel("SAIL VI - Highest", "certified", "Full airworthiness-level certification",
                          "high", True, "Equivalent to traditional airworthiness certification"),
    }
)


def check_sfoc_required(profile: OperationProfile) -> SFOCAssessment:
    """List the SFOC triggers an operation hits."""

    triggered: list[str] = []
    if profile.weight_kg > LARGE_RPAS_WEIGHT_KG:
        triggered.append("weight_over_150kg")
    if profile.max_altitude_ft > MAX_UNCONTROLLED_ALTITUDE_FT and not profile.controlled_airspace:
        triggered.append("altitude_over_400ft")
    if profile.is_bvlos and profile.bvlos_type == "extended":
        triggered.append("bvlos_extended")
    if profile.is_bvlos and profile.near_aerodrome:
        triggered.append("bvlos_aerodrome")
    if profile.hazardous_payload:
        triggered.append("hazardous_payload")

    triggers = tuple(SFOC_TRIGGERS[key] for key in triggered)
    return SFOCAssessment(
        required=bool(triggers),
        triggers=triggers,
        complexity="high" if any(trigger.complexity == "high" for trigger in triggers) else "medium",
        requires_mpd=any(trigger.requires_mpd for trigger in triggers),
    )


def mpd_requirements(sail: SAIL | str) -> dict[str, Any]:
    """Declaration expectations and critical OSOs for a SAIL."""

    sail = SAIL.parse(sail)
    level = MPD_REQUIREMENTS_BY_SAIL.get(sail)
    if level is None:
        raise InvalidCategory("SAIL", sail, "no MPD requirements defined")
    critical = high_robustness_osos(sail)
    return {
        "sail": str(sail),
        "label": level.label,
        "declaration_type": level.declaration_type,
        "description": level.description,
        "evidence_level": level.evidence_level,
        "third_party_required": level.third_party_required,
        "notes": level.notes,
        "critical_oso_count": len(critical),
        "critical_osos": list(critical),
    }
