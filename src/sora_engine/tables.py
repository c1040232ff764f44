"""Reference tables for SORA 2.5 ground, air and assurance classification.

The tables follow the JARUS SORA 2.5 main body (Table 2 intrinsic GRC,
Table 7 SAIL), Annex B ground mitigations, Annex D tactical mitigations and
Annex E OSO requirements, as encoded by the application. They are read-only
module state and are checked for totality and monotonicity at import so a
missing row fails loudly instead of surfacing as a ``None`` lookup later.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Iterable, Mapping, Self, TypeVar

from .errors import InvalidCategory

K = TypeVar("K")
V = TypeVar("V")


class RankedEnum(StrEnum):
    """String enum whose declaration order is its risk ordering."""

    @property
    def rank(self) -> int:
        return type(self)._member_names_.index(self.name)

    @classmethod
    def parse(cls, value: object) -> Self:
        """Return the member for ``value`` or raise InvalidCategory."""

        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidCategory(cls.__name__, value) from None


class PopulationCategory(RankedEnum):
    CONTROLLED = "controlled"
    REMOTE = "remote"
    LIGHTLY = "lightly"
    SPARSELY = "sparsely"
    SUBURBAN = "suburban"
    HIGH_DENSITY = "highdensity"
    ASSEMBLY = "assembly"


class UACharacteristic(RankedEnum):
    UP_TO_1M = "1m_25ms"
    UP_TO_3M = "3m_35ms"
    UP_TO_8M = "8m_75ms"
    UP_TO_20M = "20m_120ms"
    UP_TO_40M = "40m_200ms"


class Robustness(RankedEnum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OSORequirement(RankedEnum):
    """Required OSO robustness; ``O`` means compliance is optional."""

    OPTIONAL = "O"
    LOW = "L"
    MEDIUM = "M"
    HIGH = "H"

    @property
    def label(self) -> str:
        return ("Optional", "Low", "Medium", "High")[self.rank]


class ARC(RankedEnum):
    A = "ARC-a"
    B = "ARC-b"
    C = "ARC-c"
    D = "ARC-d"

    @classmethod
    def _missing_(cls, value: object) -> "ARC | None":
        # Accept the bare letter ("b") as well as "ARC-b".
        if isinstance(value, str) and value.lower() in ("a", "b", "c", "d"):
            return cls(f"ARC-{value.lower()}")
        return None


class SAIL(RankedEnum):
    I = "I"  # noqa: E741
    II = "II"
    III = "III"
    IV = "IV"
    V = "V"
    VI = "VI"


class GroundMitigationId(RankedEnum):
    M1A = "M1A"
    M1B = "M1B"
    M1C = "M1C"
    M2 = "M2"


class TacticalMitigationType(RankedEnum):
    VLOS = "VLOS"
    EVLOS = "EVLOS"
    BVLOS = "BVLOS"
    DAA = "DAA"


class ContainmentMethodId(RankedEnum):
    NONE = "none"
    PROCEDURAL = "procedural"
    SW_GEOFENCE = "sw_geofence"
    HW_GEOFENCE = "hw_geofence"
    FLIGHT_TERMINATION = "flight_termination"
    PARACHUTE_FTS = "parachute_fts"


class OSOCategory(RankedEnum):
    TECHNICAL = "technical"
    EXTERNAL = "external"
    HUMAN = "human"
    OPERATING = "operating"


@dataclass(frozen=True)
class PopulationInfo:
    label: str
    density: int
    description: str


@dataclass(frozen=True)
class UABand:
    """UA characteristic bucket bounded by dimension (m) and speed (m/s)."""

    label: str
    max_dimension: float
    max_speed: float
    description: str

    def fits(self, dimension: float, speed: float) -> bool:
        return dimension <= self.max_dimension and speed <= self.max_speed


@dataclass(frozen=True)
class ARCInfo:
    description: str
    encounters: str


@dataclass(frozen=True)
class GroundMitigation:
    """Ground risk mitigation with the GRC reduction per robustness level.

    Levels absent from ``reductions`` are not available for the mitigation.
    """

    name: str
    description: str
    reductions: Mapping[Robustness, int]
    notes: str


@dataclass(frozen=True)
class TacticalMitigation:
    """Tactical mitigation with the ARC steps credited per robustness level."""

    description: str
    reductions: Mapping[Robustness, int]
    # None when no ARC credit is ever given; the residual stays at the initial ARC.
    best_residual_arc: ARC | None


@dataclass(frozen=True)
class OSODefinition:
    id: str
    category: OSOCategory
    name: str
    description: str
    requirements: Mapping[SAIL, OSORequirement]

    def required(self, sail: SAIL) -> OSORequirement:
        return self.requirements[sail]


@dataclass(frozen=True)
class ContainmentMethod:
    label: str
    description: str
    achievable: Robustness
    evidence_required: tuple[str, ...]


def _frozen(data: Mapping[K, V]) -> Mapping[K, V]:
    return MappingProxyType(dict(data))


def _row(keys: Iterable[K], values: Iterable[V]) -> Mapping[K, V]:
    keys, values = list(keys), list(values)
    if len(keys) != len(values):
        raise RuntimeError(f"Table row has {len(values)} values for {len(keys)} columns")
    return _frozen(dict(zip(keys, values)))


def _sail_row(spec: str) -> Mapping[ARC, SAIL]:
    return _row(ARC, (SAIL(value) for value in spec.split()))


def _requirement_row(spec: str) -> Mapping[SAIL, OSORequirement]:
    return _row(SAIL, (OSORequirement(value) for value in spec.split()))


def _containment_row(spec: str) -> Mapping[SAIL, Robustness]:
    return _row(SAIL, (Robustness(value) for value in spec.split()))


POPULATION_CATEGORIES: Mapping[PopulationCategory, PopulationInfo] = _frozen(
    {
        PopulationCategory.CONTROLLED: PopulationInfo(
            "Controlled Ground Area", 0, "Areas where unauthorized people are not allowed to enter"
        ),
        PopulationCategory.REMOTE: PopulationInfo(
            "Remote (< 5 ppl/km²)", 5, "Forests, deserts, large farm parcels"
        ),
        PopulationCategory.LIGHTLY: PopulationInfo(
            "Lightly Populated (< 50 ppl/km²)", 50, "Small farms, residential areas with very large lots"
        ),
        PopulationCategory.SPARSELY: PopulationInfo(
            "Sparsely Populated (< 500 ppl/km²)", 500, "Homes and small businesses with large lot sizes"
        ),
        PopulationCategory.SUBURBAN: PopulationInfo(
            "Suburban (< 5,000 ppl/km²)", 5000, "Single-family homes on small lots, apartment complexes"
        ),
        PopulationCategory.HIGH_DENSITY: PopulationInfo(
            "High Density Metro (< 50,000 ppl/km²)", 50000, "Mostly large multistory buildings, downtown areas"
        ),
        PopulationCategory.ASSEMBLY: PopulationInfo(
            "Assembly of People (> 50,000 ppl/km²)", 100000, "Sporting events, large concerts"
        ),
    }
)

UA_CHARACTERISTICS: Mapping[UACharacteristic, UABand] = _frozen(
    {
        UACharacteristic.UP_TO_1M: UABand("≤1m / ≤25 m/s", 1, 25, "Small consumer drones"),
        UACharacteristic.UP_TO_3M: UABand("≤3m / ≤35 m/s", 3, 35, "Medium commercial UAS"),
        UACharacteristic.UP_TO_8M: UABand("≤8m / ≤75 m/s", 8, 75, "Large industrial UAS"),
        UACharacteristic.UP_TO_20M: UABand("≤20m / ≤120 m/s", 20, 120, "Large fixed-wing UAS"),
        UACharacteristic.UP_TO_40M: UABand("≤40m / ≤200 m/s", 40, 200, "Very large UAS"),
    }
)

# Rows: population. Columns: UA characteristic in declaration order.
# None marks cells outside SORA ("not part of SORA").
INTRINSIC_GRC: Mapping[PopulationCategory, Mapping[UACharacteristic, int | None]] = _frozen(
    {
        PopulationCategory.CONTROLLED: _row(UACharacteristic, (1, 1, 2, 3, 3)),
        PopulationCategory.REMOTE: _row(UACharacteristic, (2, 3, 4, 5, 6)),
        PopulationCategory.LIGHTLY: _row(UACharacteristic, (3, 4, 5, 6, 7)),
        PopulationCategory.SPARSELY: _row(UACharacteristic, (4, 5, 6, 7, 8)),
        PopulationCategory.SUBURBAN: _row(UACharacteristic, (5, 6, 7, 8, 9)),
        PopulationCategory.HIGH_DENSITY: _row(UACharacteristic, (6, 7, 8, 9, 10)),
        PopulationCategory.ASSEMBLY: _row(UACharacteristic, (7, 8, None, None, None)),
    }
)

GROUND_MITIGATIONS: Mapping[GroundMitigationId, GroundMitigation] = _frozen(
    {
        GroundMitigationId.M1A: GroundMitigation(
            name="M1(A) - Strategic Mitigation: Sheltering",
            description="People on ground are sheltered by structures",
            reductions=_frozen({Robustness.NONE: 0, Robustness.LOW: 1, Robustness.MEDIUM: 2}),
            notes="Cannot be combined with M1(B) at medium robustness",
        ),
        GroundMitigationId.M1B: GroundMitigation(
            name="M1(B) - Strategic Mitigation: Operational Restrictions",
            description="Spacetime-based restrictions reduce exposure",
            reductions=_frozen({Robustness.NONE: 0, Robustness.MEDIUM: 1, Robustness.HIGH: 2}),
            notes="Cannot be combined with M1(A) at medium robustness",
        ),
        GroundMitigationId.M1C: GroundMitigation(
            name="M1(C) - Tactical Mitigation: Ground Observation",
            description="Observers can warn people in operational area",
            reductions=_frozen({Robustness.NONE: 0, Robustness.LOW: 1}),
            notes="Limited to -1 reduction at low robustness only",
        ),
        GroundMitigationId.M2: GroundMitigation(
            name="M2 - Effects of UA Impact Dynamics Reduced",
            description="Parachute, autorotation, or frangibility reduces impact energy",
            reductions=_frozen({Robustness.NONE: 0, Robustness.MEDIUM: 1, Robustness.HIGH: 2}),
            notes="Additional reduction needs demonstrated 3+ orders of magnitude risk reduction",
        ),
    }
)

ARC_LEVELS: Mapping[ARC, ARCInfo] = _frozen(
    {
        ARC.A: ARCInfo("Atypical airspace (segregated, restricted)", "Negligible"),
        ARC.B: ARCInfo("Uncontrolled airspace, rural, low altitude", "Low"),
        ARC.C: ARCInfo("Controlled airspace or urban uncontrolled", "Medium"),
        ARC.D: ARCInfo("Airport/heliport environment or high traffic", "High"),
    }
)

TACTICAL_MITIGATIONS: Mapping[TacticalMitigationType, TacticalMitigation] = _frozen(
    {
        TacticalMitigationType.VLOS: TacticalMitigation(
            description="Visual Line of Sight - See and avoid by remote pilot",
            reductions=_row(Robustness, (0, 1, 1, 1)),
            best_residual_arc=ARC.B,
        ),
        TacticalMitigationType.EVLOS: TacticalMitigation(
            description="Extended VLOS - Visual observers provide separation",
            reductions=_row(Robustness, (0, 1, 1, 1)),
            best_residual_arc=ARC.B,
        ),
        TacticalMitigationType.BVLOS: TacticalMitigation(
            description="Beyond VLOS without tactical mitigation - no ARC credit",
            reductions=_row(Robustness, (0, 0, 0, 0)),
            best_residual_arc=None,
        ),
        TacticalMitigationType.DAA: TacticalMitigation(
            description="Detect and Avoid system onboard",
            reductions=_row(Robustness, (0, 0, 2, 2)),
            best_residual_arc=ARC.A,
        ),
    }
)

# Final GRC above this value is outside SORA (certified category).
MAX_IN_SCOPE_GRC = 7

# Rows: final GRC. Columns: residual ARC a..d.
SAIL_MATRIX: Mapping[int, Mapping[ARC, SAIL]] = _frozen(
    {
        1: _sail_row("I II IV VI"),
        2: _sail_row("I II IV VI"),
        3: _sail_row("II II IV VI"),
        4: _sail_row("III III IV VI"),
        5: _sail_row("IV IV IV VI"),
        6: _sail_row("V V V VI"),
        7: _sail_row("VI VI VI VI"),
    }
)

SAIL_DESCRIPTIONS: Mapping[SAIL, str] = _frozen(
    {
        SAIL.I: "Lowest assurance - Declaration may be sufficient",
        SAIL.II: "Low assurance - Standard operating procedures",
        SAIL.III: "Medium assurance - Validated procedures required",
        SAIL.IV: "Medium-High assurance - Comprehensive safety case",
        SAIL.V: "High assurance - Extensive demonstration required",
        SAIL.VI: "Highest assurance - Full airworthiness demonstration",
    }
)

# Rows: adjacent area population. Columns: SAIL I..VI.
CONTAINMENT_ROBUSTNESS: Mapping[PopulationCategory, Mapping[SAIL, Robustness]] = _frozen(
    {
        PopulationCategory.CONTROLLED: _containment_row("low low low low low medium"),
        PopulationCategory.REMOTE: _containment_row("low low low low low medium"),
        PopulationCategory.LIGHTLY: _containment_row("low low low low medium medium"),
        PopulationCategory.SPARSELY: _containment_row("low low low medium medium high"),
        PopulationCategory.SUBURBAN: _containment_row("low low medium medium high high"),
        PopulationCategory.HIGH_DENSITY: _containment_row("low medium medium high high high"),
        PopulationCategory.ASSEMBLY: _containment_row("medium medium high high high high"),
    }
)

CONTAINMENT_METHODS: Mapping[ContainmentMethodId, ContainmentMethod] = _frozen(
    {
        ContainmentMethodId.NONE: ContainmentMethod(
            "None", "No specific containment measures", Robustness.NONE, ()
        ),
        ContainmentMethodId.PROCEDURAL: ContainmentMethod(
            "Procedural",
            "Operational procedures and flight planning to stay within boundaries",
            Robustness.LOW,
            (
                "Flight planning procedures",
                "Boundary awareness training",
                "Visual reference points identified",
            ),
        ),
        ContainmentMethodId.SW_GEOFENCE: ContainmentMethod(
            "Software Geofencing",
            "Software-based geofencing that alerts pilot when approaching boundaries",
            Robustness.MEDIUM,
            (
                "Geofence configuration documented",
                "Alert/warning system tested",
                "Pilot response procedures",
                "Geofence accuracy specifications",
            ),
        ),
        ContainmentMethodId.HW_GEOFENCE: ContainmentMethod(
            "Hardware Geofencing",
            "Hardware-enforced geofencing with automatic position limiting",
            Robustness.MEDIUM,
            (
                "Hardware geofence specifications",
                "Independent position source",
                "Automatic boundary enforcement tested",
                "Failure mode analysis",
            ),
        ),
        ContainmentMethodId.FLIGHT_TERMINATION: ContainmentMethod(
            "Flight Termination System",
            "Independent system to terminate flight if boundaries exceeded",
            Robustness.HIGH,
            (
                "FTS specifications and design",
                "Independent trigger mechanism",
                "Demonstrated reliability data",
                "Testing and verification records",
                "Activation criteria defined",
            ),
        ),
        ContainmentMethodId.PARACHUTE_FTS: ContainmentMethod(
            "Parachute + Flight Termination",
            "Flight termination with parachute recovery system",
            Robustness.HIGH,
            (
                "Parachute specifications",
                "Combined FTS + parachute testing",
                "Descent rate and footprint analysis",
                "Reliability demonstration",
                "Activation altitude requirements",
            ),
        ),
    }
)


def _oso(oso_id: str, category: OSOCategory, name: str, description: str, requirements: str) -> OSODefinition:
    return OSODefinition(oso_id, category, name, description, _requirement_row(requirements))


# OSO-14 and OSO-15 were removed in SORA 2.5.
OSO_CATALOG: tuple[OSODefinition, ...] = (
    _oso("OSO-01", OSOCategory.TECHNICAL, "Ensure the Operator is competent and/or proven",
         "Operator demonstrates competency for the operation", "O L M H H H"),
    _oso("OSO-02", OSOCategory.TECHNICAL, "UAS manufactured by competent and/or proven entity",
         "Manufacturer demonstrates design and production competency", "O O L M H H"),
    _oso("OSO-03", OSOCategory.TECHNICAL, "UAS maintained by competent and/or proven entity",
         "Maintenance performed by qualified personnel to defined procedures", "L L M M H H"),
    _oso("OSO-04", OSOCategory.TECHNICAL, "UAS developed to Airworthiness Design Standard (ADS)",
         "Design follows a recognized airworthiness standard", "O O O L M H"),
    _oso("OSO-05", OSOCategory.TECHNICAL, "UAS designed considering system safety and reliability",
         "Failure modes assessed and mitigated in design", "O O L M H H"),
    _oso("OSO-06", OSOCategory.TECHNICAL, "C3 link characteristics appropriate for operation",
         "Command, control and communication link performance suits the operation", "O L L M H H"),
    _oso("OSO-07", OSOCategory.TECHNICAL, "Conformity check of UAS configuration",
         "UAS configuration verified before each flight", "L L M M H H"),
    _oso("OSO-08", OSOCategory.EXTERNAL, "Operational procedures defined, validated and adhered to",
         "Normal, contingency and emergency procedures are documented and validated", "L M H H H H"),
    _oso("OSO-09", OSOCategory.HUMAN, "Remote crew trained and current",
         "Remote crew competency maintained through training", "L L M M H H"),
    _oso("OSO-10", OSOCategory.TECHNICAL, "Safe recovery from technical issue",
         "UAS can be recovered safely after a technical failure", "L L M M H H"),
    _oso("OSO-11", OSOCategory.TECHNICAL, "Safe recovery from C3 link issues",
         "Lost-link behaviour is defined and safe", "L L M M H H"),
    _oso("OSO-12", OSOCategory.HUMAN, "Remote crew trained to handle technical emergencies",
         "Crew can respond to technical emergencies", "L L M M H H"),
    _oso("OSO-13", OSOCategory.EXTERNAL, "External services supporting UAS operations are adequate",
         "Services such as GNSS or weather feeds meet operational needs", "L L M H H H"),
    _oso("OSO-16", OSOCategory.HUMAN, "Multi-crew coordination",
         "Crew roles and communication are coordinated", "L L M M H H"),
    _oso("OSO-17", OSOCategory.HUMAN, "Remote crew fit to operate",
         "Crew fitness, fatigue and duty limits are managed", "L L M M H H"),
    _oso("OSO-18", OSOCategory.HUMAN, "Automatic protection of flight envelope from human error",
         "Flight envelope protection prevents crew-induced excursions", "O O L M H H"),
    _oso("OSO-19", OSOCategory.HUMAN, "Safe recovery from human error",
         "Procedures and systems allow recovery from crew error", "O O L M M H"),
    _oso("OSO-20", OSOCategory.HUMAN, "Human Factors evaluation performed, HMI appropriate",
         "Human-machine interface suits the mission", "O L L M M H"),
    _oso("OSO-21", OSOCategory.OPERATING, "Automatic protection of flight envelope from adverse conditions",
         "Envelope protection covers adverse operating conditions", "O O L M H H"),
    _oso("OSO-22", OSOCategory.OPERATING, "Remote crew able to control UAS in adverse conditions",
         "Crew trained to identify and handle adverse conditions", "L L M M H H"),
    _oso("OSO-23", OSOCategory.OPERATING, "Environmental conditions defined, measurable and adhered to",
         "Weather and environmental limits are defined and monitored", "L L M M H H"),
    _oso("OSO-24", OSOCategory.OPERATING, "UAS designed and qualified for adverse environmental conditions",
         "UAS qualified for the environmental envelope of the operation", "O O M H H H"),
)

OSO_BY_ID: Mapping[str, OSODefinition] = _frozen({oso.id: oso for oso in OSO_CATALOG})


def oso_definition(oso_id: str) -> OSODefinition:
    try:
        return OSO_BY_ID[oso_id]
    except (KeyError, TypeError):
        raise InvalidCategory("OSO", oso_id) from None


def _require_total(name: str, table: Mapping[object, object], keys: Iterable[object]) -> None:
    missing = [key for key in keys if key not in table]
    if missing:
        raise RuntimeError(f"{name} is missing entries for {missing}")


def _check_tables() -> None:
    """Fail at import when a table is not total or the SAIL matrix is not monotonic."""

    _require_total("POPULATION_CATEGORIES", POPULATION_CATEGORIES, PopulationCategory)
    _require_total("UA_CHARACTERISTICS", UA_CHARACTERISTICS, UACharacteristic)
    _require_total("INTRINSIC_GRC", INTRINSIC_GRC, PopulationCategory)
    for population, row in INTRINSIC_GRC.items():
        _require_total(f"INTRINSIC_GRC[{population}]", row, UACharacteristic)
    _require_total("GROUND_MITIGATIONS", GROUND_MITIGATIONS, GroundMitigationId)
    _require_total("ARC_LEVELS", ARC_LEVELS, ARC)
    _require_total("TACTICAL_MITIGATIONS", TACTICAL_MITIGATIONS, TacticalMitigationType)
    _require_total("SAIL_MATRIX", SAIL_MATRIX, range(1, MAX_IN_SCOPE_GRC + 1))
    _require_total("SAIL_DESCRIPTIONS", SAIL_DESCRIPTIONS, SAIL)
    _require_total("CONTAINMENT_ROBUSTNESS", CONTAINMENT_ROBUSTNESS, PopulationCategory)
    for population, row in CONTAINMENT_ROBUSTNESS.items():
        _require_total(f"CONTAINMENT_ROBUSTNESS[{population}]", row, SAIL)
    _require_total("CONTAINMENT_METHODS", CONTAINMENT_METHODS, ContainmentMethodId)
    if len(OSO_BY_ID) != len(OSO_CATALOG):
        raise RuntimeError("OSO_CATALOG contains duplicate identifiers")
    for oso in OSO_CATALOG:
        _require_total(f"requirements of {oso.id}", oso.requirements, SAIL)

    bands = list(UA_CHARACTERISTICS.values())
    for smaller, larger in zip(bands, bands[1:]):
        if larger.max_dimension < smaller.max_dimension or larger.max_speed < smaller.max_speed:
            raise RuntimeError("UA_CHARACTERISTICS buckets must be ascending")

    for mitigation_id, mitigation in GROUND_MITIGATIONS.items():
        if any(value < 0 for value in mitigation.reductions.values()):
            raise RuntimeError(f"{mitigation_id} defines a negative GRC reduction")

    for grc in range(1, MAX_IN_SCOPE_GRC + 1):
        row = SAIL_MATRIX[grc]
        for lower, higher in zip(list(ARC), list(ARC)[1:]):
            if row[higher].rank < row[lower].rank:
                raise RuntimeError(f"SAIL_MATRIX row {grc} decreases from {lower} to {higher}")
        if grc > 1:
            for arc in ARC:
                if row[arc].rank < SAIL_MATRIX[grc - 1][arc].rank:
                    raise RuntimeError(f"SAIL_MATRIX column {arc} decreases at GRC {grc}")


_check_tables()
