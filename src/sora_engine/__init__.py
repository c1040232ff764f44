"""Top-level package for the SORA 2.5 classification engine."""

from .aggregate import AssessmentCache, ProjectSORASummary, SiteResult, SiteStatus, aggregate, assess_site
from .air import resolve_air_risk, step_down
from .api import SoraEngine, build_engine
from .config import CacheConfig, EngineSettings, LoggingConfig
from .containment import ContainmentReport, adjacent_area_distance, resolve_containment
from .errors import IncompleteAssessment, InvalidCategory
from .ground import GroundRisk, intrinsic_grc, resolve_ground_risk
from .logging_utils import JsonFormatter, configure_logging
from .models import (
    ContainmentSelection,
    FieldSource,
    MitigationSelection,
    OSODeclaration,
    SiteAssessment,
    TacticalMitigationSelection,
)
from .oso import OSOReport, OSOResult, check_oso_compliance, high_robustness_osos
from .sail import OutOfScope, resolve_sail
from .sfoc import OperationProfile, SFOCAssessment, check_sfoc_required, mpd_requirements
from .suggest import (
    Suggestion,
    apply_suggestions,
    suggest_for_site,
    suggest_initial_arc,
    suggest_population_category,
    suggest_ua_characteristic,
)
from .tables import (
    ARC,
    SAIL,
    ContainmentMethodId,
    GroundMitigationId,
    OSORequirement,
    PopulationCategory,
    Robustness,
    TacticalMitigationType,
    UACharacteristic,
)

__all__ = [
    "ARC",
    "SAIL",
    "AssessmentCache",
    "CacheConfig",
    "ContainmentMethodId",
    "ContainmentReport",
    "ContainmentSelection",
    "EngineSettings",
    "FieldSource",
    "GroundMitigationId",
    "GroundRisk",
    "IncompleteAssessment",
    "InvalidCategory",
    "JsonFormatter",
    "LoggingConfig",
    "MitigationSelection",
    "OSODeclaration",
    "OSOReport",
    "OSORequirement",
    "OSOResult",
    "OperationProfile",
    "OutOfScope",
    "PopulationCategory",
    "ProjectSORASummary",
    "Robustness",
    "SFOCAssessment",
    "SiteAssessment",
    "SiteResult",
    "SiteStatus",
    "SoraEngine",
    "Suggestion",
    "TacticalMitigationSelection",
    "TacticalMitigationType",
    "UACharacteristic",
    "adjacent_area_distance",
    "aggregate",
    "apply_suggestions",
    "assess_site",
    "build_engine",
    "check_oso_compliance",
    "check_sfoc_required",
    "configure_logging",
    "high_robustness_osos",
    "intrinsic_grc",
    "mpd_requirements",
    "resolve_air_risk",
    "resolve_containment",
    "resolve_ground_risk",
    "resolve_sail",
    "step_down",
    "suggest_for_site",
    "suggest_initial_arc",
    "suggest_population_category",
    "suggest_ua_characteristic",
]
