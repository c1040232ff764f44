"""Per-site assessment and project-level worst-case aggregation.

Every site is assessed independently; the project summary keeps the highest
SAIL, names the governing and out-of-scope sites, and is identical for any
ordering of the input sites.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from enum import StrEnum
import logging
import threading
from typing import Any, Iterable

from .air import resolve_air_risk
from .containment import ContainmentReport, resolve_containment
from .errors import IncompleteAssessment, InvalidCategory
from .ground import GroundRisk, resolve_ground_risk
from .models import SiteAssessment
from .oso import OSOReport, check_oso_compliance
from .sail import OutOfScope, highest_sail, resolve_sail
from .tables import ARC, SAIL, UA_CHARACTERISTICS, UACharacteristic

logger = logging.getLogger(__name__)


class SiteStatus(StrEnum):
    ASSESSED = "assessed"
    OUT_OF_SCOPE = "out_of_scope"
    INCOMPLETE = "incomplete"
    INVALID = "invalid"


@dataclass(frozen=True)
class SiteResult:
    """Computed classification for one site."""

    site_id: str
    status: SiteStatus
    ground: GroundRisk | None = None
    initial_arc: ARC | None = None
    residual_arc: ARC | None = None
    sail: SAIL | OutOfScope | None = None
    oso: OSOReport | None = None
    containment: ContainmentReport | None = None
    missing_fields: tuple[str, ...] = ()
    error: str | None = None

    @property
    def resolved_sail(self) -> SAIL | None:
        return self.sail if isinstance(self.sail, SAIL) else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "site_id": self.site_id,
            "status": str(self.status),
            "intrinsic_grc": self.ground.intrinsic_grc if self.ground else None,
            "final_grc": self.ground.final_grc if self.ground else None,
            "initial_arc": str(self.initial_arc) if self.initial_arc else None,
            "residual_arc": str(self.residual_arc) if self.residual_arc else None,
            "sail": str(self.resolved_sail) if self.resolved_sail else None,
            "out_of_scope": isinstance(self.sail, OutOfScope),
            "oso": self.oso.to_dict() if self.oso else None,
            "containment": self.containment.to_dict() if self.containment else None,
            "missing_fields": list(self.missing_fields),
            "error": self.error,
        }


@dataclass(frozen=True)
class ProjectSORASummary:
    """Project-level worst case across all sites.

    ``project_sail`` only covers sites that resolved to a SAIL. While any site is
    incomplete or invalid it is provisional and may understate the project.
    """

    sites: tuple[SiteResult, ...]
    project_sail: SAIL | None
    governing_site_ids: tuple[str, ...]
    within_scope: bool
    out_of_scope_site_ids: tuple[str, ...]
    incomplete_site_ids: tuple[str, ...]
    invalid_site_ids: tuple[str, ...]

    @property
    def complete(self) -> bool:
        return not self.incomplete_site_ids and not self.invalid_site_ids

    @property
    def provisional(self) -> bool:
        return not self.complete

    def site(self, site_id: str) -> SiteResult:
        for result in self.sites:
            if result.site_id == site_id:
                return result
        raise KeyError(site_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_sail": str(self.project_sail) if self.project_sail else None,
            "project_sail_provisional": self.provisional,
            "governing_site_ids": list(self.governing_site_ids),
            "within_scope": self.within_scope,
            "complete": self.complete,
            "out_of_scope_site_ids": list(self.out_of_scope_site_ids),
            "incomplete_site_ids": list(self.incomplete_site_ids),
            "invalid_site_ids": list(self.invalid_site_ids),
            "sites": [result.to_dict() for result in self.sites],
        }


def site_speed(site: SiteAssessment) -> float:
    """Max speed for the adjacent-area distance, bounded by the UA bucket if unset."""

    if site.max_speed is not None:
        return site.max_speed
    return float(UA_CHARACTERISTICS[UACharacteristic.parse(site.ua_characteristic)].max_speed)


def assess_site(site: SiteAssessment) -> SiteResult:
    """Run every resolver for one site.

    Raises IncompleteAssessment when population, UA characteristic or initial
    ARC is missing, and InvalidCategory for keys outside the tables.
    """

    missing = site.missing_required()
    if missing:
        raise IncompleteAssessment(missing)

    ground = resolve_ground_risk(site.population_category, site.ua_characteristic, site.mitigations)
    initial_arc = ARC.parse(site.initial_arc)
    residual_arc = resolve_air_risk(initial_arc, site.tmpr)
    sail = resolve_sail(ground.final_grc, residual_arc)
    if isinstance(sail, OutOfScope):
        return SiteResult(
            site_id=site.site_id,
            status=SiteStatus.OUT_OF_SCOPE,
            ground=ground,
            initial_arc=initial_arc,
            residual_arc=residual_arc,
            sail=sail,
        )

    oso = check_oso_compliance(sail, site.oso_compliance)
    containment = None
    if site.adjacent_population_category:
        containment = resolve_containment(
            sail,
            site.population_category,
            site.adjacent_population_category,
            site.containment,
            site_speed(site),
        )
    return SiteResult(
        site_id=site.site_id,
        status=SiteStatus.ASSESSED,
        ground=ground,
        initial_arc=initial_arc,
        residual_arc=residual_arc,
        sail=sail,
        oso=oso,
        containment=containment,
    )


def _assess_or_flag(site: SiteAssessment) -> SiteResult:
    try:
        return assess_site(site)
    except IncompleteAssessment as exc:
        logger.warning("site_incomplete", extra={"site_id": site.site_id, "missing": list(exc.missing)})
        return SiteResult(
            site_id=site.site_id,
            status=SiteStatus.INCOMPLETE,
            missing_fields=exc.missing,
            error=str(exc),
        )
    except InvalidCategory as exc:
        logger.warning("site_invalid", extra={"site_id": site.site_id, "error": str(exc)})
        return SiteResult(site_id=site.site_id, status=SiteStatus.INVALID, error=str(exc))


class AssessmentCache:
    """Thread-safe LRU memo of site results keyed by the record's content hash."""

    def __init__(self, max_entries: int = 256) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._entries: OrderedDict[str, SiteResult] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_compute(self, site: SiteAssessment) -> SiteResult:
        key = site.content_hash()
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                self.hits += 1
                return cached
            self.misses += 1
        # Resolvers are pure, so computing outside the lock is safe.
        result = _assess_or_flag(site)
        with self._lock:
            self._entries[key] = result
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
        return result

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0


def aggregate(sites: Iterable[SiteAssessment], cache: AssessmentCache | None = None) -> ProjectSORASummary:
    """Assess every site and reduce to the project-level worst case."""

    site_list = sorted(sites, key=lambda site: site.site_id)
    seen: set[str] = set()
    for site in site_list:
        if site.site_id in seen:
            raise ValueError(f"Duplicate site_id {site.site_id!r}")
        seen.add(site.site_id)

    results = tuple(cache.get_or_compute(site) if cache is not None else _assess_or_flag(site) for site in site_list)

    project_sail = highest_sail([result.resolved_sail for result in results if result.resolved_sail])
    governing = tuple(result.site_id for result in results if project_sail and result.resolved_sail is project_sail)
    out_of_scope = tuple(result.site_id for result in results if result.status is SiteStatus.OUT_OF_SCOPE)
    summary = ProjectSORASummary(
        sites=results,
        project_sail=project_sail,
        governing_site_ids=governing,
        within_scope=not out_of_scope,
        out_of_scope_site_ids=out_of_scope,
        incomplete_site_ids=tuple(r.site_id for r in results if r.status is SiteStatus.INCOMPLETE),
        invalid_site_ids=tuple(r.site_id for r in results if r.status is SiteStatus.INVALID),
    )
    logger.info(
        "project_aggregated",
        extra={
            "sites": len(results),
            "project_sail": str(project_sail) if project_sail else None,
            "within_scope": summary.within_scope,
        },
    )
    return summary
