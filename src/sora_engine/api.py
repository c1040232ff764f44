"""Public API facade for the classification engine.

This module provides a single, discoverable entry point that wires settings,
logging and the result cache around the pure resolvers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import logging

from .aggregate import AssessmentCache, ProjectSORASummary, SiteResult, aggregate, assess_site
from .config import EngineSettings
from .containment import ContainmentReport
from .errors import IncompleteAssessment
from .logging_utils import configure_logging
from .models import SiteAssessment
from .oso import OSOReport


@dataclass
class SoraEngine:
    """Configured engine handle for callers that recompute on every change."""

    settings: EngineSettings
    cache: AssessmentCache | None = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def assess(self, site: SiteAssessment) -> SiteResult:
        """Assess one site, raising IncompleteAssessment/InvalidCategory on bad input."""

        return assess_site(site)

    def summarize(self, sites: Iterable[SiteAssessment]) -> ProjectSORASummary:
        return aggregate(sites, cache=self.cache)

    def oso_report(self, site: SiteAssessment) -> OSOReport | None:
        """OSO report for a site, or None when the site is out of scope."""

        return assess_site(site).oso

    def containment_report(self, site: SiteAssessment) -> ContainmentReport | None:
        """Containment report for a site, or None when the site is out of scope."""

        if not site.adjacent_population_category:
            raise IncompleteAssessment(["adjacent_population_category"])
        return assess_site(site).containment


def build_engine(settings: EngineSettings | None = None, logger: logging.Logger | None = None) -> SoraEngine:
    """Create a SoraEngine with logging configured and the cache sized from settings."""

    settings = settings or EngineSettings()
    configure_logging(settings.logging)
    logger = logger or logging.getLogger(__name__)
    cache = AssessmentCache(max_entries=settings.cache.max_entries) if settings.cache.enabled else None
    logger.info("engine_built", extra={"cache_enabled": cache is not None})
    return SoraEngine(settings=settings, cache=cache, logger=logger)
