"""Auto-suggestion of assessment inputs from site survey and aircraft data.

Suggestions are offered, never forced: ``apply_suggestions`` leaves every
field the user owns untouched, including stored values with no recorded source.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import logging
from typing import Iterable

from .models import SUGGESTIBLE_FIELDS, FieldSource, SiteAssessment
from .tables import ARC, UA_CHARACTERISTICS, PopulationCategory, UACharacteristic

logger = logging.getLogger(__name__)

FEET_PER_METRE = 3.28084

# Site survey vocabulary that differs from the population category keys.
_SURVEY_POPULATION_ALIASES = {
    "rural": PopulationCategory.LIGHTLY,
    "lightly_populated": PopulationCategory.LIGHTLY,
    "sparse": PopulationCategory.SPARSELY,
    "sparsely_populated": PopulationCategory.SPARSELY,
    "urban": PopulationCategory.HIGH_DENSITY,
    "high_density": PopulationCategory.HIGH_DENSITY,
    "crowd": PopulationCategory.ASSEMBLY,
}

_CONTROLLED_CLASSES = {"A", "B", "C", "D", "E"}


@dataclass(frozen=True)
class Suggestion:
    field: str
    value: object
    source: FieldSource
    reason: str


def suggest_population_category(survey_category: str | None) -> PopulationCategory | None:
    """Map a site survey population value to a population category."""

    if not survey_category:
        return None
    key = survey_category.strip().lower()
    try:
        return PopulationCategory(key)
    except ValueError:
        return _SURVEY_POPULATION_ALIASES.get(key)


def suggest_ua_characteristic(max_dimension: float, max_speed: float) -> UACharacteristic | None:
    """First UA bucket whose dimension and speed bounds are not exceeded."""

    for characteristic, band in UA_CHARACTERISTICS.items():
        if band.fits(max_dimension, max_speed):
            return characteristic
    logger.warning(
        "aircraft_exceeds_ua_buckets",
        extra={"max_dimension": max_dimension, "max_speed": max_speed},
    )
    return None


def airspace_type_from_class(airspace_class: str | None) -> str:
    """Reduce an ICAO airspace class letter to controlled/uncontrolled."""

    if airspace_class and airspace_class.strip().upper() in _CONTROLLED_CLASSES:
        return "controlled"
    return "uncontrolled"


def suggest_initial_arc(
    altitude_agl_m: float,
    airspace_type: str,
    airport_environment: bool = False,
    urban: bool = False,
) -> tuple[ARC, str]:
    """Suggest an initial ARC and the reason, following the ARC decision tree."""

    altitude_ft = altitude_agl_m * FEET_PER_METRE
    if airspace_type in ("atypical", "segregated"):
        return ARC.A, "Atypical/segregated airspace"
    if altitude_ft > 60000:
        return ARC.B, "Above FL600"
    if airport_environment:
        if airspace_type in ("controlled", "class_b", "class_c", "class_d"):
            return ARC.D, "Airport environment in controlled airspace"
        return ARC.C, "Airport environment"
    if altitude_ft > 500:
        if airspace_type in ("mode_c_veil", "tmz"):
            return ARC.C, "Above 500ft AGL in Mode-C Veil/TMZ"
        if airspace_type == "controlled":
            return ARC.D, "Above 500ft AGL in controlled airspace"
        if urban:
            return ARC.C, "Above 500ft AGL over urban area"
        return ARC.C, "Above 500ft AGL"
    if airspace_type in ("mode_c_veil", "tmz"):
        return ARC.C, "Below 500ft AGL in Mode-C Veil/TMZ"
    if airspace_type == "controlled":
        return ARC.C, "Below 500ft AGL in controlled airspace"
    if urban:
        return ARC.C, "Below 500ft AGL over urban area"
    return ARC.B, "Below 500ft AGL in uncontrolled airspace over rural area"


def suggest_for_site(
    survey_population: str | None = None,
    survey_adjacent_population: str | None = None,
    max_dimension: float | None = None,
    max_speed: float | None = None,
    altitude_agl_m: float | None = None,
    airspace_class: str | None = None,
    near_aerodrome: bool = False,
) -> list[Suggestion]:
    """Collect every suggestion the available collaborator data supports."""

    suggestions: list[Suggestion] = []
    population = suggest_population_category(survey_population)
    if population is not None:
        suggestions.append(
            Suggestion("population_category", population, FieldSource.SITE_SURVEY, "Site survey population")
        )
    adjacent = suggest_population_category(survey_adjacent_population)
    if adjacent is not None:
        suggestions.append(
            Suggestion(
                "adjacent_population_category", adjacent, FieldSource.SITE_SURVEY, "Site survey adjacent area"
            )
        )
    if max_dimension is not None and max_speed is not None:
        characteristic = suggest_ua_characteristic(max_dimension, max_speed)
        if characteristic is not None:
            suggestions.append(
                Suggestion(
                    "ua_characteristic",
                    characteristic,
                    FieldSource.AIRCRAFT,
                    f"Aircraft {max_dimension} m / {max_speed} m/s",
                )
            )
    if max_speed is not None:
        suggestions.append(Suggestion("max_speed", max_speed, FieldSource.AIRCRAFT, "Aircraft max speed"))
    if altitude_agl_m is not None:
        urban = population is not None and population.rank >= PopulationCategory.SUBURBAN.rank
        arc, reason = suggest_initial_arc(
            altitude_agl_m,
            airspace_type_from_class(airspace_class),
            airport_environment=near_aerodrome,
            urban=urban,
        )
        suggestions.append(Suggestion("initial_arc", arc, FieldSource.FLIGHT_PLAN, reason))
    return suggestions


def apply_suggestions(site: SiteAssessment, suggestions: Iterable[Suggestion]) -> list[Suggestion]:
    """Write suggestions into empty or collaborator-owned fields of ``site``.

    Returns the suggestions that were applied.
    """

    applied: list[Suggestion] = []
    for suggestion in suggestions:
        if suggestion.field not in SUGGESTIBLE_FIELDS:
            raise ValueError(f"{suggestion.field} cannot be auto-suggested")
        if not site.accepts_suggestion(suggestion.field):
            logger.debug("suggestion_skipped_user_value", extra={"field": suggestion.field})
            continue
        value = str(suggestion.value) if isinstance(suggestion.value, StrEnum) else suggestion.value
        setattr(site, suggestion.field, value)
        site.field_sources = {**site.field_sources, suggestion.field: suggestion.source}
        applied.append(suggestion)
    return applied
