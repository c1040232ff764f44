import pytest

from sora_engine.models import FieldSource, SiteAssessment
from sora_engine.suggest import (
    Suggestion,
    airspace_type_from_class,
    apply_suggestions,
    suggest_for_site,
    suggest_initial_arc,
    suggest_population_category,
    suggest_ua_characteristic,
)
from sora_engine.tables import ARC, PopulationCategory, UACharacteristic


def test_population_vocabulary_mapping() -> None:
    assert suggest_population_category("sparsely") is PopulationCategory.SPARSELY
    assert suggest_population_category("rural") is PopulationCategory.LIGHTLY
    assert suggest_population_category("Urban") is PopulationCategory.HIGH_DENSITY
    assert suggest_population_category("crowd") is PopulationCategory.ASSEMBLY
    assert suggest_population_category("moon base") is None
    assert suggest_population_category(None) is None


def test_first_bucket_not_exceeded() -> None:
    assert suggest_ua_characteristic(0.5, 20) is UACharacteristic.UP_TO_1M
    assert suggest_ua_characteristic(1.0, 25) is UACharacteristic.UP_TO_1M
    assert suggest_ua_characteristic(0.9, 30) is UACharacteristic.UP_TO_3M
    assert suggest_ua_characteristic(12, 60) is UACharacteristic.UP_TO_20M
    assert suggest_ua_characteristic(45, 50) is None


def test_initial_arc_decision_tree() -> None:
    assert suggest_initial_arc(120, "uncontrolled")[0] is ARC.B
    assert suggest_initial_arc(120, "uncontrolled", urban=True)[0] is ARC.C
    assert suggest_initial_arc(120, "controlled")[0] is ARC.C
    assert suggest_initial_arc(200, "controlled")[0] is ARC.D
    assert suggest_initial_arc(60, "controlled", airport_environment=True)[0] is ARC.D
    assert suggest_initial_arc(60, "uncontrolled", airport_environment=True)[0] is ARC.C
    arc, reason = suggest_initial_arc(60, "segregated")
    assert arc is ARC.A
    assert reason == "Atypical/segregated airspace"


def test_airspace_class_mapping() -> None:
    assert airspace_type_from_class("c") == "controlled"
    assert airspace_type_from_class("G") == "uncontrolled"
    assert airspace_type_from_class(None) == "uncontrolled"


def test_suggest_for_site_collects_sources() -> None:
    suggestions = suggest_for_site(
        survey_population="suburban",
        max_dimension=0.8,
        max_speed=19.0,
        altitude_agl_m=100,
        airspace_class="G",
    )
    by_field = {suggestion.field: suggestion for suggestion in suggestions}
    assert by_field["population_category"].source is FieldSource.SITE_SURVEY
    assert by_field["ua_characteristic"].value is UACharacteristic.UP_TO_1M
    assert by_field["max_speed"].value == 19.0
    # Suburban counts as urban for the ARC suggestion.
    assert by_field["initial_arc"].value is ARC.C
    assert "adjacent_population_category" not in by_field


def test_apply_suggestions_fills_empty_fields() -> None:
    site = SiteAssessment(site_id="s1")
    applied = apply_suggestions(site, suggest_for_site(survey_population="rural", altitude_agl_m=90))
    assert len(applied) == 2
    assert site.population_category == "lightly"
    assert site.initial_arc == "ARC-b"
    assert site.field_sources["population_category"] is FieldSource.SITE_SURVEY


def test_apply_suggestions_never_overwrites_user_values() -> None:
    site = SiteAssessment(site_id="s1")
    site.set_by_user(population_category="remote")
    apply_suggestions(site, [Suggestion("population_category", PopulationCategory.SUBURBAN, FieldSource.SITE_SURVEY, "")])
    assert site.population_category == "remote"
    assert site.is_user_set("population_category")


def test_collaborator_values_can_be_refreshed() -> None:
    site = SiteAssessment(site_id="s1")
    apply_suggestions(site, suggest_for_site(max_dimension=0.5, max_speed=15))
    apply_suggestions(site, suggest_for_site(max_dimension=2.5, max_speed=30))
    assert site.ua_characteristic == "3m_35ms"
    assert site.max_speed == 30


def test_unknown_field_rejected() -> None:
    site = SiteAssessment(site_id="s1")
    with pytest.raises(ValueError):
        apply_suggestions(site, [Suggestion("oso_compliance", {}, FieldSource.SITE_SURVEY, "")])


def test_stored_value_without_source_is_kept() -> None:
    site = SiteAssessment(site_id="s1", population_category="suburban", ua_characteristic="3m_35ms")
    applied = apply_suggestions(
        site, suggest_for_site(survey_population="remote", max_dimension=0.5, max_speed=15, altitude_agl_m=90)
    )
    assert site.population_category == "suburban"
    assert site.ua_characteristic == "3m_35ms"
    assert "population_category" not in site.field_sources
    assert {suggestion.field for suggestion in applied} == {"max_speed", "initial_arc"}


def test_user_cleared_field_stays_empty() -> None:
    site = SiteAssessment(site_id="s1")
    site.set_by_user(population_category=None)
    apply_suggestions(site, suggest_for_site(survey_population="remote"))
    assert site.population_category is None
