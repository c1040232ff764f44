import itertools

import pytest

from sora_engine.aggregate import AssessmentCache, SiteStatus, aggregate, assess_site
from sora_engine.errors import IncompleteAssessment, InvalidCategory
from sora_engine.models import SiteAssessment
from sora_engine.sail import OutOfScope
from sora_engine.tables import ARC, SAIL


def _site(site_id: str, population: str, ua: str, arc: str = "ARC-b", **extra: object) -> SiteAssessment:
    return SiteAssessment(
        site_id=site_id,
        population_category=population,
        ua_characteristic=ua,
        initial_arc=arc,
        **extra,
    )


def test_assess_site_runs_every_resolver() -> None:
    site = _site(
        "a",
        "sparsely",
        "1m_25ms",
        tmpr={"enabled": True, "type": "VLOS", "robustness": "low"},
        adjacent_population_category="suburban",
        containment={"method": "sw_geofence"},
    )
    result = assess_site(site)
    assert result.status is SiteStatus.ASSESSED
    assert result.ground.intrinsic_grc == 4
    assert result.residual_arc is ARC.A
    assert result.sail is SAIL.III
    assert result.oso is not None and result.oso.sail is SAIL.III
    assert result.containment is not None and result.containment.meets_requirement
    # No max speed recorded: the UA bucket bound is used.
    assert result.containment.adjacent_distance_m == 5000


def test_assess_site_refuses_to_guess() -> None:
    with pytest.raises(IncompleteAssessment) as excinfo:
        assess_site(SiteAssessment(site_id="empty", population_category="remote"))
    assert excinfo.value.missing == ("ua_characteristic", "initial_arc")


def test_containment_skipped_without_adjacent_population() -> None:
    assert assess_site(_site("a", "remote", "1m_25ms")).containment is None


def test_highest_sail_governs_project() -> None:
    sites = [_site("first", "sparsely", "1m_25ms"), _site("second", "suburban", "3m_35ms")]
    summary = aggregate(sites)
    assert summary.site("first").sail is SAIL.III
    assert summary.site("second").sail is SAIL.V
    assert summary.project_sail is SAIL.V
    assert summary.governing_site_ids == ("second",)
    assert summary.within_scope
    assert summary.complete
    assert not summary.provisional


def test_out_of_scope_sites_are_named() -> None:
    sites = [_site("ok", "remote", "1m_25ms"), _site("metro", "highdensity", "8m_75ms")]
    summary = aggregate(sites)
    assert not summary.within_scope
    assert summary.out_of_scope_site_ids == ("metro",)
    metro = summary.site("metro")
    assert isinstance(metro.sail, OutOfScope)
    assert metro.oso is None
    assert summary.project_sail is SAIL.II


def test_bad_sites_are_flagged_not_fatal() -> None:
    sites = [
        _site("good", "remote", "1m_25ms"),
        SiteAssessment(site_id="blank"),
        _site("stadium", "assembly", "20m_120ms"),
        _site("typo", "suburbn", "1m_25ms"),
    ]
    summary = aggregate(sites)
    assert summary.incomplete_site_ids == ("blank",)
    assert summary.invalid_site_ids == ("stadium", "typo")
    assert not summary.complete
    assert summary.project_sail is SAIL.II
    assert summary.site("blank").missing_fields == ("population_category", "ua_characteristic", "initial_arc")
    assert summary.provisional
    assert summary.to_dict()["project_sail_provisional"] is True


def test_aggregate_is_idempotent_and_order_independent() -> None:
    sites = [
        _site("a", "sparsely", "1m_25ms"),
        _site("b", "suburban", "3m_35ms", "ARC-c"),
        _site("c", "lightly", "8m_75ms"),
        _site("d", "highdensity", "20m_120ms"),
    ]
    baseline = aggregate(sites)
    assert aggregate(sites) == baseline
    for order in itertools.permutations(sites):
        summary = aggregate(order)
        assert summary == baseline
        assert summary.to_dict() == baseline.to_dict()


def test_duplicate_site_ids_rejected() -> None:
    with pytest.raises(ValueError):
        aggregate([_site("a", "remote", "1m_25ms"), _site("a", "lightly", "1m_25ms")])


def test_empty_project() -> None:
    summary = aggregate([])
    assert summary.project_sail is None
    assert summary.within_scope
    assert summary.governing_site_ids == ()


def test_cache_reuses_unchanged_sites() -> None:
    cache = AssessmentCache(max_entries=8)
    sites = [_site("a", "sparsely", "1m_25ms"), _site("b", "remote", "1m_25ms")]
    first = aggregate(sites, cache=cache)
    second = aggregate(sites, cache=cache)
    assert first == second
    assert cache.misses == 2
    assert cache.hits == 2

    sites[0].set_by_user(population_category="suburban")
    third = aggregate(sites, cache=cache)
    assert cache.misses == 3
    assert third.site("a").ground.intrinsic_grc == 5


def test_cache_evicts_least_recently_used() -> None:
    cache = AssessmentCache(max_entries=1)
    cache.get_or_compute(_site("a", "remote", "1m_25ms"))
    cache.get_or_compute(_site("b", "remote", "1m_25ms"))
    assert len(cache) == 1
    with pytest.raises(ValueError):
        AssessmentCache(max_entries=0)


def test_invalid_category_propagates_from_assess_site() -> None:
    with pytest.raises(InvalidCategory):
        assess_site(_site("x", "remote", "1m_25ms", arc="ARC-z"))


def test_bvlos_site_is_assessed_without_arc_credit() -> None:
    site = _site("bvlos", "sparsely", "1m_25ms", tmpr={"enabled": True, "type": "BVLOS", "robustness": "low"})
    result = aggregate([site]).site("bvlos")
    assert result.status is SiteStatus.ASSESSED
    assert result.residual_arc is ARC.B
    assert result.sail is SAIL.III
    assert result.oso is not None
