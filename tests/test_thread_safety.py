import threading

from sora_engine.aggregate import AssessmentCache, aggregate
from sora_engine.models import SiteAssessment
from sora_engine.tables import SAIL


def _sites() -> list[SiteAssessment]:
    return [
        SiteAssessment(site_id=f"site-{index}", population_category=population, ua_characteristic="1m_25ms", initial_arc="ARC-b")
        for index, population in enumerate(["remote", "sparsely", "suburban", "lightly"])
    ]


def test_shared_cache_thread_safety_smoke() -> None:
    cache = AssessmentCache(max_entries=2)
    sites = _sites()
    errors: list[Exception] = []
    sails: list[SAIL | None] = []

    def worker() -> None:
        try:
            for _ in range(100):
                sails.append(aggregate(sites, cache=cache).project_sail)
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert not errors
    # Eviction under contention never changes the answer.
    assert set(sails) == {SAIL.IV}
    assert len(cache) <= 2
    assert cache.hits + cache.misses == 8 * 100 * len(sites)
