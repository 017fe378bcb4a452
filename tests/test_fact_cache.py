"""Tests for fact cache reconciliation."""

from dataclasses import replace

from niume_ai.domain.nutrition import NutritionItem, Provenance
from niume_ai.services.cache import InMemoryCache
from niume_ai.services.fact_cache import FactCacheService
from tests.conftest import FakeClock, InMemoryFactCacheRepository, curated


def _service(repository: InMemoryFactCacheRepository) -> FactCacheService:
    return FactCacheService(repository=repository, cache=InMemoryCache())


def test_stored_facts_take_precedence_over_estimates() -> None:
    repository = InMemoryFactCacheRepository(entries=[curated("Banana", 90, 1, 23)])
    service = _service(repository)

    result = service.reconcile(NutritionItem(description="banana", calories=150))

    assert result.calories == 90
    assert result.carbs == 23
    assert result.description == "Banana"
    assert repository.inserted == []


def test_miss_is_crowdsourced_once() -> None:
    repository = InMemoryFactCacheRepository()
    service = _service(repository)
    item = NutritionItem(description="Tapioca  com queijo", calories=240, carbs=40)

    first = service.reconcile(item)
    second = service.reconcile(item)

    assert first == item
    assert second.calories == 240
    assert len(repository.inserted) == 1
    inserted = repository.inserted[0]
    assert inserted.name == "Tapioca com queijo"
    assert inserted.provenance is Provenance.AI_CROWDSOURCED


def test_insert_failure_returns_estimate() -> None:
    repository = InMemoryFactCacheRepository(fail_inserts=True)
    service = _service(repository)
    item = NutritionItem(description="açaí", calories=247)

    assert service.reconcile(item) == item
    assert service.reconcile(item) == item


def test_lookup_failure_returns_estimate() -> None:
    repository = InMemoryFactCacheRepository(fail_lookups=True)
    service = _service(repository)
    item = NutritionItem(description="cuscuz", calories=112)

    assert service.reconcile(item) == item
    assert repository.inserted == []


def test_items_without_macros_are_not_stored() -> None:
    repository = InMemoryFactCacheRepository()
    service = _service(repository)

    service.reconcile(NutritionItem(description="água"))

    assert repository.inserted == []


def test_blank_description_skips_the_cache() -> None:
    repository = InMemoryFactCacheRepository()
    service = _service(repository)

    service.reconcile(NutritionItem(description="  ", calories=10))

    assert repository.lookups == []


def test_hits_are_cached_until_expiry() -> None:
    clock = FakeClock()
    repository = InMemoryFactCacheRepository(entries=[curated("Ovo", 78, 6, 1, 5)])
    service = FactCacheService(
        repository=repository, cache=InMemoryCache(clock=clock), hit_ttl_seconds=60
    )
    item = NutritionItem(description="ovo", calories=70)

    service.reconcile(item)
    service.reconcile(item)
    assert repository.lookups == ["ovo"]

    clock.now += 61
    service.reconcile(item)
    assert repository.lookups == ["ovo", "ovo"]


def test_stored_unit_weight_falls_back_to_estimate() -> None:
    entry = replace(curated("Pão francês", 150), unit_weight=None)
    repository = InMemoryFactCacheRepository(entries=[entry])
    service = _service(repository)

    result = service.reconcile(
        NutritionItem(description="pão francês", calories=140, unit_weight=50)
    )

    assert result.calories == 150
    assert result.unit_weight == 50
