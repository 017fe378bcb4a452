"""Reconciliation of AI-derived nutrition items with the shared fact cache."""

import logging
from dataclasses import dataclass
from typing import Protocol

from niume_ai.domain.nutrition import (
    FactCacheEntry,
    NutritionItem,
    Provenance,
    normalize_food_name,
)
from niume_ai.services.cache import Cache

_logger = logging.getLogger(__name__)


class FactCacheRepository(Protocol):
    """Persistence interface for shared nutrition facts."""

    def find_by_name(self, name: str) -> FactCacheEntry | None:
        """Return the first entry matching ``name`` case-insensitively."""

    def insert(self, entry: FactCacheEntry) -> None:
        """Insert a new entry."""


@dataclass
class FactCacheService:
    """Prefers stored facts over AI estimates and records new foods.

    Lookup always runs before insert, so curated rows are never replaced.
    Concurrent misses for the same name may both insert; readers take the
    first row found.
    """

    repository: FactCacheRepository
    cache: Cache
    hit_ttl_seconds: float = 3600

    def reconcile(self, item: NutritionItem) -> NutritionItem:
        """Return stored facts for ``item`` or crowdsource ``item`` itself."""
        name = normalize_food_name(item.description)
        if not name:
            return item

        try:
            entry = self._lookup(name)
        except Exception:
            _logger.exception("Fact cache lookup failed for %r", name)
            return item
        if entry is not None:
            return entry.to_item(fallback_unit_weight=item.unit_weight)

        if item.has_macros:
            self._crowdsource(item)
        return item

    def _lookup(self, name: str) -> FactCacheEntry | None:
        cache_key = f"facts:{name.casefold()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FactCacheEntry):
            return cached
        entry = self.repository.find_by_name(name)
        if entry is not None:
            self.cache.set(cache_key, entry, ttl_seconds=self.hit_ttl_seconds)
        return entry

    def _crowdsource(self, item: NutritionItem) -> None:
        entry = FactCacheEntry.from_item(item, provenance=Provenance.AI_CROWDSOURCED)
        try:
            self.repository.insert(entry)
        except Exception:
            _logger.exception("Failed to store crowdsourced facts for %r", entry.name)
            return
        _logger.info("Crowdsourced nutrition facts for %r", entry.name)
