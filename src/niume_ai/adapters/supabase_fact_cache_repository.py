"""Supabase implementation of the shared nutrition fact cache."""

from dataclasses import dataclass

from supabase import Client

from niume_ai.domain.nutrition import FactCacheEntry, Provenance
from niume_ai.services.fact_cache import FactCacheRepository

DEFAULT_TABLE = "food_facts"


@dataclass
class SupabaseFactCacheRepository(FactCacheRepository):
    """Supabase-backed repository for crowd-sourced nutrition facts."""

    client: Client
    table_name: str = DEFAULT_TABLE

    def find_by_name(self, name: str) -> FactCacheEntry | None:
        """Return the first entry whose name matches, ignoring case."""
        response = (
            self.client.table(self.table_name)
            .select("*")
            .ilike("name", _escape_like(name))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def insert(self, entry: FactCacheEntry) -> None:
        """Insert a new entry."""
        self.client.table(self.table_name).insert(
            {
                "name": entry.name,
                "calories": entry.calories,
                "protein": entry.protein,
                "carbs": entry.carbs,
                "fat": entry.fat,
                "unit_weight": entry.unit_weight,
                "provenance": entry.provenance.value,
            }
        ).execute()


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so the pattern matches literally."""
    escaped = value.replace("\\", "\\\\")
    for wildcard in ("%", "_", "*"):
        escaped = escaped.replace(wildcard, f"\\{wildcard}")
    return escaped


def _parse_entry(row: dict[str, object]) -> FactCacheEntry:
    """Parse a fact cache row into a domain model."""
    unit_weight = row.get("unit_weight")
    provenance_raw = row.get("provenance") or Provenance.CURATED.value
    try:
        provenance = Provenance(str(provenance_raw))
    except ValueError:
        provenance = Provenance.CURATED
    return FactCacheEntry(
        name=str(row.get("name", "")),
        calories=round(float(row.get("calories") or 0)),
        protein=round(float(row.get("protein") or 0)),
        carbs=round(float(row.get("carbs") or 0)),
        fat=round(float(row.get("fat") or 0)),
        unit_weight=round(float(unit_weight)) if unit_weight is not None else None,
        provenance=provenance,
    )
