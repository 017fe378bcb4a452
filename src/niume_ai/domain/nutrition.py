"""Nutrition domain models."""

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_UNIT_WEIGHT_G = 100


class NutritionItem(BaseModel):
    """One food item with macros, as returned by every food analysis."""

    model_config = ConfigDict(frozen=True)

    description: str
    calories: int = Field(default=0, ge=0)
    protein: int = Field(default=0, ge=0)
    carbs: int = Field(default=0, ge=0)
    fat: int = Field(default=0, ge=0)
    unit_weight: int = Field(default=DEFAULT_UNIT_WEIGHT_G, gt=0)

    @property
    def has_macros(self) -> bool:
        """True when at least one macro field is non-zero."""
        return any((self.calories, self.protein, self.carbs, self.fat))


class Provenance(StrEnum):
    """Where a fact-cache entry came from."""

    CURATED = "curated"
    AI_CROWDSOURCED = "ai-crowdsourced"


@dataclass(frozen=True)
class FactCacheEntry:
    """Shared nutrition fact keyed by a case-insensitive food name."""

    name: str
    calories: int
    protein: int
    carbs: int
    fat: int
    unit_weight: int | None
    provenance: Provenance

    @classmethod
    def from_item(
        cls, item: NutritionItem, provenance: Provenance = Provenance.AI_CROWDSOURCED
    ) -> "FactCacheEntry":
        """Create an entry from an analyzed item."""
        return cls(
            name=normalize_food_name(item.description),
            calories=item.calories,
            protein=item.protein,
            carbs=item.carbs,
            fat=item.fat,
            unit_weight=item.unit_weight,
            provenance=provenance,
        )

    def to_item(
        self, fallback_unit_weight: int = DEFAULT_UNIT_WEIGHT_G
    ) -> NutritionItem:
        """Return the stored facts as a nutrition item."""
        unit_weight = self.unit_weight
        if unit_weight is None or unit_weight <= 0:
            unit_weight = fallback_unit_weight
        return NutritionItem(
            description=self.name,
            calories=max(0, self.calories),
            protein=max(0, self.protein),
            carbs=max(0, self.carbs),
            fat=max(0, self.fat),
            unit_weight=unit_weight,
        )


def normalize_food_name(name: str) -> str:
    """Collapse whitespace so equivalent names share one cache key."""
    return " ".join(name.split())
