"""Public generation operations used by the rest of the application."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from niume_ai.domain.energy import daily_calorie_goal
from niume_ai.domain.errors import UnparseableResponse
from niume_ai.domain.generation import (
    GenerationRequest,
    ImagePayload,
    detect_image_mime_type,
)
from niume_ai.domain.moderation import ModerationVerdict
from niume_ai.domain.nutrition import DEFAULT_UNIT_WEIGHT_G, NutritionItem
from niume_ai.domain.profile import TrainingLocation, TrainingProfile
from niume_ai.services import prompts
from niume_ai.services.coercion import MACRO_FIELDS, coerce, coerce_number
from niume_ai.services.extraction import extract
from niume_ai.services.fact_cache import FactCacheService
from niume_ai.services.moderation import ModerationService
from niume_ai.services.orchestrator import FallbackOrchestrator

_logger = logging.getLogger(__name__)

PLAN_MAX_OUTPUT_TOKENS = 16384


@dataclass
class GenerationPipeline:
    """Facade composing fallback, extraction, coercion and fact reconciliation.

    Every operation raises only ``GenerationError`` subclasses.
    """

    orchestrator: FallbackOrchestrator
    fact_cache: FactCacheService
    moderation: ModerationService
    timeout_seconds: float = 60

    async def analyze_food_text(self, text: str) -> list[NutritionItem]:
        """Estimate nutrition for every food described in ``text``."""
        payload = await self._generate_json(prompts.food_text_prompt(text))
        return self._nutrition_items(payload)

    async def analyze_food_photo(
        self, image_bytes: bytes, mime_type: str | None = None
    ) -> list[NutritionItem]:
        """Estimate nutrition for every food visible in a photo."""
        image = ImagePayload.from_bytes(
            image_bytes, mime_type or detect_image_mime_type(image_bytes)
        )
        payload = await self._generate_json(prompts.food_photo_prompt(), image=image)
        return self._nutrition_items(payload)

    async def generate_workout_plan(
        self, profile: TrainingProfile
    ) -> dict[str, object]:
        """Generate a multi-week workout plan."""
        payload = await self._generate_json(
            prompts.workout_plan_prompt(profile),
            max_output_tokens=PLAN_MAX_OUTPUT_TOKENS,
        )
        return _require_object(payload, "workout plan")

    async def generate_workout_day(
        self,
        profile: TrainingProfile,
        day_name: str,
        available_minutes: int,
        location: TrainingLocation,
        avoid_exercises: list[str] | None = None,
    ) -> dict[str, object]:
        """Regenerate a single workout day."""
        prompt = prompts.workout_day_prompt(
            profile, day_name, available_minutes, location, avoid_exercises or []
        )
        return _require_object(await self._generate_json(prompt), "workout day")

    async def generate_cardio_plan(
        self,
        profile: TrainingProfile,
        cardio_type: str,
        goal_minutes: int,
        active_days: list[str] | None = None,
    ) -> dict[str, object]:
        """Generate a multi-week cardio plan."""
        prompt = prompts.cardio_plan_prompt(
            profile, cardio_type, active_days or profile.active_days, goal_minutes
        )
        payload = await self._generate_json(
            prompt, max_output_tokens=PLAN_MAX_OUTPUT_TOKENS
        )
        return _require_object(payload, "cardio plan")

    async def generate_modality_plan(
        self, profile: TrainingProfile, modality: str
    ) -> dict[str, object]:
        """Generate a multi-week plan for a sport or training modality."""
        payload = await self._generate_json(
            prompts.modality_plan_prompt(profile, modality),
            max_output_tokens=PLAN_MAX_OUTPUT_TOKENS,
        )
        return _require_object(payload, "modality plan")

    async def generate_modality_exercises(
        self, modality: str, count: int = 6
    ) -> list[dict[str, object]]:
        """List exercises that belong to a modality."""
        payload = await self._generate_json(
            prompts.modality_exercises_prompt(modality, count)
        )
        exercises = payload.get("exercises") if isinstance(payload, dict) else payload
        if not isinstance(exercises, list):
            raise UnparseableResponse("Expected a list of exercises")
        return [exercise for exercise in exercises if isinstance(exercise, dict)]

    async def generate_diet_plan(self, profile: TrainingProfile) -> dict[str, object]:
        """Generate a daily diet plan sized to the profile's calorie goal."""
        daily_calories = daily_calorie_goal(profile)
        payload = await self._generate_json(
            prompts.diet_plan_prompt(profile, daily_calories)
        )
        plan = _require_object(payload, "diet plan")
        if not coerce_number(plan.get("daily_calories")):
            plan["daily_calories"] = daily_calories
        return plan

    async def suggest_units(self, food: str) -> list[str]:
        """Common measuring units for a food."""
        payload = await self._generate_json(prompts.suggest_units_prompt(food))
        return _string_list(payload, "units")

    async def suggest_foods(self, query: str) -> list[str]:
        """Common variations of a food name."""
        payload = await self._generate_json(prompts.suggest_foods_prompt(query))
        return _string_list(payload, "foods")

    async def analyze_body_photo(
        self, image_bytes: bytes, mime_type: str | None = None
    ) -> str:
        """Free-text body composition feedback for a photo."""
        image = ImagePayload.from_bytes(
            image_bytes, mime_type or detect_image_mime_type(image_bytes)
        )
        return await self._generate_text(prompts.body_photo_prompt(), image=image)

    async def exercise_instructions(self, exercise_name: str) -> str:
        """Short execution instructions for an exercise."""
        return await self._generate_text(
            prompts.exercise_instructions_prompt(exercise_name)
        )

    async def moderate_text(
        self, value: str, context: str = "exercício"
    ) -> ModerationVerdict:
        """Moderate a user-provided name."""
        return await self.moderation.moderate_text(value, context)

    async def moderate_photo_url(self, url: str) -> ModerationVerdict:
        """Moderate a stored photo by its public URL."""
        return await self.moderation.moderate_photo_url(url)

    async def chat(self, message: str, context: str) -> str:
        """Reply to a user message as the in-app trainer."""
        return await self._generate_text(
            prompts.chat_prompt(message, context), temperature=0.7
        )

    async def _generate_json(
        self,
        prompt: str,
        *,
        image: ImagePayload | None = None,
        max_output_tokens: int | None = None,
    ) -> object:
        request = GenerationRequest(
            prompt=prompt,
            image=image,
            expects_json=True,
            timeout_seconds=self.timeout_seconds,
            temperature=0.4 if image is not None else 0.2,
            max_output_tokens=max_output_tokens,
        )
        response = await self.orchestrator.generate(request)
        return coerce(extract(response.text))

    async def _generate_text(
        self,
        prompt: str,
        *,
        image: ImagePayload | None = None,
        temperature: float = 0.2,
    ) -> str:
        request = GenerationRequest(
            prompt=prompt,
            image=image,
            expects_json=False,
            timeout_seconds=self.timeout_seconds,
            temperature=temperature,
        )
        response = await self.orchestrator.generate(request)
        return response.text.strip()

    def _nutrition_items(self, payload: object) -> list[NutritionItem]:
        items = [
            self.fact_cache.reconcile(to_nutrition_item(raw))
            for raw in _item_objects(payload)
        ]
        if not items:
            _logger.info("Food analysis returned no items")
        return items


def to_nutrition_item(raw: dict[str, object]) -> NutritionItem:
    """Build a nutrition item from one coerced payload object."""
    values: dict[str, object] = {
        "description": str(raw.get("description") or raw.get("name") or "").strip()
    }
    for field in MACRO_FIELDS:
        values[field] = max(0, coerce_number(raw.get(field)))
    unit_weight = coerce_number(raw.get("unit_weight"))
    values["unit_weight"] = unit_weight if unit_weight > 0 else DEFAULT_UNIT_WEIGHT_G
    try:
        return NutritionItem.model_validate(values)
    except ValidationError as exc:
        raise UnparseableResponse(f"Invalid nutrition item: {exc}") from exc


def _item_objects(payload: object) -> list[dict[str, object]]:
    """Accept ``{"items": [...]}``, a bare array, or a single item object."""
    if isinstance(payload, dict):
        if "items" in payload:
            payload = payload["items"]
        elif not payload:
            return []
        else:
            payload = [payload]
    if not isinstance(payload, list):
        raise UnparseableResponse("Expected a list of food items")
    return [item for item in payload if isinstance(item, dict)]


def _require_object(payload: object, label: str) -> dict[str, object]:
    if not isinstance(payload, dict):
        raise UnparseableResponse(f"Expected a JSON object for the {label}")
    return payload


def _string_list(payload: object, key: str) -> list[str]:
    values = payload.get(key, []) if isinstance(payload, dict) else payload
    if not isinstance(values, list):
        raise UnparseableResponse(f"Expected a list of {key}")
    return [str(value).strip() for value in values if str(value).strip()]
