"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from niume_ai.api.models import (
    AIAction,
    AIRequest,
    CardioPlanPayload,
    ChatPayload,
    ExerciseInstructionsPayload,
    FoodTextPayload,
    ModalityExercisesPayload,
    ModalityPlanPayload,
    ModerateContentPayload,
    ModeratePhotoPayload,
    PhotoPayload,
    SuggestFoodsPayload,
    SuggestUnitsPayload,
    WorkoutDayPayload,
)
from niume_ai.app_logging import configure_logging
from niume_ai.containers import AppContainer
from niume_ai.domain.errors import GenerationError
from niume_ai.domain.moderation import ModerationVerdict
from niume_ai.domain.nutrition import NutritionItem
from niume_ai.domain.profile import TrainingProfile
from niume_ai.services.pipeline import GenerationPipeline

ModelT = TypeVar("ModelT", bound=BaseModel)
Handler = Callable[
    [GenerationPipeline, dict[str, object]], Awaitable[dict[str, object]]
]


class InvalidPayloadError(ValueError):
    """The payload does not match what the action expects."""


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(GenerationError)
    async def generation_error_handler(
        request: Request, exc: GenerationError
    ) -> JSONResponse:
        logger.warning("AI request failed: %s: %s", type(exc).__name__, exc)
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(InvalidPayloadError)
    async def invalid_payload_handler(
        request: Request, exc: InvalidPayloadError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/ai", response_model=None)
    async def ai(body: AIRequest, request: Request) -> dict[str, object]:
        """Dispatch one AI action to the generation pipeline."""
        state_container: AppContainer = request.app.state.container
        handler = _HANDLERS[body.action]
        return await handler(state_container.pipeline, body.payload)

    return app


def _parse(model: type[ModelT], payload: dict[str, object]) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        message = f"Invalid payload: {exc.error_count()} error(s)"
        raise InvalidPayloadError(message) from exc


def _decode_image(payload: PhotoPayload) -> bytes:
    encoded = payload.base64
    if encoded.startswith("data:") and "," in encoded:
        encoded = encoded.split(",", 1)[1]
    try:
        return base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise InvalidPayloadError("Invalid base64 image data") from exc


def _items(items: list[NutritionItem]) -> dict[str, object]:
    return {"items": [item.model_dump() for item in items]}


def _verdict(verdict: ModerationVerdict) -> dict[str, object]:
    line = "APPROVED" if verdict.approved else f"BLOCKED: {verdict.reason}"
    return {"verdict": line, "approved": verdict.approved, "reason": verdict.reason}


async def _analyze_food_text(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(FoodTextPayload, payload)
    return _items(await pipeline.analyze_food_text(parsed.description))


async def _analyze_food_photo(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(PhotoPayload, payload)
    items = await pipeline.analyze_food_photo(_decode_image(parsed), parsed.mime_type)
    return _items(items)


async def _generate_workout(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    return await pipeline.generate_workout_plan(_parse(TrainingProfile, payload))


async def _generate_workout_single(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(WorkoutDayPayload, payload)
    return await pipeline.generate_workout_day(
        parsed.profile,
        parsed.day_name,
        parsed.available_minutes,
        parsed.location,
        parsed.avoid_exercises,
    )


async def _generate_cardio_plan(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(CardioPlanPayload, payload)
    return await pipeline.generate_cardio_plan(
        parsed.profile, parsed.cardio_type, parsed.goal_minutes, parsed.active_days
    )


async def _generate_modality_plan(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(ModalityPlanPayload, payload)
    return await pipeline.generate_modality_plan(parsed.profile, parsed.modality.name)


async def _generate_modality_exercises(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(ModalityExercisesPayload, payload)
    exercises = await pipeline.generate_modality_exercises(
        parsed.modality.name, parsed.count
    )
    return {"exercises": exercises}


async def _generate_diet(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    return await pipeline.generate_diet_plan(_parse(TrainingProfile, payload))


async def _analyze_body(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(PhotoPayload, payload)
    image_bytes = _decode_image(parsed)
    analysis = await pipeline.analyze_body_photo(image_bytes, parsed.mime_type)
    return {"analysis": analysis}


async def _suggest_units(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(SuggestUnitsPayload, payload)
    return {"units": await pipeline.suggest_units(parsed.food)}


async def _suggest_foods(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(SuggestFoodsPayload, payload)
    return {"foods": await pipeline.suggest_foods(parsed.query)}


async def _chat(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(ChatPayload, payload)
    return {"reply": await pipeline.chat(parsed.message, parsed.context)}


async def _exercise_instructions(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(ExerciseInstructionsPayload, payload)
    instructions = await pipeline.exercise_instructions(parsed.exercise_name)
    return {"instructions": instructions}


async def _moderate_content(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(ModerateContentPayload, payload)
    return _verdict(await pipeline.moderate_text(parsed.input, parsed.context))


async def _moderate_photo(
    pipeline: GenerationPipeline, payload: dict[str, object]
) -> dict[str, object]:
    parsed = _parse(ModeratePhotoPayload, payload)
    return _verdict(await pipeline.moderate_photo_url(parsed.photo_url))


_HANDLERS: dict[AIAction, Handler] = {
    AIAction.ANALYZE_FOOD_TEXT: _analyze_food_text,
    AIAction.ANALYZE_FOOD_PHOTO: _analyze_food_photo,
    AIAction.GENERATE_WORKOUT: _generate_workout,
    AIAction.GENERATE_WORKOUT_SINGLE: _generate_workout_single,
    AIAction.GENERATE_DIET: _generate_diet,
    AIAction.ANALYZE_BODY: _analyze_body,
    AIAction.SUGGEST_UNITS: _suggest_units,
    AIAction.SUGGEST_FOODS: _suggest_foods,
    AIAction.CHAT: _chat,
    AIAction.GENERATE_EXERCISE_INSTRUCTIONS: _exercise_instructions,
    AIAction.MODERATE_CONTENT: _moderate_content,
    AIAction.MODERATE_PHOTO: _moderate_photo,
    AIAction.GENERATE_CARDIO_PLAN: _generate_cardio_plan,
    AIAction.GENERATE_MODALITY_PLAN: _generate_modality_plan,
    AIAction.GENERATE_MODALITY_EXERCISES: _generate_modality_exercises,
}
