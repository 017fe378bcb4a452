"""Pydantic models for the AI endpoint payloads."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from niume_ai.domain.profile import TrainingLocation, TrainingProfile


class AIAction(StrEnum):
    """Operations exposed by ``POST /ai``."""

    ANALYZE_FOOD_TEXT = "ANALYZE_FOOD_TEXT"
    ANALYZE_FOOD_PHOTO = "ANALYZE_FOOD_PHOTO"
    GENERATE_WORKOUT = "GENERATE_WORKOUT"
    GENERATE_WORKOUT_SINGLE = "GENERATE_WORKOUT_SINGLE"
    GENERATE_DIET = "GENERATE_DIET"
    ANALYZE_BODY = "ANALYZE_BODY"
    SUGGEST_UNITS = "SUGGEST_UNITS"
    SUGGEST_FOODS = "SUGGEST_FOODS"
    CHAT = "CHAT"
    GENERATE_EXERCISE_INSTRUCTIONS = "GENERATE_EXERCISE_INSTRUCTIONS"
    MODERATE_CONTENT = "MODERATE_CONTENT"
    MODERATE_PHOTO = "MODERATE_PHOTO"
    GENERATE_CARDIO_PLAN = "GENERATE_CARDIO_PLAN"
    GENERATE_MODALITY_PLAN = "GENERATE_MODALITY_PLAN"
    GENERATE_MODALITY_EXERCISES = "GENERATE_MODALITY_EXERCISES"


class AIRequest(BaseModel):
    """Envelope for every AI call."""

    action: AIAction
    payload: dict[str, object] = Field(default_factory=dict)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class FoodTextPayload(_CamelModel):
    description: str = Field(min_length=1)


class PhotoPayload(_CamelModel):
    base64: str = Field(min_length=1)
    mime_type: str | None = Field(default=None, alias="mimeType")


class WorkoutDayPayload(_CamelModel):
    profile: TrainingProfile = Field(default_factory=TrainingProfile)
    day_name: str = Field(alias="dayName")
    available_minutes: int = Field(default=45, gt=0, alias="availableMinutes")
    location: TrainingLocation = TrainingLocation.GYM
    avoid_exercises: list[str] = Field(default_factory=list, alias="avoidExercises")


class SuggestUnitsPayload(_CamelModel):
    food: str = Field(min_length=1)


class SuggestFoodsPayload(_CamelModel):
    query: str = Field(min_length=1)


class ChatPayload(_CamelModel):
    message: str = Field(min_length=1)
    context: str = ""


class ExerciseInstructionsPayload(_CamelModel):
    exercise_name: str = Field(min_length=1, alias="exerciseName")


class ModerateContentPayload(_CamelModel):
    input: str
    context: str = "item"


class ModeratePhotoPayload(_CamelModel):
    photo_url: str = Field(min_length=1, alias="photoUrl")


class CardioPlanPayload(_CamelModel):
    profile: TrainingProfile = Field(default_factory=TrainingProfile)
    cardio_type: str = Field(min_length=1, alias="cardioType")
    active_days: list[str] = Field(default_factory=list, alias="activeDays")
    goal_minutes: int = Field(default=30, gt=0, alias="goalMinutes")


class Modality(_CamelModel):
    name: str = Field(min_length=1)


class ModalityPlanPayload(_CamelModel):
    profile: TrainingProfile = Field(default_factory=TrainingProfile)
    modality: Modality


class ModalityExercisesPayload(_CamelModel):
    modality: Modality
    count: int = Field(default=6, ge=1, le=20)
