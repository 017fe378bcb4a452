"""User profile data consumed by plan-generation prompts."""

from enum import StrEnum

from pydantic import BaseModel, Field


class Goal(StrEnum):
    """Training objective chosen during onboarding."""

    LOSE_WEIGHT = "lose_weight"
    GAIN_MUSCLE = "gain_muscle"
    MAINTAIN = "maintain"
    GAIN_WEIGHT = "gain_weight"


class ActivityLevel(StrEnum):
    """Self-reported daily activity."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class TrainingLocation(StrEnum):
    """Where the user trains."""

    GYM = "gym"
    HOME = "home"


class TrainingProfile(BaseModel):
    """Onboarding profile used to personalize generated plans."""

    goal: Goal = Goal.MAINTAIN
    gender: str = "male"
    age: int = Field(default=30, gt=0)
    weight: float = Field(default=70.0, gt=0)
    height: float = Field(default=170.0, gt=0)
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    training_location: TrainingLocation = TrainingLocation.GYM
    available_minutes: int = Field(default=60, gt=0)
    active_days: list[str] = Field(default_factory=list)
    food_preferences: list[str] = Field(default_factory=list)
    foods_at_home: list[str] = Field(default_factory=list)
