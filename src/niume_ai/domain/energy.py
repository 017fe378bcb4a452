"""Energy expenditure estimates used for diet targets."""

from niume_ai.domain.profile import ActivityLevel, Goal, TrainingProfile

_ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

MIN_WEIGHT_LOSS_CALORIES = 1200


def basal_metabolic_rate(profile: TrainingProfile) -> float:
    """Mifflin-St Jeor BMR in kcal/day."""
    base = 10 * profile.weight + 6.25 * profile.height - 5 * profile.age
    if profile.gender.lower() == "female":
        return base - 161
    return base + 5


def total_daily_energy(profile: TrainingProfile) -> int:
    """BMR scaled by the activity multiplier."""
    multiplier = _ACTIVITY_MULTIPLIERS.get(profile.activity_level, 1.55)
    return round(basal_metabolic_rate(profile) * multiplier)


def daily_calorie_goal(profile: TrainingProfile) -> int:
    """Daily calorie target adjusted for the user's goal."""
    tdee = total_daily_energy(profile)
    if profile.goal is Goal.LOSE_WEIGHT:
        return max(MIN_WEIGHT_LOSS_CALORIES, tdee - 500)
    if profile.goal is Goal.GAIN_WEIGHT:
        return tdee + 500
    if profile.goal is Goal.GAIN_MUSCLE:
        return tdee + 300
    return tdee
