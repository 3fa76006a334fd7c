"""Request and response models for AI-generated plans."""

from pydantic import BaseModel, ConfigDict, Field


class WorkoutPlanRequest(BaseModel):
    """Profile sent to the AI workout program generator."""

    model_config = ConfigDict(populate_by_name=True)

    height: float
    weight: float
    age: int
    gender: str
    fitness_level: str = Field(alias="fitnessLevel")
    fitness_goals: list[str] = Field(alias="fitnessGoals")
    workout_frequency: int = Field(alias="workoutFrequency", ge=1, le=7)
    preferred_exercises: list[str] | None = Field(
        default=None, alias="preferredExercises"
    )
    health_conditions: list[str] | None = Field(default=None, alias="healthConditions")
    equipment: list[str] | None = None


class MealPlanRequest(BaseModel):
    """Profile sent to the AI meal plan generator."""

    model_config = ConfigDict(populate_by_name=True)

    height: float
    weight: float
    age: int
    gender: str
    fitness_goals: list[str] = Field(alias="fitnessGoals")
    dietary_preferences: list[str] | None = Field(
        default=None, alias="dietaryPreferences"
    )
    allergies: list[str] | None = None
    meals_per_day: int = Field(alias="mealsPerDay", ge=1)
    calorie_target: int | None = Field(default=None, alias="calorieTarget")


class GeneratedProgram(BaseModel):
    """Program created by the AI workout generator."""

    model_config = ConfigDict(extra="allow")

    program_id: int


class GeneratedMealPlan(BaseModel):
    """Meal plan created by the AI meal generator."""

    model_config = ConfigDict(extra="allow")

    meal_plan_id: int
