"""Meal plan models mirrored from the API."""

from pydantic import BaseModel, ConfigDict


class MealPlan(BaseModel):
    """Named meal plan owned by a user."""

    model_config = ConfigDict(extra="allow")

    meal_plan_id: int
    user_id: int | None = None
    meal_plan_name: str
    date: str | None = None


class Meal(BaseModel):
    """Meal within a plan."""

    model_config = ConfigDict(extra="allow")

    meal_id: int
    meal_plan_id: int | None = None
    meal_type: str
    total_calories: float = 0


class MealItem(BaseModel):
    """Food entry within a meal."""

    model_config = ConfigDict(extra="allow")

    food_id: int
    meal_id: int | None = None
    food_name: str
    calories: float = 0
    proteins: float = 0
    carbohydrates: float = 0
    fats: float = 0


class MealPlanDetail(BaseModel):
    """Meal plan with its meals."""

    plan: MealPlan
    meals: list[Meal] = []


class MealDetail(BaseModel):
    """Meal with its foods."""

    meal: Meal
    foods: list[MealItem] = []
