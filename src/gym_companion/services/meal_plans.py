"""Meal plans, meals and foods."""

from dataclasses import dataclass

from gym_companion.adapters.api_client import ApiClient
from gym_companion.domain.meal_plans import (
    Meal,
    MealDetail,
    MealItem,
    MealPlan,
    MealPlanDetail,
)
from gym_companion.services.payloads import parse_response

_MEAL_PLANS = "/api/food/mealplans"


def _plan_path(plan_id: int) -> str:
    return f"{_MEAL_PLANS}/{plan_id}"


def _meal_path(plan_id: int, meal_id: int) -> str:
    return f"{_plan_path(plan_id)}/meals/{meal_id}"


@dataclass
class MealPlanService:
    """CRUD calls for the nutrition side of the API."""

    api: ApiClient

    async def list_meal_plans(self) -> list[MealPlan]:
        response = await self.api.get(_MEAL_PLANS)
        return parse_response(response, list[MealPlan])

    async def get_meal_plan(self, plan_id: int) -> MealPlanDetail:
        response = await self.api.get(_plan_path(plan_id))
        return parse_response(response, MealPlanDetail)

    async def create_meal_plan(self, meal_plan_name: str) -> MealPlan:
        response = await self.api.post(
            _MEAL_PLANS, {"meal_plan_name": meal_plan_name}
        )
        return parse_response(response, MealPlan)

    async def delete_meal_plan(self, plan_id: int) -> None:
        await self.api.delete(_plan_path(plan_id))

    async def list_meals(self, plan_id: int) -> list[Meal]:
        response = await self.api.get(f"{_plan_path(plan_id)}/meals")
        return parse_response(response, list[Meal])

    async def get_meal(self, plan_id: int, meal_id: int) -> MealDetail:
        response = await self.api.get(_meal_path(plan_id, meal_id))
        return parse_response(response, MealDetail)

    async def create_meal(
        self, plan_id: int, meal_type: str, total_calories: float = 0
    ) -> Meal:
        response = await self.api.post(
            f"{_plan_path(plan_id)}/meals",
            {"meal_type": meal_type, "total_calories": total_calories},
        )
        return parse_response(response, Meal)

    async def delete_meal(self, plan_id: int, meal_id: int) -> None:
        await self.api.delete(_meal_path(plan_id, meal_id))

    async def list_foods(self, plan_id: int, meal_id: int) -> list[MealItem]:
        response = await self.api.get(f"{_meal_path(plan_id, meal_id)}/foods")
        return parse_response(response, list[MealItem])

    async def create_food(  # noqa: PLR0913
        self,
        plan_id: int,
        meal_id: int,
        food_name: str,
        calories: float | None = None,
        proteins: float | None = None,
        carbohydrates: float | None = None,
        fats: float | None = None,
    ) -> MealItem:
        """Add a food to a meal."""
        body = _macros(
            food_name=food_name,
            calories=calories,
            proteins=proteins,
            carbohydrates=carbohydrates,
            fats=fats,
        )
        response = await self.api.post(f"{_meal_path(plan_id, meal_id)}/foods", body)
        return parse_response(response, MealItem)

    async def update_food(  # noqa: PLR0913
        self,
        plan_id: int,
        meal_id: int,
        food_id: int,
        food_name: str | None = None,
        calories: float | None = None,
        proteins: float | None = None,
        carbohydrates: float | None = None,
        fats: float | None = None,
    ) -> MealItem:
        """Send a partial update of a food entry."""
        body = _macros(
            food_name=food_name,
            calories=calories,
            proteins=proteins,
            carbohydrates=carbohydrates,
            fats=fats,
        )
        response = await self.api.put(
            f"{_meal_path(plan_id, meal_id)}/foods/{food_id}", body
        )
        return parse_response(response, MealItem)

    async def delete_food(self, plan_id: int, meal_id: int, food_id: int) -> None:
        await self.api.delete(f"{_meal_path(plan_id, meal_id)}/foods/{food_id}")


def _macros(**values: object) -> dict[str, object]:
    return {key: value for key, value in values.items() if value is not None}
