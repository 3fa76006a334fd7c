"""AI-generated workout programs and meal plans."""

from dataclasses import dataclass

from gym_companion.adapters.api_client import ApiClient
from gym_companion.domain.ai_plans import (
    GeneratedMealPlan,
    GeneratedProgram,
    MealPlanRequest,
    WorkoutPlanRequest,
)
from gym_companion.services.payloads import parse_response


@dataclass
class AiPlanService:
    """Requests plan generation; the backend saves the generated plan."""

    api: ApiClient

    async def generate_workout_plan(
        self, request: WorkoutPlanRequest
    ) -> GeneratedProgram:
        response = await self.api.post(
            "/api/ai/workout-plan",
            request.model_dump(by_alias=True, exclude_none=True),
        )
        return parse_response(response, GeneratedProgram)

    async def generate_meal_plan(self, request: MealPlanRequest) -> GeneratedMealPlan:
        response = await self.api.post(
            "/api/ai/meal-plan",
            request.model_dump(by_alias=True, exclude_none=True),
        )
        return parse_response(response, GeneratedMealPlan)
