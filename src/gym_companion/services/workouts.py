"""Programs, workouts and exercises."""

from dataclasses import dataclass

from gym_companion.adapters.api_client import ApiClient
from gym_companion.domain.workouts import (
    Exercise,
    Program,
    ProgramDetail,
    Workout,
    WorkoutDetail,
)
from gym_companion.services.payloads import parse_response

_PROGRAMS = "/api/gym/programs"


def _program_path(program_id: int) -> str:
    return f"{_PROGRAMS}/{program_id}"


def _workout_path(program_id: int, workout_id: int) -> str:
    return f"{_program_path(program_id)}/workouts/{workout_id}"


def _exercise_path(program_id: int, workout_id: int, exercise_id: int) -> str:
    return f"{_workout_path(program_id, workout_id)}/exercises/{exercise_id}"


@dataclass
class WorkoutService:
    """CRUD calls for the training side of the API."""

    api: ApiClient

    async def list_programs(self) -> list[Program]:
        response = await self.api.get(_PROGRAMS)
        return parse_response(response, list[Program])

    async def get_program(self, program_id: int) -> ProgramDetail:
        response = await self.api.get(_program_path(program_id))
        return parse_response(response, ProgramDetail)

    async def create_program(self, program_name: str) -> Program:
        response = await self.api.post(_PROGRAMS, {"program_name": program_name})
        return parse_response(response, Program)

    async def delete_program(self, program_id: int) -> None:
        await self.api.delete(_program_path(program_id))

    async def list_workouts(self, program_id: int) -> list[Workout]:
        response = await self.api.get(f"{_program_path(program_id)}/workouts")
        return parse_response(response, list[Workout])

    async def get_workout(self, program_id: int, workout_id: int) -> WorkoutDetail:
        response = await self.api.get(_workout_path(program_id, workout_id))
        return parse_response(response, WorkoutDetail)

    async def create_workout(self, program_id: int, workout_name: str) -> Workout:
        response = await self.api.post(
            f"{_program_path(program_id)}/workouts", {"workout_name": workout_name}
        )
        return parse_response(response, Workout)

    async def delete_workout(self, program_id: int, workout_id: int) -> None:
        await self.api.delete(_workout_path(program_id, workout_id))

    async def list_exercises(self, program_id: int, workout_id: int) -> list[Exercise]:
        response = await self.api.get(
            f"{_workout_path(program_id, workout_id)}/exercises"
        )
        return parse_response(response, list[Exercise])

    async def get_exercise(
        self, program_id: int, workout_id: int, exercise_id: int
    ) -> Exercise:
        response = await self.api.get(
            _exercise_path(program_id, workout_id, exercise_id)
        )
        return parse_response(response, Exercise)

    async def create_exercise(  # noqa: PLR0913
        self,
        program_id: int,
        workout_id: int,
        exercise_name: str,
        sets: int | None = None,
        reps: int | str | None = None,
        weight: float | str | None = None,
    ) -> Exercise:
        """Add an exercise; unset prescription fields are left to the backend."""
        body = _drop_none(
            {
                "exercise_name": exercise_name,
                "sets": sets,
                "reps": reps,
                "weight": weight,
            }
        )
        response = await self.api.post(
            f"{_workout_path(program_id, workout_id)}/exercises", body
        )
        return parse_response(response, Exercise)

    async def update_exercise(  # noqa: PLR0913
        self,
        program_id: int,
        workout_id: int,
        exercise_id: int,
        sets: int | None = None,
        reps: int | str | None = None,
        weight: float | str | None = None,
    ) -> Exercise:
        """Send a partial update of the exercise prescription."""
        body = _drop_none({"sets": sets, "reps": reps, "weight": weight})
        response = await self.api.put(
            _exercise_path(program_id, workout_id, exercise_id), body
        )
        return parse_response(response, Exercise)

    async def delete_exercise(
        self, program_id: int, workout_id: int, exercise_id: int
    ) -> None:
        await self.api.delete(_exercise_path(program_id, workout_id, exercise_id))


def _drop_none(values: dict[str, object]) -> dict[str, object]:
    return {key: value for key, value in values.items() if value is not None}
