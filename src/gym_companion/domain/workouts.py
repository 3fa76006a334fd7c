"""Workout program models mirrored from the API."""

from pydantic import BaseModel, ConfigDict


class Program(BaseModel):
    """Training program owned by a user."""

    model_config = ConfigDict(extra="allow")

    program_id: int
    user_id: int | None = None
    program_name: str
    date: str | None = None


class Workout(BaseModel):
    """Workout within a program."""

    model_config = ConfigDict(extra="allow")

    workout_id: int
    program_id: int | None = None
    workout_name: str


class Exercise(BaseModel):
    """Exercise prescription within a workout."""

    model_config = ConfigDict(extra="allow")

    exercise_id: int
    workout_id: int | None = None
    exercise_name: str
    sets: int | None = None
    reps: int | float | str | None = None
    weight: int | float | str | None = None


class ProgramDetail(BaseModel):
    """Program with its workouts."""

    program: Program
    workouts: list[Workout] = []


class WorkoutDetail(BaseModel):
    """Workout with its exercises."""

    workout: Workout
    exercises: list[Exercise] = []
