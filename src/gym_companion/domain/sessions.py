"""Workout session models mirrored from the API."""

from pydantic import BaseModel, ConfigDict


class SessionSummary(BaseModel):
    """Row in the session history list."""

    model_config = ConfigDict(extra="allow")

    session_id: int
    workout_name: str | None = None
    program_name: str | None = None
    date: str | None = None


class ExerciseLog(BaseModel):
    """Logged exercise within a session."""

    model_config = ConfigDict(extra="allow")

    log_id: int
    session_id: int | None = None
    exercise_id: int | None = None
    exercise_name: str | None = None
    sets: int | None = None
    reps: int | float | str | None = None
    weight: int | float | str | None = None
    completed: bool = False


class SessionDetail(BaseModel):
    """Session with its exercise logs."""

    model_config = ConfigDict(extra="allow")

    session_id: int
    user_id: int | None = None
    workout_id: int | None = None
    date: str | None = None
    notes: str | None = None
    workout_name: str | None = None
    program_name: str | None = None
    exercises: list[ExerciseLog] = []


class StartedSession(BaseModel):
    """Response to starting a session."""

    model_config = ConfigDict(extra="allow")

    session_id: int
