"""Workout session history and logging."""

from dataclasses import dataclass
from datetime import UTC, datetime

from gym_companion.adapters.api_client import ApiClient
from gym_companion.domain.sessions import SessionDetail, SessionSummary, StartedSession
from gym_companion.services.payloads import parse_response

_SESSIONS = "/api/session"


@dataclass
class WorkoutSessionService:
    """Calls for starting, reviewing and logging workout sessions."""

    api: ApiClient

    async def history(self) -> list[SessionSummary]:
        """Return past sessions, newest first as ordered by the backend."""
        response = await self.api.get(f"{_SESSIONS}/history")
        return parse_response(response, list[SessionSummary])

    async def get_session(self, session_id: int) -> SessionDetail:
        response = await self.api.get(f"{_SESSIONS}/{session_id}")
        return parse_response(response, SessionDetail)

    async def start_session(
        self,
        program_id: int,
        workout_id: int,
        notes: str = "",
        started_at: datetime | None = None,
    ) -> StartedSession:
        """Start a session for a workout and return its id."""
        started = started_at or datetime.now(tz=UTC)
        response = await self.api.post(
            f"{_SESSIONS}/start/{program_id}/{workout_id}",
            {"date": _iso_timestamp(started), "notes": notes},
        )
        return parse_response(response, StartedSession)

    async def update_log(  # noqa: PLR0913
        self,
        log_id: int,
        *,
        completed: bool | None = None,
        sets: int | None = None,
        reps: int | str | None = None,
        weight: float | str | None = None,
    ) -> dict[str, object]:
        """Partially update an exercise log and return the backend payload."""
        body = {
            key: value
            for key, value in {
                "completed": completed,
                "sets": sets,
                "reps": reps,
                "weight": weight,
            }.items()
            if value is not None
        }
        if not body:
            raise ValueError("update_log needs at least one field to change")
        response = await self.api.put(f"{_SESSIONS}/log/{log_id}", body)
        return parse_response(response, dict[str, object])


def _iso_timestamp(moment: datetime) -> str:
    """Format as UTC with milliseconds and a ``Z`` suffix."""
    utc = moment.astimezone(UTC)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
