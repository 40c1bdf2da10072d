"""
Domain models for session scheduling.

A Session is the only entity the scheduling core reasons about: a booked
appointment with a start instant and a duration. Everything else on it
(category, location, notes, linked workout) is payload that gets carried
through generation and updates untouched.

Sessions are frozen. The scheduling functions never edit a session in
place; they build a replacement with dataclasses.replace, which also
re-runs validation.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from .errors import InvalidSessionError


def new_id() -> str:
    """Default identifier factory for sessions and series."""
    return str(uuid4())


class SessionType(Enum):
    """Where the session takes place."""
    IN_PERSON = "In-Person"
    ONLINE = "Online"


class SessionCategory(Enum):
    """What kind of session this is."""
    WORKOUT = "Workout"
    CHECK_IN = "Check-in"


class Cadence(Enum):
    """How often a recurring series repeats."""
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"

    @property
    def interval(self) -> timedelta:
        if self is Cadence.WEEKLY:
            return timedelta(days=7)
        return timedelta(days=14)


class UpdateScope(Enum):
    """
    How far an edit reaches into a recurring series.

    SINGLE touches only the edited session. FUTURE also touches every
    later session of the same series.
    """
    SINGLE = "single"
    FUTURE = "future"


def _validate_duration(duration_minutes: int) -> None:
    if duration_minutes <= 0:
        raise InvalidSessionError("Session duration must be positive")


def validate_start_time(start_time: Any) -> None:
    """Reject anything that isn't a timezone-aware datetime."""
    if not isinstance(start_time, datetime):
        raise InvalidSessionError("Session start time must be a datetime")
    if start_time.tzinfo is None or start_time.utcoffset() is None:
        raise InvalidSessionError("Session start time must be timezone-aware")


@dataclass(frozen=True)
class Session:
    """
    A scheduled appointment with a client.

    The occupied interval is half-open: [start_time, end_time). A session
    ending at 10:00 and another starting at 10:00 don't overlap.
    """
    id: str
    client_id: str
    start_time: datetime
    duration_minutes: int
    session_type: SessionType = SessionType.IN_PERSON
    category: SessionCategory = SessionCategory.WORKOUT
    completed: bool = False
    notes: Optional[str] = None
    linked_workout_id: Optional[str] = None
    series_id: Optional[str] = None  # None for one-off sessions

    def __post_init__(self) -> None:
        _validate_duration(self.duration_minutes)
        validate_start_time(self.start_time)

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration_minutes)

    @property
    def is_recurring(self) -> bool:
        return self.series_id is not None


@dataclass(frozen=True)
class SessionTemplate:
    """
    Everything about a session except when it happens and who it is.

    Used as the blueprint for both one-off bookings and recurring series.
    """
    client_id: str
    duration_minutes: int
    session_type: SessionType = SessionType.IN_PERSON
    category: SessionCategory = SessionCategory.WORKOUT
    notes: Optional[str] = None
    linked_workout_id: Optional[str] = None

    def __post_init__(self) -> None:
        _validate_duration(self.duration_minutes)

    def instantiate(
        self,
        session_id: str,
        start_time: datetime,
        series_id: Optional[str] = None,
    ) -> Session:
        """Build a new, not-yet-completed session from this template."""
        return Session(
            id=session_id,
            client_id=self.client_id,
            start_time=start_time,
            duration_minutes=self.duration_minutes,
            session_type=self.session_type,
            category=self.category,
            completed=False,
            notes=self.notes,
            linked_workout_id=self.linked_workout_id,
            series_id=series_id,
        )


@dataclass(frozen=True)
class ScheduleSummary:
    """Session counts for a date range, as shown in the schedule overview."""
    total: int = 0
    completed: int = 0
    pending: int = 0


# Two or more sessions whose intervals chain together through overlaps
ConflictGroup = tuple[Session, ...]

SESSION_FIELDS = frozenset(f.name for f in fields(Session))

# Fields a patch may never touch
IMMUTABLE_FIELDS = frozenset({"id", "series_id"})


def sort_key(session: Session) -> tuple[datetime, str]:
    """Chronological order with the id as tie-breaker, so ordering is deterministic."""
    return (session.start_time, session.id)
