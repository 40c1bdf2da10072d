"""
Session scheduling logic.

Contains the domain models, the conflict detector, the recurrence
generator, the scoped update resolver and the service that ties them to
a repository.
"""

from .conflicts import detect_conflicts, find_conflicting_session
from .errors import InvalidSessionError, SchedulingError, SessionNotFoundError
from .intervals import intervals_overlap, overlaps, session_end
from .models import (
    Cadence,
    ConflictGroup,
    ScheduleSummary,
    Session,
    SessionCategory,
    SessionTemplate,
    SessionType,
    UpdateScope,
    new_id,
)
from .recurrence import generate_recurring_series
from .service import ScheduleService, SessionRepository
from .updates import apply_scoped_update, resolve_scoped_update, toggle_completed

__all__ = [
    "Cadence",
    "ConflictGroup",
    "ScheduleSummary",
    "Session",
    "SessionCategory",
    "SessionTemplate",
    "SessionType",
    "UpdateScope",
    "new_id",
    "InvalidSessionError",
    "SchedulingError",
    "SessionNotFoundError",
    "intervals_overlap",
    "overlaps",
    "session_end",
    "detect_conflicts",
    "find_conflicting_session",
    "generate_recurring_series",
    "apply_scoped_update",
    "resolve_scoped_update",
    "toggle_completed",
    "ScheduleService",
    "SessionRepository",
]
