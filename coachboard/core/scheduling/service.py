"""
Schedule service.

Orchestrates the pure scheduling functions against a session repository.
The functions in conflicts/recurrence/updates never touch storage; this
service loads the current collection, asks them for a result and hands
new or changed records to the repository.

Like the rest of core, it doesn't know about HTTP or which database sits
behind the repository.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, Union

from .conflicts import detect_conflicts, find_conflicting_session
from .models import (
    Cadence,
    ConflictGroup,
    SESSION_FIELDS,
    ScheduleSummary,
    Session,
    SessionTemplate,
    UpdateScope,
    new_id,
    sort_key,
)
from .recurrence import generate_recurring_series
from .updates import resolve_scoped_update, toggle_completed

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class SessionRepository(Protocol):
    """
    Interface for session persistence.

    The service doesn't care whether sessions live in Snowflake or in a
    dict. It needs the full list, single lookups and batch writes.
    """

    def list_sessions(self) -> list[Session]:
        """Return every stored session."""
        ...

    def get_session(self, session_id: str) -> Session:
        """Return one session or raise SessionNotFoundError."""
        ...

    def add_sessions(self, sessions: Iterable[Session]) -> None:
        """Insert new sessions."""
        ...

    def save_sessions(self, sessions: Iterable[Session]) -> None:
        """Replace stored sessions that share an id with the given ones."""
        ...


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ScheduleService:
    """
    The scheduling service behind the dashboard's calendar.

    Stateless apart from its dependencies. Every call reads the current
    collection from the repository, so there's no cache to go stale.
    """

    def __init__(
        self,
        repository: SessionRepository,
        *,
        id_factory: Callable[[], str] = new_id,
        propagate_fields: Optional[Iterable[str]] = None,
    ) -> None:
        self._repository = repository
        self._id_factory = id_factory
        if propagate_fields is not None:
            propagate_fields = frozenset(propagate_fields)
            unknown = propagate_fields - SESSION_FIELDS
            if unknown:
                raise ValueError(f"Unknown propagation fields: {', '.join(sorted(unknown))}")
        self._propagate_fields = propagate_fields

    def list_sessions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Session]:
        """List sessions chronologically, optionally limited to start <= start_time <= end."""
        sessions = self._repository.list_sessions()
        if start is not None:
            sessions = [s for s in sessions if s.start_time >= start]
        if end is not None:
            sessions = [s for s in sessions if s.start_time <= end]
        return sorted(sessions, key=sort_key)

    def get_session(self, session_id: str) -> Session:
        return self._repository.get_session(session_id)

    def create_session(self, template: SessionTemplate, start_time: datetime) -> Session:
        """Book a one-off session."""
        session = template.instantiate(self._id_factory(), start_time)
        self._repository.add_sessions([session])

        logger.info(
            "Session created",
            extra={"session_id": session.id, "client_id": session.client_id}
        )

        return session

    def create_recurring_series(
        self,
        template: SessionTemplate,
        start_time: datetime,
        cadence: Union[Cadence, str],
        end_time: datetime,
    ) -> list[Session]:
        """Generate a recurring series and store it as one batch."""
        series = generate_recurring_series(
            template, start_time, cadence, end_time,
            id_factory=self._id_factory,
        )

        if not series:
            logger.info(
                "Recurring series produced no sessions",
                extra={"client_id": template.client_id}
            )
            return series

        self._repository.add_sessions(series)

        logger.info(
            "Recurring series created",
            extra={
                "series_id": series[0].series_id,
                "client_id": template.client_id,
                "occurrences": len(series),
            }
        )

        return series

    def update_session(
        self,
        session_id: str,
        updates: Mapping[str, Any],
        scope: Union[UpdateScope, str] = UpdateScope.SINGLE,
    ) -> list[Session]:
        """
        Apply a scoped edit and persist the changed sessions.

        Returns only the sessions that changed. Raises SessionNotFoundError
        for an unknown id.
        """
        try:
            changed = resolve_scoped_update(
                self._repository.list_sessions(),
                session_id,
                updates,
                scope,
                propagate_fields=self._propagate_fields,
            )
        except LookupError:
            logger.warning(
                "Update targeted unknown session",
                extra={"session_id": session_id}
            )
            raise

        self._repository.save_sessions(changed)

        logger.info(
            "Session updated",
            extra={
                "session_id": session_id,
                "scope": UpdateScope(scope).value,
                "fields": sorted(updates),
                "affected": len(changed),
            }
        )

        return changed

    def toggle_complete(self, session_id: str) -> Session:
        """Flip a session between done and pending."""
        session = toggle_completed([self._repository.get_session(session_id)], session_id)
        self._repository.save_sessions([session])

        logger.info(
            "Session completion toggled",
            extra={"session_id": session_id, "completed": session.completed}
        )

        return session

    def detect_conflicts(self) -> list[ConflictGroup]:
        """Find every group of double-booked sessions."""
        groups = detect_conflicts(self._repository.list_sessions())
        if groups:
            logger.info(
                "Schedule conflicts found",
                extra={"group_count": len(groups)}
            )
        return groups

    def check_slot(
        self,
        start_time: datetime,
        duration_minutes: int,
        exclude_session_id: Optional[str] = None,
    ) -> Optional[Session]:
        """Return the session that already occupies a proposed slot, if any."""
        return find_conflicting_session(
            self._repository.list_sessions(),
            start_time,
            duration_minutes,
            exclude_session_id=exclude_session_id,
        )

    def summarize(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> ScheduleSummary:
        """Count total, completed and pending sessions in a range."""
        sessions = self.list_sessions(start, end)
        completed = sum(1 for s in sessions if s.completed)
        return ScheduleSummary(
            total=len(sessions),
            completed=completed,
            pending=len(sessions) - completed,
        )
