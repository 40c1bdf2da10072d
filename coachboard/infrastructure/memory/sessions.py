"""
In-memory session repository.

Stores sessions in a dict keyed by id. Used in mock mode and in tests so
the API runs end-to-end without provisioning a database. Not durable:
everything is gone when the process exits.
"""

import logging
from typing import Iterable, Optional

from coachboard.core.scheduling.errors import SessionNotFoundError
from coachboard.core.scheduling.models import Session

logger = logging.getLogger(__name__)


class InMemorySessionRepository:
    """
    Dict-backed implementation of the SessionRepository protocol.

    Sessions are frozen, so handing out the stored objects is safe; the
    list returned by list_sessions is a fresh copy.
    """

    def __init__(self, sessions: Optional[Iterable[Session]] = None) -> None:
        self._sessions: dict[str, Session] = {}
        for session in sessions or ():
            self._sessions[session.id] = session

        logger.info(
            "Initialized in-memory session repository",
            extra={"session_count": len(self._sessions)}
        )

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def get_session(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def add_sessions(self, sessions: Iterable[Session]) -> None:
        for session in sessions:
            self._sessions[session.id] = session

    def save_sessions(self, sessions: Iterable[Session]) -> None:
        """Replace stored sessions. Nothing is written if any id is unknown."""
        sessions = list(sessions)
        for session in sessions:
            if session.id not in self._sessions:
                raise SessionNotFoundError(session.id)
        for session in sessions:
            self._sessions[session.id] = session

    def clear(self) -> None:
        """Drop everything (for test cleanup)."""
        self._sessions.clear()
