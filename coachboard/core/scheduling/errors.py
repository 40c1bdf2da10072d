"""
Exceptions raised by the scheduling core.

The core works on already-loaded, in-memory data, so there are very few
failure modes. Generating an empty series or applying a "future" edit to a
one-off session are normal outcomes, not errors.
"""


class SchedulingError(Exception):
    """Base class for scheduling errors."""
    pass


class InvalidSessionError(SchedulingError, ValueError):
    """Raised when session data can't describe a real time interval."""
    pass


class SessionNotFoundError(SchedulingError, LookupError):
    """Raised when a requested session doesn't exist."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id
