"""
Scope-aware session updates.

Editing a session that belongs to a recurring series can mean two things:
change just this occurrence, or change this one and every later one. For
the second case a time change is applied as a shift. If the coach moves
next Tuesday's 09:00 to 09:30, every later session in the series moves
by +30 minutes, each keeping its own date.

Updates are patches: a mapping of Session field name to new value. Fields
not in the patch keep their current value on every affected session.
"""

import logging
from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional, Union

from .errors import InvalidSessionError, SessionNotFoundError
from .models import (
    IMMUTABLE_FIELDS,
    SESSION_FIELDS,
    Session,
    UpdateScope,
    sort_key,
    validate_start_time,
)

logger = logging.getLogger(__name__)


def _validate_patch(updates: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(updates) - SESSION_FIELDS
    if unknown:
        raise InvalidSessionError(f"Unknown session fields: {', '.join(sorted(unknown))}")
    locked = set(updates) & IMMUTABLE_FIELDS
    if locked:
        raise InvalidSessionError(f"Fields cannot be updated: {', '.join(sorted(locked))}")
    if "start_time" in updates:
        validate_start_time(updates["start_time"])
    return dict(updates)


def _find_session(sessions: Iterable[Session], session_id: str) -> Session:
    for session in sessions:
        if session.id == session_id:
            return session
    raise SessionNotFoundError(session_id)


def resolve_scoped_update(
    sessions: Iterable[Session],
    target_id: str,
    updates: Mapping[str, Any],
    scope: Union[UpdateScope, str] = UpdateScope.SINGLE,
    *,
    propagate_fields: Optional[Iterable[str]] = None,
) -> list[Session]:
    """
    Work out which sessions an edit changes, and how.

    Args:
        sessions: the full session collection
        target_id: the session being edited
        updates: field patch for the target
        scope: SINGLE or FUTURE
        propagate_fields: non-time fields allowed to spread to the rest of
            the series under FUTURE scope. None means all of them. The
            target always receives the whole patch, and a time change
            always spreads as a shift.

    Returns:
        Only the changed sessions, in chronological order.

    Raises:
        SessionNotFoundError: target_id isn't in the collection
        InvalidSessionError: the patch touches unknown or immutable fields,
            or its start_time isn't a timezone-aware datetime
    """
    scope = UpdateScope(scope)
    patch = _validate_patch(updates)
    sessions = list(sessions)
    target = _find_session(sessions, target_id)

    # A one-off session has no series to propagate through
    if scope is UpdateScope.SINGLE or not target.is_recurring:
        return [replace(target, **patch)]

    new_start = patch.pop("start_time", target.start_time)
    shift = new_start - target.start_time

    if propagate_fields is None:
        shared_patch = patch
    else:
        allowed = set(propagate_fields)
        shared_patch = {name: value for name, value in patch.items() if name in allowed}

    affected = sorted(
        (
            s for s in sessions
            if s.series_id == target.series_id and s.start_time >= target.start_time
        ),
        key=sort_key,
    )

    updated = []
    for session in affected:
        session_patch = patch if session.id == target.id else shared_patch
        updated.append(replace(
            session,
            **session_patch,
            start_time=session.start_time + shift,
        ))

    logger.debug(
        "Resolved series update",
        extra={
            "series_id": target.series_id,
            "target_id": target.id,
            "affected": len(updated),
            "shift_seconds": shift.total_seconds(),
        }
    )

    return updated


def apply_scoped_update(
    sessions: Iterable[Session],
    target_id: str,
    updates: Mapping[str, Any],
    scope: Union[UpdateScope, str] = UpdateScope.SINGLE,
    *,
    propagate_fields: Optional[Iterable[str]] = None,
) -> list[Session]:
    """
    Apply an edit and return the whole collection.

    Only the changed ids are replaced; input order is preserved and the
    input itself is left alone.
    """
    sessions = list(sessions)
    changed = {
        s.id: s
        for s in resolve_scoped_update(
            sessions, target_id, updates, scope,
            propagate_fields=propagate_fields,
        )
    }
    return [changed.get(s.id, s) for s in sessions]


def toggle_completed(sessions: Iterable[Session], session_id: str) -> Session:
    """Return the session with its completed flag flipped."""
    target = _find_session(sessions, session_id)
    return replace(target, completed=not target.completed)
