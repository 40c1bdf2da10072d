"""
Conflict detection for the schedule.

Finds double-bookings so the coach can be warned about them. A conflict
group is a connected component of the "overlaps" relation: if A overlaps
B and B overlaps C, then A, B and C form one group even when A and C don't
touch, because B can't be moved without considering both of them.

Algorithm:
    1. Sort sessions by (start_time, id)
    2. Walk the sorted list; each unvisited session seeds a group
    3. Every member of the group scans forward from its own position and
       stops at the first session starting at or after the member's end.
       Nothing later can overlap it because the list is time-sorted.
    4. Unvisited overlapping sessions join the group and scan in turn
    5. Keep groups with two or more members

Forward scans are enough to find the whole component. Any session that
overlaps a member with a later start also overlaps the member that pulled
that later session in, so it gets discovered from the left.
"""

import logging
from collections import deque
from datetime import datetime
from typing import Iterable, Optional

from .intervals import intervals_overlap, overlaps
from .models import ConflictGroup, Session, sort_key

logger = logging.getLogger(__name__)


def detect_conflicts(sessions: Iterable[Session]) -> list[ConflictGroup]:
    """
    Partition sessions into maximal groups of chained overlaps.

    Returns only groups with at least two sessions. Members are ordered
    chronologically and groups are ordered by their earliest member, so
    the same input always gives the same output regardless of its order.
    """
    ordered = sorted(sessions, key=sort_key)
    visited: set[str] = set()
    groups: list[ConflictGroup] = []

    for seed_index, seed in enumerate(ordered):
        if seed.id in visited:
            continue

        visited.add(seed.id)
        member_indexes = [seed_index]
        pending = deque([seed_index])

        while pending:
            index = pending.popleft()
            member = ordered[index]
            member_end = member.end_time

            for other_index in range(index + 1, len(ordered)):
                other = ordered[other_index]
                if other.start_time >= member_end:
                    break
                if other.id in visited:
                    continue
                if overlaps(member, other):
                    visited.add(other.id)
                    member_indexes.append(other_index)
                    pending.append(other_index)

        if len(member_indexes) > 1:
            groups.append(tuple(ordered[i] for i in sorted(member_indexes)))

    logger.debug(
        "Detected schedule conflicts",
        extra={"session_count": len(ordered), "group_count": len(groups)}
    )

    return groups


def find_conflicting_session(
    sessions: Iterable[Session],
    start_time: datetime,
    duration_minutes: int,
    exclude_session_id: Optional[str] = None,
) -> Optional[Session]:
    """
    Check whether a proposed slot is already taken.

    Args:
        sessions: all current sessions
        start_time: start of the slot to check
        duration_minutes: length of the slot to check
        exclude_session_id: session to ignore (the one being edited)

    Returns:
        The earliest existing session overlapping the slot, or None.
    """
    for existing in sorted(sessions, key=sort_key):
        if existing.id == exclude_session_id:
            continue
        if intervals_overlap(
            start_time, duration_minutes,
            existing.start_time, existing.duration_minutes,
        ):
            return existing
    return None
