"""
Time-interval arithmetic for sessions.

All intervals are half-open, [start, end), so back-to-back bookings are
allowed.
"""

from datetime import datetime, timedelta

from .models import Session


def session_end(start: datetime, duration_minutes: int) -> datetime:
    return start + timedelta(minutes=duration_minutes)


def intervals_overlap(
    start_a: datetime,
    duration_a: int,
    start_b: datetime,
    duration_b: int,
) -> bool:
    """
    Check whether two (start, duration) intervals intersect.

    Condition: start_a < end_b AND start_b < end_a
    """
    end_a = session_end(start_a, duration_a)
    end_b = session_end(start_b, duration_b)
    return start_a < end_b and start_b < end_a


def overlaps(a: Session, b: Session) -> bool:
    """Check whether two sessions occupy any common time."""
    return intervals_overlap(
        a.start_time, a.duration_minutes,
        b.start_time, b.duration_minutes,
    )
