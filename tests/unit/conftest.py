"""
Shared fixtures for unit tests.

Sessions are built with readable sequential ids (s1, s2, ...) so failing
assertions point at something recognisable.
"""

import itertools
from datetime import datetime

import pytest

from coachboard.core.scheduling.models import Session


@pytest.fixture
def make_session():
    """Factory for sessions with sequential ids and sensible defaults."""
    counter = itertools.count(1)

    def _make(start: datetime, duration: int = 60, **overrides) -> Session:
        return Session(
            id=overrides.pop("id", f"s{next(counter)}"),
            client_id=overrides.pop("client_id", "client-1"),
            start_time=start,
            duration_minutes=duration,
            **overrides,
        )

    return _make


@pytest.fixture
def id_factory():
    """Deterministic id generator: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"
