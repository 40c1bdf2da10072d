"""
Unit tests for the session repositories.

The Snowflake repository is exercised against a fake connection that
records the SQL it receives, so no snowflake-connector is needed.
"""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from coachboard.core.scheduling.errors import SessionNotFoundError
from coachboard.core.scheduling.models import SessionCategory, SessionType
from coachboard.infrastructure.memory.sessions import InMemorySessionRepository
from coachboard.infrastructure.snowflake.repositories.sessions import SnowflakeSessionRepository

UTC = timezone.utc


class FakeCursor:
    """Records executed statements and returns canned rows."""

    def __init__(self, rows=None) -> None:
        self.rows = rows or []
        self.executed: list[tuple[str, object]] = []
        self.closed = False

    def execute(self, query, params=None):
        self.executed.append((query, params))
        return self

    def executemany(self, query, seq_of_params):
        self.executed.append((query, list(seq_of_params)))
        return self

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return self.rows

    def close(self):
        self.closed = True


class FakeConnection:

    def __init__(self, rows=None) -> None:
        self.cursors: list[FakeCursor] = []
        self.rows = rows
        self.commits = 0

    def cursor(self):
        cursor = FakeCursor(self.rows)
        self.cursors.append(cursor)
        return cursor

    def commit(self):
        self.commits += 1


SAMPLE_ROW = (
    "s1",
    "client-1",
    datetime(2025, 1, 6, 9, 0),  # TIMESTAMP_NTZ comes back naive
    60,
    "Online",
    "Check-in",
    False,
    "notes",
    None,
    "series-1",
)


class TestSnowflakeSessionRepository:

    def test_get_session_builds_session(self):
        conn = FakeConnection(rows=[SAMPLE_ROW])
        repo = SnowflakeSessionRepository(conn)

        session = repo.get_session("s1")

        assert session.id == "s1"
        assert session.start_time == datetime(2025, 1, 6, 9, 0, tzinfo=UTC)
        assert session.session_type == SessionType.ONLINE
        assert session.category == SessionCategory.CHECK_IN
        assert session.series_id == "series-1"
        assert conn.cursors[0].executed[0][1] == ("s1",)
        assert conn.cursors[0].closed

    def test_get_session_missing(self):
        repo = SnowflakeSessionRepository(FakeConnection(rows=[]))
        with pytest.raises(SessionNotFoundError):
            repo.get_session("missing")

    def test_list_sessions(self):
        second = ("s2",) + SAMPLE_ROW[1:2] + ("2025-01-13T09:00:00+00:00",) + SAMPLE_ROW[3:]
        repo = SnowflakeSessionRepository(FakeConnection(rows=[SAMPLE_ROW, second]))

        sessions = repo.list_sessions()

        assert [s.id for s in sessions] == ["s1", "s2"]
        assert sessions[1].start_time == datetime(2025, 1, 13, 9, 0, tzinfo=UTC)

    def test_add_sessions_inserts_batch(self, make_session):
        conn = FakeConnection()
        repo = SnowflakeSessionRepository(conn)
        sessions = [
            make_session(datetime(2025, 1, 6, 9, tzinfo=UTC)),
            make_session(datetime(2025, 1, 13, 9, tzinfo=UTC)),
        ]

        repo.add_sessions(sessions)

        query, rows = conn.cursors[0].executed[0]
        assert "INSERT INTO scheduled_sessions" in query
        assert [row[0] for row in rows] == ["s1", "s2"]
        assert all(len(row) == 10 for row in rows)
        assert conn.commits == 1

    def test_add_nothing_skips_database(self):
        conn = FakeConnection()
        SnowflakeSessionRepository(conn).add_sessions([])
        assert conn.cursors == []

    def test_save_sessions_merges_each(self, make_session):
        conn = FakeConnection()
        repo = SnowflakeSessionRepository(conn)
        sessions = [
            make_session(datetime(2025, 1, 6, 9, tzinfo=UTC)),
            make_session(datetime(2025, 1, 13, 9, tzinfo=UTC)),
        ]

        repo.save_sessions(sessions)

        executed = conn.cursors[0].executed
        assert len(executed) == 2
        query, params = executed[0]
        assert "MERGE INTO scheduled_sessions" in query
        assert query.count("%s") == len(params) == 20
        assert params[0] == "s1"
        assert conn.commits == 1


class TestInMemorySessionRepository:

    def test_round_trip(self, make_session):
        repo = InMemorySessionRepository()
        session = make_session(datetime(2025, 1, 6, 9, tzinfo=UTC))

        repo.add_sessions([session])

        assert repo.get_session(session.id) == session
        assert repo.list_sessions() == [session]

    def test_missing(self):
        with pytest.raises(SessionNotFoundError):
            InMemorySessionRepository().get_session("missing")

    def test_save_requires_existing(self, make_session):
        repo = InMemorySessionRepository()
        with pytest.raises(SessionNotFoundError):
            repo.save_sessions([make_session(datetime(2025, 1, 6, 9, tzinfo=UTC))])

    def test_failed_save_writes_nothing(self, make_session):
        stored = make_session(datetime(2025, 1, 6, 9, tzinfo=UTC), notes="before")
        repo = InMemorySessionRepository([stored])
        edited = replace(stored, notes="after")
        stranger = make_session(datetime(2025, 1, 13, 9, tzinfo=UTC))

        with pytest.raises(SessionNotFoundError):
            repo.save_sessions([edited, stranger])

        assert repo.get_session(stored.id).notes == "before"
        assert repo.list_sessions() == [stored]

    def test_list_is_a_copy(self, make_session):
        repo = InMemorySessionRepository([make_session(datetime(2025, 1, 6, 9, tzinfo=UTC))])
        repo.list_sessions().clear()
        assert len(repo.list_sessions()) == 1
