"""
Snowflake repository for scheduled sessions.

This module implements the repository pattern for session data access.
The repository:
1. Translates between Session objects and SCHEDULED_SESSIONS rows
2. Encapsulates all SQL queries
3. Provides the interface ScheduleService expects

The scheduling core never writes SQL. It asks for the session list and
hands back batches of new or changed sessions.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol

from coachboard.core.scheduling.errors import SessionNotFoundError
from coachboard.core.scheduling.models import Session, SessionCategory, SessionType

logger = logging.getLogger(__name__)


class SnowflakeConnection(Protocol):
    """
    Protocol for Snowflake connections.

    Using a protocol means tests can provide a fake without
    importing the actual snowflake-connector-python.
    """

    def cursor(self): ...
    def commit(self) -> None: ...


@dataclass
class SnowflakeConfig:
    """Configuration for Snowflake connection."""
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    private_key_base64: Optional[str] = None
    database: str = "COACHBOARD"
    schema: str = "SCHEDULING"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None


_SESSION_COLUMNS = """
    session_id,
    client_id,
    start_time,
    duration_minutes,
    session_type,
    category,
    completed,
    notes,
    linked_workout_id,
    series_id
"""


class SnowflakeSessionRepository:
    """
    Repository for scheduled session persistence.

    Each method corresponds to what ScheduleService needs:
    - list_sessions: load the whole schedule
    - get_session: load a session by ID
    - add_sessions: insert a one-off session or a generated series
    - save_sessions: write back sessions changed by an edit
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def list_sessions(self) -> list[Session]:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {_SESSION_COLUMNS}
                FROM scheduled_sessions
                ORDER BY start_time, session_id
            """)
            return [self._build_session(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def get_session(self, session_id: str) -> Session:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {_SESSION_COLUMNS}
                FROM scheduled_sessions
                WHERE session_id = %s
            """, (session_id,))

            row = cursor.fetchone()
            if not row:
                raise SessionNotFoundError(session_id)

            return self._build_session(row)
        finally:
            cursor.close()

    def add_sessions(self, sessions: Iterable[Session]) -> None:
        """
        Insert new sessions in one batch.

        A generated series is written atomically: either every occurrence
        lands or none does.
        """
        rows = [self._session_params(s) for s in sessions]
        if not rows:
            return

        cursor = self._conn.cursor()

        try:
            cursor.executemany(f"""
                INSERT INTO scheduled_sessions ({_SESSION_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """, rows)
            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to insert sessions",
                extra={"count": len(rows), "error": str(e)}
            )
            raise
        finally:
            cursor.close()

    def save_sessions(self, sessions: Iterable[Session]) -> None:
        """
        Upsert changed sessions.

        This method is idempotent. Saving the same session twice updates
        rather than duplicates.
        """
        sessions = list(sessions)
        if not sessions:
            return

        cursor = self._conn.cursor()

        try:
            for session in sessions:
                self._upsert_session(cursor, session)
            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to save sessions",
                extra={"session_ids": [s.id for s in sessions], "error": str(e)}
            )
            raise
        finally:
            cursor.close()

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _upsert_session(self, cursor, session: Session) -> None:
        """Insert or update one session row."""
        params = self._session_params(session)
        cursor.execute(f"""
            MERGE INTO scheduled_sessions AS target
            USING (SELECT %s AS session_id) AS source
            ON target.session_id = source.session_id
            WHEN MATCHED THEN UPDATE SET
                client_id = %s,
                start_time = %s,
                duration_minutes = %s,
                session_type = %s,
                category = %s,
                completed = %s,
                notes = %s,
                linked_workout_id = %s,
                series_id = %s,
                updated_at = CURRENT_TIMESTAMP()
            WHEN NOT MATCHED THEN INSERT ({_SESSION_COLUMNS})
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        """, (session.id,) + params[1:] + params)

    def _session_params(self, session: Session) -> tuple:
        return (
            session.id,
            session.client_id,
            session.start_time,
            session.duration_minutes,
            session.session_type.value,
            session.category.value,
            session.completed,
            session.notes,
            session.linked_workout_id,
            session.series_id,
        )

    def _build_session(self, row) -> Session:
        """Construct a Session from a SCHEDULED_SESSIONS row."""
        return Session(
            id=row[0],
            client_id=row[1],
            start_time=self._as_instant(row[2]),
            duration_minutes=int(row[3]),
            session_type=SessionType(row[4]) if row[4] else SessionType.IN_PERSON,
            category=SessionCategory(row[5]) if row[5] else SessionCategory.WORKOUT,
            completed=bool(row[6]),
            notes=row[7],
            linked_workout_id=row[8],
            series_id=row[9],
        )

    def _as_instant(self, value) -> datetime:
        """
        Normalize a timestamp column to an aware datetime.

        TIMESTAMP_TZ comes back aware. TIMESTAMP_NTZ comes back naive and
        is stored in UTC by convention; strings show up from some drivers.
        """
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
