"""
Request/response models shared by the schedule routes.

These are the HTTP shapes of the domain objects. Conversion to and from
core models happens here so the routes stay thin.
"""

from typing import Any, Optional

from pydantic import AwareDatetime, BaseModel, Field

from ..core.scheduling.models import (
    Cadence,
    Session,
    SessionCategory,
    SessionTemplate,
    SessionType,
)

# Fields that may be explicitly cleared with null in a patch
NULLABLE_FIELDS = frozenset({"notes", "linked_workout_id"})


class SessionResponse(BaseModel):
    """A scheduled session."""
    id: str = Field(description="Session identifier")
    client_id: str = Field(description="Client the session is booked for")
    start_time: AwareDatetime = Field(description="Start instant (ISO 8601 with offset)")
    end_time: AwareDatetime = Field(description="End instant, exclusive")
    duration_minutes: int = Field(description="Length in minutes")
    session_type: SessionType = Field(description="In-Person or Online")
    category: SessionCategory = Field(description="Workout or Check-in")
    completed: bool = Field(description="Whether the session took place")
    notes: str | None = Field(None, description="Free-form notes")
    linked_workout_id: str | None = Field(None, description="Workout performed")
    series_id: str | None = Field(None, description="Recurring series, if any")

    @classmethod
    def from_session(cls, session: Session) -> "SessionResponse":
        return cls(
            id=session.id,
            client_id=session.client_id,
            start_time=session.start_time,
            end_time=session.end_time,
            duration_minutes=session.duration_minutes,
            session_type=session.session_type,
            category=session.category,
            completed=session.completed,
            notes=session.notes,
            linked_workout_id=session.linked_workout_id,
            series_id=session.series_id,
        )


class SessionTemplateFields(BaseModel):
    """Fields shared by one-off and recurring booking requests."""
    client_id: str = Field(description="Client to book", min_length=1)
    duration_minutes: int = Field(description="Length in minutes", gt=0)
    session_type: SessionType = Field(SessionType.IN_PERSON, description="In-Person or Online")
    category: SessionCategory = Field(SessionCategory.WORKOUT, description="Workout or Check-in")
    notes: str | None = Field(None, description="Free-form notes", max_length=2000)
    linked_workout_id: str | None = Field(None, description="Workout to perform")

    def to_template(self) -> SessionTemplate:
        return SessionTemplate(
            client_id=self.client_id,
            duration_minutes=self.duration_minutes,
            session_type=self.session_type,
            category=self.category,
            notes=self.notes,
            linked_workout_id=self.linked_workout_id,
        )


class CreateSessionRequest(SessionTemplateFields):
    """Request to book a one-off session."""
    start_time: AwareDatetime = Field(description="Start instant (ISO 8601 with offset)")


class RecurringSeriesRequest(SessionTemplateFields):
    """Request to book a recurring series."""
    start_time: AwareDatetime = Field(description="First occurrence")
    cadence: Cadence = Field(description="weekly or bi-weekly")
    end_time: AwareDatetime = Field(description="Last allowed start instant, inclusive")


class SessionUpdateRequest(BaseModel):
    """
    Partial update for a session.

    Only fields present in the request body are changed.
    """
    client_id: Optional[str] = Field(None, min_length=1)
    start_time: Optional[AwareDatetime] = None
    duration_minutes: Optional[int] = Field(None, gt=0)
    session_type: Optional[SessionType] = None
    category: Optional[SessionCategory] = None
    completed: Optional[bool] = None
    notes: Optional[str] = Field(None, max_length=2000)
    linked_workout_id: Optional[str] = None

    def to_patch(self) -> dict[str, Any]:
        """Fields the caller actually sent; null only clears nullable fields."""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name in NULLABLE_FIELDS
        }


class UpdatedSessionsResponse(BaseModel):
    """Sessions changed by an update."""
    sessions: list[SessionResponse] = Field(description="Changed sessions, chronological")
    affected: int = Field(description="Number of sessions changed")


class SessionListResponse(BaseModel):
    """A list of sessions."""
    sessions: list[SessionResponse] = Field(description="Sessions, chronological")
    total: int = Field(description="Number of sessions returned")


class ConflictGroupResponse(BaseModel):
    """One group of double-booked sessions."""
    sessions: list[SessionResponse] = Field(description="Overlapping sessions, chronological")
    starts_at: AwareDatetime = Field(description="Start of the earliest session")
    ends_at: AwareDatetime = Field(description="Latest end in the group")


class ConflictsResponse(BaseModel):
    """All conflict groups in the schedule."""
    groups: list[ConflictGroupResponse] = Field(description="Conflict groups, chronological")
    total: int = Field(description="Number of groups")


class SlotCheckRequest(BaseModel):
    """A proposed slot to check against the schedule."""
    start_time: AwareDatetime = Field(description="Proposed start")
    duration_minutes: int = Field(description="Proposed length in minutes", gt=0)
    exclude_session_id: str | None = Field(
        None,
        description="Session being edited; it doesn't conflict with itself",
    )


class SlotCheckResponse(BaseModel):
    """Whether a proposed slot is free."""
    available: bool = Field(description="True when nothing overlaps the slot")
    conflicting_session: SessionResponse | None = Field(
        None,
        description="The earliest session occupying the slot",
    )


class ScheduleSummaryResponse(BaseModel):
    """Session counts for a range."""
    total: int
    completed: int
    pending: int
