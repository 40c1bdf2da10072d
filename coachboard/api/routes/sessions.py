"""
Session API endpoints.

Booking, editing and completing sessions. Recurring bookings and
"this and future" edits go through the scheduling core; the routes only
translate between HTTP and the ScheduleService.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import AwareDatetime

from ...core.scheduling.errors import InvalidSessionError, SessionNotFoundError
from ...core.scheduling.models import UpdateScope
from ..dependencies import AuthenticatedUser, ScheduleServiceDep
from ..schemas import (
    CreateSessionRequest,
    RecurringSeriesRequest,
    SessionListResponse,
    SessionResponse,
    SessionUpdateRequest,
    UpdatedSessionsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(session_id: str) -> HTTPException:
    logger.warning("Session not found", extra={"session_id": session_id})
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Session not found",
    )


def _invalid(error: InvalidSessionError) -> HTTPException:
    logger.warning("Invalid session data", extra={"error": str(error)})
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=str(error),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=SessionListResponse,
    status_code=status.HTTP_200_OK,
    summary="List sessions",
    description="List sessions chronologically, optionally within a date range",
)
async def list_sessions(
    api_key: AuthenticatedUser,
    service: ScheduleServiceDep,
    start: Optional[AwareDatetime] = Query(None, description="Earliest start, inclusive"),
    end: Optional[AwareDatetime] = Query(None, description="Latest start, inclusive"),
) -> SessionListResponse:
    sessions = service.list_sessions(start, end)
    return SessionListResponse(
        sessions=[SessionResponse.from_session(s) for s in sessions],
        total=len(sessions),
    )


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a session",
    description="Book a one-off session",
)
async def create_session(
    request: CreateSessionRequest,
    api_key: AuthenticatedUser,
    service: ScheduleServiceDep,
) -> SessionResponse:
    try:
        session = service.create_session(request.to_template(), request.start_time)
    except InvalidSessionError as e:
        raise _invalid(e)

    return SessionResponse.from_session(session)


@router.post(
    "/recurring",
    response_model=SessionListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a recurring series",
    description="Book weekly or bi-weekly sessions from start_time up to and including end_time",
)
async def create_recurring_series(
    request: RecurringSeriesRequest,
    api_key: AuthenticatedUser,
    service: ScheduleServiceDep,
) -> SessionListResponse:
    """
    Generate and store a recurring series.

    An end_time before start_time books nothing and returns an empty
    list. That's a valid request, not an error.
    """
    logger.info(
        "Creating recurring series",
        extra={
            "client_id": request.client_id,
            "cadence": request.cadence.value,
        }
    )

    try:
        series = service.create_recurring_series(
            request.to_template(),
            request.start_time,
            request.cadence,
            request.end_time,
        )
    except InvalidSessionError as e:
        raise _invalid(e)

    return SessionListResponse(
        sessions=[SessionResponse.from_session(s) for s in series],
        total=len(series),
    )


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    status_code=status.HTTP_200_OK,
    summary="Get session",
)
async def get_session(
    session_id: str,
    api_key: AuthenticatedUser,
    service: ScheduleServiceDep,
) -> SessionResponse:
    try:
        session = service.get_session(session_id)
    except SessionNotFoundError:
        raise _not_found(session_id)

    return SessionResponse.from_session(session)


@router.patch(
    "/{session_id}",
    response_model=UpdatedSessionsResponse,
    status_code=status.HTTP_200_OK,
    summary="Update session",
    description="Update one session, or this and every later session of its series",
)
async def update_session(
    session_id: str,
    request: SessionUpdateRequest,
    api_key: AuthenticatedUser,
    service: ScheduleServiceDep,
    scope: UpdateScope = Query(UpdateScope.SINGLE, description="single or future"),
) -> UpdatedSessionsResponse:
    """
    Apply a partial update.

    With scope=future on a recurring session, a start_time change moves
    every later occurrence by the same amount and other changed fields
    are copied to them. On a one-off session, future behaves like single.
    """
    try:
        changed = service.update_session(session_id, request.to_patch(), scope)
    except SessionNotFoundError:
        raise _not_found(session_id)
    except InvalidSessionError as e:
        raise _invalid(e)

    return UpdatedSessionsResponse(
        sessions=[SessionResponse.from_session(s) for s in changed],
        affected=len(changed),
    )


@router.post(
    "/{session_id}/toggle-complete",
    response_model=SessionResponse,
    status_code=status.HTTP_200_OK,
    summary="Toggle completion",
    description="Mark a session done, or back to pending",
)
async def toggle_session_complete(
    session_id: str,
    api_key: AuthenticatedUser,
    service: ScheduleServiceDep,
) -> SessionResponse:
    try:
        session = service.toggle_complete(session_id)
    except SessionNotFoundError:
        raise _not_found(session_id)

    return SessionResponse.from_session(session)
