"""
Schedule-wide API endpoints.

Read-only views over the whole session collection: double-booking
warnings, slot availability and the overview counts.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, status
from pydantic import AwareDatetime

from ..dependencies import AuthenticatedUser, ScheduleServiceDep
from ..schemas import (
    ConflictGroupResponse,
    ConflictsResponse,
    ScheduleSummaryResponse,
    SessionResponse,
    SlotCheckRequest,
    SlotCheckResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/conflicts",
    response_model=ConflictsResponse,
    status_code=status.HTTP_200_OK,
    summary="Find double-bookings",
    description="Group sessions whose times overlap, directly or through a shared neighbour",
)
async def get_conflicts(
    api_key: AuthenticatedUser,
    service: ScheduleServiceDep,
) -> ConflictsResponse:
    groups = service.detect_conflicts()

    return ConflictsResponse(
        groups=[
            ConflictGroupResponse(
                sessions=[SessionResponse.from_session(s) for s in group],
                starts_at=group[0].start_time,
                ends_at=max(s.end_time for s in group),
            )
            for group in groups
        ],
        total=len(groups),
    )


@router.post(
    "/check-slot",
    response_model=SlotCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Check a slot",
    description="Check whether a proposed slot overlaps an existing session",
)
async def check_slot(
    request: SlotCheckRequest,
    api_key: AuthenticatedUser,
    service: ScheduleServiceDep,
) -> SlotCheckResponse:
    conflict = service.check_slot(
        request.start_time,
        request.duration_minutes,
        exclude_session_id=request.exclude_session_id,
    )

    if conflict:
        logger.info(
            "Proposed slot is taken",
            extra={
                "start_time": request.start_time.isoformat(),
                "conflicting_session_id": conflict.id,
            }
        )

    return SlotCheckResponse(
        available=conflict is None,
        conflicting_session=SessionResponse.from_session(conflict) if conflict else None,
    )


@router.get(
    "/summary",
    response_model=ScheduleSummaryResponse,
    status_code=status.HTTP_200_OK,
    summary="Schedule overview",
    description="Total, completed and pending sessions in a range",
)
async def get_summary(
    api_key: AuthenticatedUser,
    service: ScheduleServiceDep,
    start: Optional[AwareDatetime] = Query(None, description="Earliest start, inclusive"),
    end: Optional[AwareDatetime] = Query(None, description="Latest start, inclusive"),
) -> ScheduleSummaryResponse:
    summary = service.summarize(start, end)
    return ScheduleSummaryResponse(
        total=summary.total,
        completed=summary.completed,
        pending=summary.pending,
    )
