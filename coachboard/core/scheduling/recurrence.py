"""
Recurring series generation.

Expands a session template into dated instances at a fixed cadence. All
instances from one call share a freshly generated series id, which is
what later lets an edit reach "this and future sessions".
"""

import logging
from datetime import datetime
from typing import Callable, Union

from .models import Cadence, Session, SessionTemplate, new_id

logger = logging.getLogger(__name__)


def generate_recurring_series(
    template: SessionTemplate,
    start_time: datetime,
    cadence: Union[Cadence, str],
    end_time: datetime,
    *,
    id_factory: Callable[[], str] = new_id,
) -> list[Session]:
    """
    Generate every occurrence from start_time up to and including end_time.

    Instance k starts at start_time + k * cadence. An end before the start
    yields an empty list; that's a valid outcome, not an error.

    Nothing is persisted here. The caller hands the result to the
    repository.
    """
    cadence = Cadence(cadence)

    if end_time < start_time:
        logger.debug(
            "Empty recurrence range",
            extra={"start_time": start_time.isoformat(), "end_time": end_time.isoformat()}
        )
        return []

    series_id = id_factory()
    step = cadence.interval
    instances: list[Session] = []

    occurrence = start_time
    while occurrence <= end_time:
        instances.append(template.instantiate(
            session_id=id_factory(),
            start_time=occurrence,
            series_id=series_id,
        ))
        occurrence = occurrence + step

    logger.debug(
        "Generated recurring series",
        extra={
            "series_id": series_id,
            "cadence": cadence.value,
            "occurrences": len(instances),
        }
    )

    return instances
