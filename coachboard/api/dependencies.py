"""
FastAPI dependency injection.

Dependencies provide instances of services, repositories and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests
- Configuration is centralized
- Connection lifecycle is managed per request

Each dependency is a function that FastAPI calls when needed.
"""

import logging
from typing import Annotated, Generator

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.scheduling.service import ScheduleService, SessionRepository
from ..infrastructure.memory.sessions import InMemorySessionRepository
from ..infrastructure.snowflake.client import create_snowflake_connection
from ..infrastructure.snowflake.repositories.sessions import (
    SnowflakeConfig,
    SnowflakeSessionRepository,
)

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Shared in-memory repository for mock mode (persists across requests)
_mock_repository = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Repository and Service Dependencies
# ---------------------------------------------------------------------------

def get_session_repository(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[SessionRepository, None, None]:
    """
    Provide a session repository for the request.

    This is a generator function because the Snowflake connection must be
    closed after the request. In mock mode the same in-memory repository
    is reused so data persists while the process runs.
    """
    global _mock_repository

    if settings.snowflake_mock_mode:
        if _mock_repository is None:
            _mock_repository = InMemorySessionRepository()
            logger.info("Created shared in-memory session repository")
        yield _mock_repository
    else:
        config = SnowflakeConfig(
            account=settings.snowflake_account,
            user=settings.snowflake_user,
            password=settings.snowflake_password or None,
            private_key_path=settings.snowflake_private_key_path,
            private_key_base64=settings.snowflake_private_key_base64,
            database=settings.snowflake_database,
            schema=settings.snowflake_schema,
            warehouse=settings.snowflake_warehouse,
            role=settings.snowflake_role,
        )

        with create_snowflake_connection(config) as conn:
            logger.debug("Created SnowflakeSessionRepository")
            yield SnowflakeSessionRepository(conn)


def get_schedule_service(
    settings: Annotated[Settings, Depends(get_settings)],
    repository: Annotated[SessionRepository, Depends(get_session_repository)],
) -> ScheduleService:
    """
    Provide a ScheduleService bound to the request's repository.

    The service is stateless, so a new instance per request is cheap.
    """
    return ScheduleService(
        repository,
        propagate_fields=settings.series_propagation_fields_list,
    )


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
ScheduleServiceDep = Annotated[ScheduleService, Depends(get_schedule_service)]
SessionRepositoryDep = Annotated[SessionRepository, Depends(get_session_repository)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
