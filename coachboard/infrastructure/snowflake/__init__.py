"""
Snowflake persistence for scheduled sessions.
"""

from .client import SnowflakeConnectionError, create_snowflake_connection
from .repositories.sessions import SnowflakeConfig, SnowflakeSessionRepository

__all__ = [
    "SnowflakeConfig",
    "SnowflakeConnectionError",
    "SnowflakeSessionRepository",
    "create_snowflake_connection",
]
