"""
Repository pattern implementations for Snowflake.

Repositories translate between domain models and database representations.
"""

from .sessions import SnowflakeSessionRepository

__all__ = ["SnowflakeSessionRepository"]
