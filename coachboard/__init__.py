"""
CoachBoard - scheduling backend for a coach/trainer business dashboard.

This package contains the complete application:
- core: Framework-agnostic scheduling logic
- infrastructure: Persistence adapters (in-memory, Snowflake)
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
