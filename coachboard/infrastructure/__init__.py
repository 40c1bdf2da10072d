"""
Infrastructure layer - external service integrations.

Each subdirectory wraps a persistence backend:
- memory: In-memory repository for mock mode and tests
- snowflake: Database persistence

These wrappers translate between storage formats and our domain models.
"""
