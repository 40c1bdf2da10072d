"""
In-memory persistence for local development and tests.
"""

from .sessions import InMemorySessionRepository

__all__ = ["InMemorySessionRepository"]
