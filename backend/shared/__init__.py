"""
Shared infrastructure for the Debate Arena backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- exceptions: Base exception classes
- repository: Key-value backends and the base repository

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .exceptions import (
    ArenaError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    ExternalServiceError,
)
from .repository import BaseRepository, InMemoryBackend, KeyValueBackend

__all__ = [
    "Settings",
    "get_settings",
    "ArenaError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "ExternalServiceError",
    "BaseRepository",
    "InMemoryBackend",
    "KeyValueBackend",
]
