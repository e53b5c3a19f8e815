"""
Base repository class for storage access.

Repositories sit on top of a small key-value backend so the storage can be
swapped (in-memory for a single process, anything dict-like elsewhere)
without touching domain code. Values are JSON-compatible dicts; mapping to
and from pydantic models happens inside each repository.
"""

import copy
from typing import Any, Generic, Iterator, Optional, Protocol, TypeVar, runtime_checkable


T = TypeVar("T")


@runtime_checkable
class KeyValueBackend(Protocol):
    """Minimal storage contract used by repositories."""

    def get(self, key: str) -> Optional[dict[str, Any]]:
        ...

    def put(self, key: str, value: dict[str, Any]) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def keys(self) -> Iterator[str]:
        ...


class InMemoryBackend:
    """
    Process-local backend.

    Stores deep copies so callers can never mutate stored state by accident.
    Keys iterate in insertion order.
    """

    def __init__(self) -> None:
        self._items: dict[str, dict[str, Any]] = {}

    def get(self, key: str) -> Optional[dict[str, Any]]:
        value = self._items.get(key)
        return copy.deepcopy(value) if value is not None else None

    def put(self, key: str, value: dict[str, Any]) -> None:
        self._items[key] = copy.deepcopy(value)

    def delete(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def keys(self) -> Iterator[str]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for storage operations:
    - Backend access via self._db
    - Generic type parameter for model type hints

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class DebateRepository(BaseRepository[Debate]):
            def get(self, debate_id: str) -> Optional[Debate]:
                data = self._db.get(debate_id)
                return Debate.model_validate(data) if data else None
    """

    def __init__(self, db: Optional[KeyValueBackend] = None) -> None:
        """
        Initialize the repository with a storage backend.

        Args:
            db: Key-value backend; a fresh InMemoryBackend when omitted.
        """
        self._db = db if db is not None else InMemoryBackend()
