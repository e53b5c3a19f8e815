"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

Swapping the in-memory store or broker for an external one only means
changing the implementation created here.
"""

from typing import TYPE_CHECKING

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.debates.interfaces import IDebateService
    from modules.debates.publisher import EventPublisher
    from modules.debates.repository import DebateRepository
    from modules.debates.writer import DebateWriter
    from modules.generation.interfaces import IStructuredGenerator
    from modules.realtime.broker import InMemoryBroker


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self) -> None:
        self._debate_repository: "DebateRepository | None" = None
        self._broker: "InMemoryBroker | None" = None
        self._publisher: "EventPublisher | None" = None
        self._writer: "DebateWriter | None" = None
        self._generator: "IStructuredGenerator | None" = None
        self._debate_service: "IDebateService | None" = None

    @property
    def debate_repository(self) -> "DebateRepository":
        """Get the debate repository instance."""
        if self._debate_repository is None:
            from modules.debates.repository import DebateRepository
            from shared.config import get_settings
            self._debate_repository = DebateRepository(strict=get_settings().strict_debate_ids)
        return self._debate_repository

    @property
    def broker(self) -> "InMemoryBroker":
        """Get the realtime broker instance."""
        if self._broker is None:
            from modules.realtime.broker import InMemoryBroker
            self._broker = InMemoryBroker()
        return self._broker

    @property
    def publisher(self) -> "EventPublisher":
        if self._publisher is None:
            from modules.debates.publisher import EventPublisher
            self._publisher = EventPublisher(self.broker)
        return self._publisher

    @property
    def writer(self) -> "DebateWriter":
        if self._writer is None:
            from modules.debates.writer import DebateWriter
            self._writer = DebateWriter(self.debate_repository, self.publisher)
        return self._writer

    @property
    def generator(self) -> "IStructuredGenerator":
        """Get the structured generator, built from the configured LLM provider."""
        if self._generator is None:
            from modules.generation.llm import LLMStructuredGenerator
            self._generator = LLMStructuredGenerator.from_settings()
        return self._generator

    @property
    def debates(self) -> "IDebateService":
        """Get the debate service instance."""
        if self._debate_service is None:
            from modules.debates.service import DebateService
            self._debate_service = DebateService(
                writer=self.writer,
                generator=self.generator,
            )
        return self._debate_service

    async def shutdown(self) -> None:
        """Cancel debate runs still in progress."""
        if self._debate_service is not None:
            await self._debate_service.shutdown()

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._debate_repository = None
        self._broker = None
        self._publisher = None
        self._writer = None
        self._generator = None
        self._debate_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_debate_service() -> "IDebateService":
    """FastAPI dependency for debate service."""
    return get_container().debates


def get_debate_repository() -> "DebateRepository":
    """FastAPI dependency for debate repository."""
    return get_container().debate_repository
