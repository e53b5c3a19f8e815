"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import pytest

from api.dependencies import reset_container
from modules.debates.orchestrator import OrchestratorSettings
from modules.debates.publisher import EventPublisher
from modules.debates.repository import DebateRepository
from modules.debates.writer import DebateWriter
from modules.realtime.broker import InMemoryBroker
from shared.config import get_settings

from tests.factories import ScriptedGenerator


# Test token secret (only for testing)
TEST_TOKEN_SECRET = "test-secret-key-for-testing-only"


@pytest.fixture(autouse=True)
def reset_singletons(monkeypatch):
    """Fresh settings and service container for every test."""
    monkeypatch.setenv("REALTIME_TOKEN_SECRET", TEST_TOKEN_SECRET)
    get_settings.cache_clear()
    reset_container()
    yield
    reset_container()
    get_settings.cache_clear()


@pytest.fixture
def repository() -> DebateRepository:
    return DebateRepository()


@pytest.fixture
def broker() -> InMemoryBroker:
    return InMemoryBroker()


@pytest.fixture
def publisher(broker: InMemoryBroker) -> EventPublisher:
    return EventPublisher(broker)


@pytest.fixture
def writer(repository: DebateRepository, publisher: EventPublisher) -> DebateWriter:
    return DebateWriter(repository, publisher)


@pytest.fixture
def generator() -> ScriptedGenerator:
    return ScriptedGenerator()


@pytest.fixture
def fast_settings() -> OrchestratorSettings:
    """Orchestration settings with no reveal pauses and short timeouts."""
    return OrchestratorSettings(phase_timeout_seconds=5.0, judge_reveal_delay_seconds=0.0)
