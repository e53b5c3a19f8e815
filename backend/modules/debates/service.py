"""
Debates service implementation.

Creates debates, runs their orchestrators as background tasks, and exposes
snapshots and observer channels to the API layer.
"""

import asyncio
import logging
import uuid
from typing import AsyncIterator, Optional

from modules.generation.interfaces import IStructuredGenerator
from modules.realtime import DEFAULT_TOPIC, channel_for, issue_subscription_token

from .exceptions import UnknownDebateError
from .interfaces import IDebateService
from .models import (
    Debate,
    DebateListItem,
    DebateListResponse,
    DebateMessage,
    SubscriptionTokenResponse,
)
from .orchestrator import OrchestratorSettings, PhaseOrchestrator
from .writer import DebateWriter

logger = logging.getLogger(__name__)


def debate_id_for(request_id: str) -> str:
    return f"debate-{request_id}"


class DebateService(IDebateService):
    """
    Debate service over an in-process store and broker.

    Implements IDebateService. Runs are fire-and-forget from the caller's
    point of view; the service holds a reference to each running task until
    it finishes.
    """

    def __init__(
        self,
        writer: DebateWriter,
        generator: IStructuredGenerator,
        settings: Optional[OrchestratorSettings] = None,
    ):
        self._writer = writer
        self._generator = generator
        self._settings = settings or OrchestratorSettings.from_settings()
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def writer(self) -> DebateWriter:
        return self._writer

    async def trigger_debate(self, topic: str, request_id: Optional[str] = None) -> str:
        """Create the debate and schedule its run."""
        debate, created = await self._create(topic, request_id)
        if created:
            task = asyncio.create_task(self._run(debate.id), name=f"debate:{debate.id}")
            self._tasks[debate.id] = task
            task.add_done_callback(lambda _: self._tasks.pop(debate.id, None))
            logger.info(f"Triggered debate {debate.id}: {topic!r}")
        return debate.id

    async def run_debate(self, topic: str, request_id: Optional[str] = None) -> Debate:
        debate, created = await self._create(topic, request_id)
        if not created:
            return debate
        return await self._run(debate.id)

    async def get_debate(self, debate_id: str) -> Optional[Debate]:
        return self._writer.repository.get(debate_id)

    async def list_debates(self) -> DebateListResponse:
        items = [
            DebateListItem(
                id=debate.id,
                topic=debate.topic,
                status=debate.status,
                progress=debate.current_phase.progress,
                winner=debate.final_score.winner if debate.final_score else None,
                created_at=debate.created_at,
            )
            for debate in self._writer.repository.list_all()
        ]
        return DebateListResponse(debates=items, total=len(items))

    def issue_token(self, debate_id: str) -> SubscriptionTokenResponse:
        if self._writer.repository.get(debate_id) is None:
            raise UnknownDebateError(debate_id)
        token, expires_at = issue_subscription_token(debate_id)
        return SubscriptionTokenResponse(
            token=token,
            channel=channel_for(debate_id),
            topics=[DEFAULT_TOPIC],
            expires_at=expires_at,
        )

    async def subscribe(self, debate_id: str) -> AsyncIterator[DebateMessage]:
        broker = self._writer.publisher.broker
        async for message in broker.subscribe(channel_for(debate_id), DEFAULT_TOPIC):
            yield message

    async def wait_for(self, debate_id: str) -> Optional[Debate]:
        """Wait for a background run to finish and return the stored debate."""
        task = self._tasks.get(debate_id)
        if task is not None:
            await asyncio.shield(task)
        return self._writer.repository.get(debate_id)

    async def shutdown(self) -> None:
        """Cancel any runs still in progress."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    async def _create(self, topic: str, request_id: Optional[str]) -> tuple[Debate, bool]:
        debate_id = debate_id_for(request_id or str(uuid.uuid4()))
        existing = self._writer.repository.get(debate_id)
        if existing is not None:
            logger.debug(f"Debate {debate_id} already exists, not starting another run")
            return existing, False
        debate = await self._writer.create(Debate(id=debate_id, topic=topic))
        return debate, True

    async def _run(self, debate_id: str) -> Debate:
        orchestrator = PhaseOrchestrator(debate_id, self._writer, self._generator, self._settings)
        return await orchestrator.advance()

