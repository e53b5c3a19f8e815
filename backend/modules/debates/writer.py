"""
Per-debate sequential writer.

All orchestrator mutations go through a DebateWriter. For a given debate
ID, each call takes that debate's lock, applies the repository operation,
and publishes the mirroring message before releasing it, so store order and
channel order always agree even when both sides of a phase finish at once.
"""

import asyncio
import logging
from typing import Any, Optional

from .models import (
    ControversyMoment,
    CrossExamRound,
    Debate,
    DebateAgent,
    DebatePhase,
    FinalScore,
    JudgeType,
    LightningRound,
    MomentumEvent,
    Side,
)
from .outputs import Judgment, TopicAnalysis
from .publisher import EventPublisher
from .repository import DebateRepository

logger = logging.getLogger(__name__)


class DebateWriter:
    """Applies store mutations and publishes them, one at a time per debate."""

    def __init__(self, repository: DebateRepository, publisher: EventPublisher) -> None:
        self._repository = repository
        self._publisher = publisher
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def repository(self) -> DebateRepository:
        return self._repository

    @property
    def publisher(self) -> EventPublisher:
        return self._publisher

    def _lock(self, debate_id: str) -> asyncio.Lock:
        if debate_id not in self._locks:
            self._locks[debate_id] = asyncio.Lock()
        return self._locks[debate_id]

    async def create(self, debate: Debate) -> Debate:
        async with self._lock(debate.id):
            return self._repository.create(debate)

    async def initialize(
        self,
        debate_id: str,
        analysis: TopicAnalysis,
        agents: list[DebateAgent],
    ) -> Optional[Debate]:
        async with self._lock(debate_id):
            debate = self._repository.initialize(debate_id, analysis, agents)
            if debate is not None:
                await self._publisher.publish_init(debate)
            return debate

    async def set_status(
        self,
        debate_id: str,
        phase: DebatePhase,
        sub_label: Optional[str] = None,
        progress: float = 0.0,
    ) -> Optional[Debate]:
        async with self._lock(debate_id):
            debate = self._repository.set_phase_status(debate_id, phase, sub_label, progress)
            if debate is not None:
                await self._publisher.publish_status(debate)
            return debate

    async def set_side_payload(
        self,
        debate_id: str,
        phase: DebatePhase,
        side: Side,
        payload: Any,
    ) -> Optional[Debate]:
        async with self._lock(debate_id):
            debate = self._repository.set_side_payload(debate_id, phase, side, payload)
            if debate is not None:
                await self._publisher.publish_side_payload(debate_id, phase, side, payload)
            return debate

    async def set_cross_exam_round(
        self,
        debate_id: str,
        cross_exam_round: CrossExamRound,
    ) -> Optional[Debate]:
        async with self._lock(debate_id):
            debate = self._repository.set_round_payload(
                debate_id,
                DebatePhase.CROSS_EXAMINATION,
                cross_exam_round.round_index,
                cross_exam_round,
            )
            if debate is not None:
                await self._publisher.publish_cross_exam(debate_id, cross_exam_round)
            return debate

    async def set_lightning_round(
        self,
        debate_id: str,
        lightning_round: LightningRound,
    ) -> Optional[Debate]:
        async with self._lock(debate_id):
            debate = self._repository.set_phase_payload(
                debate_id, DebatePhase.LIGHTNING_ROUND, lightning_round
            )
            if debate is not None:
                await self._publisher.publish_lightning(debate_id, lightning_round)
            return debate

    async def set_judge_verdict(
        self,
        debate_id: str,
        judge_type: JudgeType,
        judgment: Judgment,
    ) -> Optional[Debate]:
        async with self._lock(debate_id):
            debate = self._repository.set_judge_verdict(debate_id, judge_type, judgment)
            if debate is not None:
                await self._publisher.publish_judge(debate_id, judge_type, judgment)
            return debate

    async def set_final_score(self, debate_id: str, score: FinalScore) -> Optional[Debate]:
        async with self._lock(debate_id):
            debate = self._repository.set_final_score(debate_id, score)
            if debate is not None:
                await self._publisher.publish_final_score(debate_id, score)
            return debate

    async def append_momentum_event(
        self,
        debate_id: str,
        event: MomentumEvent,
    ) -> Optional[Debate]:
        async with self._lock(debate_id):
            debate = self._repository.append_momentum_event(debate_id, event)
            if debate is not None:
                await self._publisher.publish_momentum(debate_id, debate.momentum)
            return debate

    async def append_controversy_moments(
        self,
        debate_id: str,
        moments: list[ControversyMoment],
    ) -> Optional[Debate]:
        """Append moments in order. Controversy has no message of its own."""
        async with self._lock(debate_id):
            debate = self._repository.get(debate_id)
            for moment in moments:
                debate = self._repository.append_controversy_moment(debate_id, moment)
            return debate

    async def complete(self, debate_id: str) -> Optional[Debate]:
        """Mark the debate finished, publish the final status and close its channel."""
        async with self._lock(debate_id):
            debate = self._repository.set_phase_status(
                debate_id, DebatePhase.COMPLETED, "Finished", 1.0
            )
            if debate is not None:
                await self._publisher.publish_status(debate)
            await self._publisher.close(debate_id)
            return debate

    async def fail(self, debate_id: str, message: str) -> Optional[Debate]:
        """Mark the debate failed and close its channel without announcing it."""
        async with self._lock(debate_id):
            current = self._repository.get(debate_id)
            debate = current
            if current is not None and not current.is_terminal:
                debate = self._repository.mark_failed(debate_id, message)
            await self._publisher.close(debate_id)
            logger.info(f"Debate {debate_id} failed: {message}")
            return debate
