"""
Event publisher.

Mirrors observable debate mutations as DebateMessages on the debate's
channel (``debate:{id}``, topic ``updates``). Sequence numbers are assigned
per channel starting at 1. Once a channel is closed (the debate reached a
terminal state) nothing more is published on it.
"""

import logging
from typing import Any, Optional

from modules.realtime.broker import InMemoryBroker
from modules.realtime.tokens import DEFAULT_TOPIC, channel_for

from .models import (
    SIDE_MESSAGE_TYPES,
    CrossExamRound,
    Debate,
    DebateMessage,
    DebateMessageType,
    DebatePhase,
    FinalScore,
    JudgeType,
    LightningRound,
    MomentumState,
    Side,
)
from .outputs import Judgment

logger = logging.getLogger(__name__)


class EventPublisher:
    """Publishes typed debate messages onto a broker."""

    topic = DEFAULT_TOPIC

    def __init__(self, broker: InMemoryBroker) -> None:
        self._broker = broker
        self._sequences: dict[str, int] = {}
        self._closed: set[str] = set()

    @property
    def broker(self) -> InMemoryBroker:
        return self._broker

    def is_closed(self, debate_id: str) -> bool:
        return debate_id in self._closed

    async def publish(
        self,
        debate_id: str,
        message_type: DebateMessageType,
        data: dict[str, Any],
        side: Optional[Side] = None,
        judge_type: Optional[JudgeType] = None,
    ) -> Optional[DebateMessage]:
        """
        Publish one message.

        Returns:
            The published message, or None if the channel is closed
        """
        if debate_id in self._closed:
            logger.debug(f"Not publishing {message_type.value} for closed debate {debate_id}")
            return None

        sequence = self._sequences.get(debate_id, 0) + 1
        self._sequences[debate_id] = sequence
        message = DebateMessage(
            type=message_type,
            debate_id=debate_id,
            sequence=sequence,
            side=side,
            judge_type=judge_type,
            data=data,
        )
        await self._broker.publish(channel_for(debate_id), self.topic, message)
        logger.debug(f"Published {message_type.value} #{sequence} for {debate_id}")
        return message

    async def close(self, debate_id: str) -> None:
        """Stop publishing for ``debate_id`` and end its subscribers' streams."""
        self._closed.add(debate_id)
        await self._broker.close(channel_for(debate_id))

    # -------------------------------------------------------------------------
    # Typed helpers, one per message type
    # -------------------------------------------------------------------------

    async def publish_init(self, debate: Debate) -> Optional[DebateMessage]:
        return await self.publish(
            debate.id,
            DebateMessageType.INIT,
            {
                "topic": debate.topic,
                "agents": [a.model_dump(mode="json") for a in debate.agents],
                "analysis": debate.analysis.model_dump(mode="json") if debate.analysis else None,
            },
        )

    async def publish_status(self, debate: Debate) -> Optional[DebateMessage]:
        return await self.publish(
            debate.id,
            DebateMessageType.STATUS,
            {
                "phase": debate.current_phase.type.value,
                "sub_label": debate.current_phase.sub_label,
                "progress": debate.current_phase.progress,
            },
        )

    async def publish_side_payload(
        self,
        debate_id: str,
        phase: DebatePhase,
        side: Side,
        payload: Any,
    ) -> Optional[DebateMessage]:
        return await self.publish(
            debate_id,
            SIDE_MESSAGE_TYPES[phase],
            payload.model_dump(mode="json"),
            side=side,
        )

    async def publish_cross_exam(
        self,
        debate_id: str,
        cross_exam_round: CrossExamRound,
    ) -> Optional[DebateMessage]:
        return await self.publish(
            debate_id,
            DebateMessageType.CROSS_EXAM,
            cross_exam_round.model_dump(mode="json"),
        )

    async def publish_lightning(
        self,
        debate_id: str,
        lightning_round: LightningRound,
    ) -> Optional[DebateMessage]:
        return await self.publish(
            debate_id,
            DebateMessageType.LIGHTNING,
            lightning_round.model_dump(mode="json"),
        )

    async def publish_judge(
        self,
        debate_id: str,
        judge_type: JudgeType,
        judgment: Judgment,
    ) -> Optional[DebateMessage]:
        return await self.publish(
            debate_id,
            DebateMessageType.VERDICT_JUDGE,
            judgment.model_dump(mode="json"),
            judge_type=judge_type,
        )

    async def publish_final_score(
        self,
        debate_id: str,
        score: FinalScore,
    ) -> Optional[DebateMessage]:
        return await self.publish(
            debate_id,
            DebateMessageType.VERDICT_FINAL,
            score.model_dump(mode="json"),
        )

    async def publish_momentum(
        self,
        debate_id: str,
        momentum: MomentumState,
    ) -> Optional[DebateMessage]:
        return await self.publish(
            debate_id,
            DebateMessageType.MOMENTUM,
            momentum.model_dump(mode="json"),
        )
