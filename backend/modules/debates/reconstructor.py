"""
Client-side state reconstruction.

``reduce_message`` folds one DebateMessage into a Debate view using the
same upsert semantics as the corresponding repository operation: slots are
keyed by side, round or judge and replaced, never appended. Applying a
message twice therefore yields the same view as applying it once.

DebateReconstructor wraps the reducer with sequence tracking so replayed
or duplicated deliveries are skipped outright.
"""

import logging
from typing import Iterable, Optional

from .models import (
    SIDE_MESSAGE_TYPES,
    SIDE_SLOTS,
    CrossExamRound,
    CurrentPhase,
    Debate,
    DebateAgent,
    DebateMessage,
    DebateMessageType,
    DebatePhase,
    FinalScore,
    LightningRound,
    MomentumState,
    can_transition,
)
from .outputs import ArgumentOutput, ClosingOutput, Judgment, TopicAnalysis

logger = logging.getLogger(__name__)

_SIDE_PAYLOAD_TYPES = {
    DebatePhase.OPENING: ArgumentOutput,
    DebatePhase.REBUTTALS: ArgumentOutput,
    DebatePhase.CLOSING: ClosingOutput,
}

_PHASE_FOR_MESSAGE = {message_type: phase for phase, message_type in SIDE_MESSAGE_TYPES.items()}


def empty_view(debate_id: str, topic: str = "") -> Debate:
    return Debate(id=debate_id, topic=topic)


def reduce_message(view: Debate, message: DebateMessage) -> Debate:
    """Return a new view with ``message`` applied. ``view`` is not modified."""
    updated = view.model_copy(deep=True)
    data = message.data

    match message.type:
        case DebateMessageType.INIT:
            updated.topic = data.get("topic", updated.topic)
            updated.agents = [DebateAgent.model_validate(a) for a in data.get("agents", [])]
            if data.get("analysis") is not None:
                updated.analysis = TopicAnalysis.model_validate(data["analysis"])

        case DebateMessageType.STATUS:
            phase = DebatePhase(data["phase"])
            if updated.status == phase or can_transition(updated.status, phase):
                updated.status = phase
                updated.current_phase = CurrentPhase(
                    type=phase,
                    sub_label=data.get("sub_label"),
                    progress=data.get("progress") or 0.0,
                )
            else:
                logger.debug(f"Ignoring stale status {phase.value} for {view.id}")

        case DebateMessageType.OPENING | DebateMessageType.REBUTTAL | DebateMessageType.CLOSING:
            if message.side is None:
                logger.warning(f"Dropping {message.type.value} message without a side")
                return view
            phase = _PHASE_FOR_MESSAGE[message.type]
            slot, field_template = SIDE_SLOTS[phase]
            payload = _SIDE_PAYLOAD_TYPES[phase].model_validate(data)
            setattr(
                getattr(updated.phases, slot),
                field_template.format(side=message.side.value),
                payload,
            )

        case DebateMessageType.CROSS_EXAM:
            cross_exam_round = CrossExamRound.model_validate(data)
            updated.phases.cross_examination.rounds[cross_exam_round.round_index] = cross_exam_round

        case DebateMessageType.LIGHTNING:
            updated.phases.lightning_round = LightningRound.model_validate(data)

        case DebateMessageType.VERDICT_JUDGE:
            if message.judge_type is None:
                logger.warning("Dropping verdict-judge message without a judge type")
                return view
            setattr(
                updated.phases.verdict,
                f"{message.judge_type.value}_score",
                Judgment.model_validate(data),
            )

        case DebateMessageType.VERDICT_FINAL:
            updated.phases.verdict.final_score = FinalScore.model_validate(data)

        case DebateMessageType.MOMENTUM:
            updated.momentum = MomentumState.model_validate(data)

    updated.updated_at = message.timestamp
    return updated


class DebateReconstructor:
    """
    Folds a debate's message stream into a local Debate view.

    Example:
        reconstructor = DebateReconstructor("debate-abc")
        async for message in service.subscribe("debate-abc"):
            view = reconstructor.apply(message)
    """

    def __init__(self, debate_id: str, topic: str = "") -> None:
        self.view = empty_view(debate_id, topic)
        self.last_sequence = 0

    def apply(self, message: DebateMessage) -> Debate:
        if message.debate_id != self.view.id:
            logger.warning(
                f"Ignoring message for {message.debate_id} on view {self.view.id}"
            )
            return self.view
        if message.sequence and message.sequence <= self.last_sequence:
            logger.debug(f"Skipping replayed message #{message.sequence}")
            return self.view

        self.view = reduce_message(self.view, message)
        self.last_sequence = max(self.last_sequence, message.sequence)
        return self.view

    def apply_all(self, messages: Iterable[DebateMessage]) -> Debate:
        for message in messages:
            self.apply(message)
        return self.view

    @property
    def final_score(self) -> Optional[FinalScore]:
        return self.view.final_score
