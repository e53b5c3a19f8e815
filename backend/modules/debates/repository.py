"""
Debate repository.

Holds one Debate aggregate per debate ID on top of a key-value backend and
exposes narrow, named partial-update operations instead of general
mutation, so each operation's invariant is checked locally:

- status only moves forward (or into ``error``)
- terminal debates are immutable
- payload slots are replaced, never appended to
- momentum scores, leader and volatility are re-derived on every append

Every effective mutation stamps ``updated_at``. Writing a value identical
to the stored one is a no-op and leaves the aggregate untouched.
"""

import logging
from typing import Any, Callable, Optional

from shared.repository import BaseRepository, KeyValueBackend

from .exceptions import (
    DebateAlreadyCompletedError,
    PhaseTransitionError,
    UnknownDebateError,
)
from .models import (
    SIDE_SLOTS,
    ControversyMoment,
    CrossExamRound,
    CurrentPhase,
    Debate,
    DebateAgent,
    DebatePhase,
    FinalScore,
    JudgeType,
    LightningRound,
    MomentumEvent,
    Side,
    can_transition,
    utc_now,
)
from .momentum import apply_momentum_event
from .outputs import Judgment, TopicAnalysis

logger = logging.getLogger(__name__)


class DebateRepository(BaseRepository[Debate]):
    """
    Repository for debate aggregates.

    Note: This repository is not a serialization point. Callers must not
    issue conflicting concurrent writes to the same field of one debate;
    the per-debate writer funnels the orchestrator's mutations for that.

    Operations against an unknown debate ID log a warning and return None.
    With ``strict=True`` they raise UnknownDebateError instead.
    """

    def __init__(self, db: Optional[KeyValueBackend] = None, strict: bool = False) -> None:
        super().__init__(db)
        self._strict = strict

    # -------------------------------------------------------------------------
    # Reads and lifecycle
    # -------------------------------------------------------------------------

    def create(self, debate: Debate) -> Debate:
        """Store a new debate. An existing debate with the same ID is kept."""
        existing = self.get(debate.id)
        if existing is not None:
            logger.debug(f"Debate {debate.id} already exists, keeping stored copy")
            return existing
        self._save(debate)
        return debate

    def get(self, debate_id: str) -> Optional[Debate]:
        data = self._db.get(debate_id)
        if data is None:
            return None
        return Debate.model_validate(data)

    def list_all(self) -> list[Debate]:
        """All debates, most recently created first."""
        debates = [d for d in (self.get(key) for key in self._db.keys()) if d is not None]
        return sorted(debates, key=lambda d: d.created_at, reverse=True)

    def delete(self, debate_id: str) -> bool:
        return self._db.delete(debate_id)

    # -------------------------------------------------------------------------
    # Named partial updates
    # -------------------------------------------------------------------------

    def initialize(
        self,
        debate_id: str,
        analysis: TopicAnalysis,
        agents: list[DebateAgent],
    ) -> Optional[Debate]:
        """Record the topic analysis and the two agents."""
        sides = sorted(agent.side.value for agent in agents)
        if sides != [Side.CON.value, Side.PRO.value]:
            raise ValueError(f"Expected exactly one pro and one con agent, got {sides}")

        def mutation(debate: Debate) -> None:
            debate.analysis = analysis
            debate.agents = sorted(agents, key=lambda a: a.side != Side.PRO)

        return self._mutate(debate_id, mutation)

    def set_phase_status(
        self,
        debate_id: str,
        phase: DebatePhase,
        sub_label: Optional[str] = None,
        progress: float = 0.0,
    ) -> Optional[Debate]:
        """
        Move the debate to ``phase`` and record progress within it.

        Raises:
            PhaseTransitionError: If ``phase`` is earlier than the current status
        """

        def mutation(debate: Debate) -> None:
            if not can_transition(debate.status, phase):
                raise PhaseTransitionError(debate_id, debate.status.value, phase.value)
            debate.status = phase
            debate.current_phase = CurrentPhase(type=phase, sub_label=sub_label, progress=progress)

        return self._mutate(debate_id, mutation)

    def set_side_payload(
        self,
        debate_id: str,
        phase: DebatePhase,
        side: Side,
        payload: Any,
    ) -> Optional[Debate]:
        """
        Write one side's payload for a symmetric phase.

        Only the given side's slot is touched; the sibling side's slot is
        left as it is.
        """
        if phase not in SIDE_SLOTS:
            raise ValueError(f"{phase.value} has no per-side payload slots")
        slot, field_template = SIDE_SLOTS[phase]

        def mutation(debate: Debate) -> None:
            setattr(getattr(debate.phases, slot), field_template.format(side=side.value), payload)

        return self._mutate(debate_id, mutation)

    def set_round_payload(
        self,
        debate_id: str,
        phase: DebatePhase,
        round_index: int,
        payload: CrossExamRound,
    ) -> Optional[Debate]:
        """Write one cross-examination round."""
        if phase is not DebatePhase.CROSS_EXAMINATION:
            raise ValueError(f"{phase.value} has no round payload slots")
        if payload.round_index != round_index:
            raise ValueError(
                f"Round payload index {payload.round_index} does not match slot {round_index}"
            )

        def mutation(debate: Debate) -> None:
            debate.phases.cross_examination.rounds[round_index] = payload

        return self._mutate(debate_id, mutation)

    def set_phase_payload(
        self,
        debate_id: str,
        phase: DebatePhase,
        payload: LightningRound,
    ) -> Optional[Debate]:
        """Write the payload of a single-result phase."""
        if phase is not DebatePhase.LIGHTNING_ROUND:
            raise ValueError(f"{phase.value} is not a single-result phase")

        def mutation(debate: Debate) -> None:
            debate.phases.lightning_round = payload

        return self._mutate(debate_id, mutation)

    def set_judge_verdict(
        self,
        debate_id: str,
        judge_type: JudgeType,
        judgment: Judgment,
    ) -> Optional[Debate]:
        def mutation(debate: Debate) -> None:
            setattr(debate.phases.verdict, f"{judge_type.value}_score", judgment)

        return self._mutate(debate_id, mutation)

    def append_momentum_event(self, debate_id: str, event: MomentumEvent) -> Optional[Debate]:
        """Append a momentum event and re-derive score, leader and volatility."""

        def mutation(debate: Debate) -> None:
            debate.momentum = apply_momentum_event(debate.momentum, event)

        return self._mutate(debate_id, mutation)

    def append_controversy_moment(
        self,
        debate_id: str,
        moment: ControversyMoment,
    ) -> Optional[Debate]:
        def mutation(debate: Debate) -> None:
            debate.controversy_moments.append(moment)

        return self._mutate(debate_id, mutation)

    def set_final_score(self, debate_id: str, score: FinalScore) -> Optional[Debate]:
        """
        Record the final score.

        Meant to be set once. A later call replaces the stored score and logs
        a warning when the new value differs.
        """

        def mutation(debate: Debate) -> None:
            existing = debate.phases.verdict.final_score
            if existing is not None and existing != score:
                logger.warning(
                    f"Replacing final score for {debate_id}: "
                    f"{existing.model_dump()} -> {score.model_dump()}"
                )
            debate.phases.verdict.final_score = score

        return self._mutate(debate_id, mutation)

    def mark_failed(self, debate_id: str, message: str) -> Optional[Debate]:
        """Move a debate into the terminal ``error`` state."""

        def mutation(debate: Debate) -> None:
            debate.status = DebatePhase.ERROR
            debate.current_phase = CurrentPhase(
                type=DebatePhase.ERROR,
                sub_label=message,
                progress=debate.current_phase.progress,
            )
            debate.error_message = message

        return self._mutate(debate_id, mutation)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _mutate(
        self,
        debate_id: str,
        mutation: Callable[[Debate], None],
    ) -> Optional[Debate]:
        current = self.get(debate_id)
        if current is None:
            return self._unknown(debate_id)
        if current.is_terminal:
            raise DebateAlreadyCompletedError(debate_id, current.status.value)

        working = current.model_copy(deep=True)
        mutation(working)
        if working == current:
            return current

        working.updated_at = utc_now()
        self._save(working)
        return working

    def _unknown(self, debate_id: str) -> None:
        if self._strict:
            raise UnknownDebateError(debate_id)
        logger.warning(f"Ignoring update for unknown debate {debate_id}")
        return None

    def _save(self, debate: Debate) -> None:
        self._db.put(debate.id, debate.model_dump(mode="json"))
