"""
Debates module data models.

These models define the debate aggregate, its derived analytic state, and
the messages published to observers while a debate runs.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from .outputs import (
    AgentPersona,
    ArgumentOutput,
    ClosingOutput,
    CrossExamExchange,
    Judgment,
    LightningAnswer,
    LightningQuestion,
    TopicAnalysis,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Side(str, Enum):
    """Debate position."""

    PRO = "pro"
    CON = "con"

    @property
    def opponent(self) -> "Side":
        return Side.CON if self is Side.PRO else Side.PRO

    @property
    def label(self) -> str:
        return self.value.title()


class DebatePhase(str, Enum):
    """Debate status / phase tag."""

    PREPARING = "preparing"
    OPENING = "opening-statements"
    CROSS_EXAMINATION = "cross-examination"
    REBUTTALS = "rebuttals"
    LIGHTNING_ROUND = "lightning-round"
    CLOSING = "closing-statements"
    VERDICT = "verdict"
    COMPLETED = "completed"  # Finished successfully
    ERROR = "error"          # Timed out or failed a precondition

    @property
    def is_terminal(self) -> bool:
        return self in (DebatePhase.COMPLETED, DebatePhase.ERROR)


# Fixed phase order. PREPARING precedes it and COMPLETED follows it.
PHASE_SEQUENCE: list[DebatePhase] = [
    DebatePhase.OPENING,
    DebatePhase.CROSS_EXAMINATION,
    DebatePhase.REBUTTALS,
    DebatePhase.LIGHTNING_ROUND,
    DebatePhase.CLOSING,
    DebatePhase.VERDICT,
]

_PHASE_ORDER: list[DebatePhase] = [DebatePhase.PREPARING, *PHASE_SEQUENCE, DebatePhase.COMPLETED]


def phase_rank(phase: DebatePhase) -> int:
    """Position of a non-error phase in the forward ordering."""
    return _PHASE_ORDER.index(phase)


def next_phase(phase: DebatePhase) -> DebatePhase:
    """The phase that follows ``phase``; COMPLETED after the last one."""
    return _PHASE_ORDER[phase_rank(phase) + 1]


def can_transition(current: DebatePhase, target: DebatePhase) -> bool:
    """Whether ``current`` may move to ``target`` without regressing."""
    if current.is_terminal:
        return False
    if target is DebatePhase.ERROR:
        return True
    return phase_rank(target) >= phase_rank(current)


class Leader(str, Enum):
    PRO = "pro"
    CON = "con"
    TIED = "tied"


class Volatility(str, Enum):
    STABLE = "stable"
    SHIFTING = "shifting"
    DRAMATIC = "dramatic"


class ControversyType(str, Enum):
    CONCESSION = "concession"
    ATTACK = "attack"
    DEFLECTION = "deflection"
    ZINGER = "zinger"
    REVERSAL = "reversal"


class Impact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        return _IMPACT_SEVERITY[self]


_IMPACT_SEVERITY = {
    Impact.LOW: 1,
    Impact.MEDIUM: 2,
    Impact.HIGH: 3,
    Impact.CRITICAL: 4,
}


class JudgeType(str, Enum):
    LOGIC = "logic"
    EVIDENCE = "evidence"
    RHETORIC = "rhetoric"


# =============================================================================
# Aggregate
# =============================================================================


class CurrentPhase(BaseModel):
    """Where the debate currently is, for progress displays."""

    type: DebatePhase = Field(..., description="Phase tag")
    sub_label: Optional[str] = Field(None, description="Human-readable step label")
    progress: float = Field(default=0.0, ge=0.0, le=1.0, description="Progress within the phase")


class DebateAgent(BaseModel):
    """One of the two debaters."""

    side: Side
    role: str = ""
    stance: str = Field(..., description="The position this agent argues")
    persona: AgentPersona
    system_prompt: str = Field(..., description="Precomputed instruction block")

    @property
    def name(self) -> str:
        return self.persona.name


class OpeningStatementsPhase(BaseModel):
    pro_statement: Optional[ArgumentOutput] = None
    con_statement: Optional[ArgumentOutput] = None


class CrossExamRound(BaseModel):
    """One cross-examination round and who asked whom."""

    round_index: int = Field(..., ge=1, le=2)
    questioner: Side
    respondent: Side
    exchange: CrossExamExchange


class CrossExaminationPhase(BaseModel):
    rounds: dict[int, CrossExamRound] = Field(default_factory=dict)


class RebuttalsPhase(BaseModel):
    pro_rebuttal: Optional[ArgumentOutput] = None
    con_rebuttal: Optional[ArgumentOutput] = None


class LightningRound(BaseModel):
    """Rapid-fire questions, every answer from both sides, and concessions."""

    questions: list[LightningQuestion] = Field(default_factory=list)
    pro_answers: list[LightningAnswer] = Field(default_factory=list)
    con_answers: list[LightningAnswer] = Field(default_factory=list)
    concessions_made: list[str] = Field(default_factory=list)


class ClosingStatementsPhase(BaseModel):
    pro_closing: Optional[ClosingOutput] = None
    con_closing: Optional[ClosingOutput] = None


class FinalScore(BaseModel):
    pro: float = Field(..., ge=0, description="Sum of judge scores for pro")
    con: float = Field(..., ge=0, description="Sum of judge scores for con")
    winner: str = Field(..., description="Winning agent's name, or 'tie'")
    margin: float = Field(..., ge=0)


class VerdictPhase(BaseModel):
    logic_score: Optional[Judgment] = None
    evidence_score: Optional[Judgment] = None
    rhetoric_score: Optional[Judgment] = None
    final_score: Optional[FinalScore] = None

    def judgments(self) -> list[Judgment]:
        return [j for j in (self.logic_score, self.evidence_score, self.rhetoric_score) if j]


class DebatePhases(BaseModel):
    """Phase payload slots, filled as the debate progresses."""

    opening_statements: OpeningStatementsPhase = Field(default_factory=OpeningStatementsPhase)
    cross_examination: CrossExaminationPhase = Field(default_factory=CrossExaminationPhase)
    rebuttals: RebuttalsPhase = Field(default_factory=RebuttalsPhase)
    lightning_round: Optional[LightningRound] = None
    closing_statements: ClosingStatementsPhase = Field(default_factory=ClosingStatementsPhase)
    verdict: VerdictPhase = Field(default_factory=VerdictPhase)


# Phase -> (slot attribute on DebatePhases, per-side field template)
SIDE_SLOTS: dict[DebatePhase, tuple[str, str]] = {
    DebatePhase.OPENING: ("opening_statements", "{side}_statement"),
    DebatePhase.REBUTTALS: ("rebuttals", "{side}_rebuttal"),
    DebatePhase.CLOSING: ("closing_statements", "{side}_closing"),
}


class MomentumEvent(BaseModel):
    """A single momentum swing. Immutable once appended."""

    model_config = {"frozen": True}

    timestamp: datetime = Field(default_factory=utc_now)
    phase: str = Field(..., description="Phase label, e.g. 'opening-pro'")
    trigger: str = Field(..., description="Dominant factor name")
    shift: float = Field(..., description="Signed shift; positive favours pro")
    description: str


class MomentumScore(BaseModel):
    pro: float = Field(default=0.0, ge=0)
    con: float = Field(default=0.0, ge=0)


class MomentumState(BaseModel):
    current_score: MomentumScore = Field(default_factory=MomentumScore)
    history: list[MomentumEvent] = Field(default_factory=list)
    current_leader: Leader = Leader.TIED
    volatility: Volatility = Volatility.STABLE


class ControversyMoment(BaseModel):
    """A notable, clip-worthy excerpt. Immutable once appended."""

    model_config = {"frozen": True}

    timestamp: datetime = Field(default_factory=utc_now)
    type: ControversyType
    side: Side
    agent: str = Field(..., description="Name of the agent who produced it")
    description: str
    impact: Impact
    excerpt: str


class Debate(BaseModel):
    """The root debate aggregate."""

    id: str = Field(..., description="Debate ID, derived from the trigger request")
    topic: str = Field(default="", description="Topic text; empty only in an unseeded client view")
    status: DebatePhase = DebatePhase.PREPARING
    current_phase: CurrentPhase = Field(
        default_factory=lambda: CurrentPhase(type=DebatePhase.PREPARING, progress=0.0)
    )
    analysis: Optional[TopicAnalysis] = None
    agents: list[DebateAgent] = Field(default_factory=list)
    phases: DebatePhases = Field(default_factory=DebatePhases)
    momentum: MomentumState = Field(default_factory=MomentumState)
    controversy_moments: list[ControversyMoment] = Field(default_factory=list)
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def final_score(self) -> Optional[FinalScore]:
        return self.phases.verdict.final_score

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def agent_for(self, side: Side) -> Optional[DebateAgent]:
        return next((a for a in self.agents if a.side == side), None)

    def side_payload(self, phase: DebatePhase, side: Side) -> Any:
        slot, field_name = SIDE_SLOTS[phase]
        return getattr(getattr(self.phases, slot), field_name.format(side=side.value))


# =============================================================================
# Observer messages
# =============================================================================


class DebateMessageType(str, Enum):
    """Types of messages published on a debate channel."""

    INIT = "init"
    STATUS = "status"
    OPENING = "opening"
    CROSS_EXAM = "cross-exam"
    REBUTTAL = "rebuttal"
    LIGHTNING = "lightning"
    CLOSING = "closing"
    VERDICT_JUDGE = "verdict-judge"
    VERDICT_FINAL = "verdict-final"
    MOMENTUM = "momentum"


# Side-payload phases and the message type that mirrors them
SIDE_MESSAGE_TYPES: dict[DebatePhase, DebateMessageType] = {
    DebatePhase.OPENING: DebateMessageType.OPENING,
    DebatePhase.REBUTTALS: DebateMessageType.REBUTTAL,
    DebatePhase.CLOSING: DebateMessageType.CLOSING,
}


class DebateMessage(BaseModel):
    """
    One update on the ``debate:{id}`` channel.

    ``sequence`` increases by one per message on a channel, starting at 1,
    so consumers can discard replays.
    """

    type: DebateMessageType
    debate_id: str
    sequence: int = Field(default=0, ge=0)
    side: Optional[Side] = None
    judge_type: Optional[JudgeType] = None
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utc_now)


# =============================================================================
# API models
# =============================================================================


class TriggerDebateRequest(BaseModel):
    """Request to start a new debate."""

    topic: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="The topic to debate",
    )
    request_id: Optional[str] = Field(
        None,
        description="Caller-supplied request ID; the debate ID is derived from it",
    )


class TriggerDebateResponse(BaseModel):
    debate_id: str
    channel: str


class DebateListItem(BaseModel):
    """Summary view of a debate for list endpoints."""

    id: str
    topic: str
    status: DebatePhase
    progress: float
    winner: Optional[str] = None
    created_at: datetime


class DebateListResponse(BaseModel):
    debates: list[DebateListItem]
    total: int


class SubscriptionTokenResponse(BaseModel):
    token: str
    channel: str
    topics: list[str]
    expires_at: datetime
