"""
Structured generation outputs.

These are the shapes the orchestrator asks the generation client for and
gets back. The outputs consumed by the momentum and controversy heuristics
form a tagged union (``PhaseOutput``) discriminated on ``kind``; every
optional field is explicit so the heuristics can match on the variant
instead of probing for attributes.
"""

from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field


# =============================================================================
# Topic analysis and personas
# =============================================================================


class Position(BaseModel):
    """One position identified in the topic."""

    role: str = Field(..., description="Short role name, e.g. 'Advocate'")
    stance: str = Field(..., description="The stance this position argues")
    persona: str = Field(..., description="One-line persona sketch for the debater")
    side: Optional[Literal["pro", "con"]] = Field(
        None,
        description="Which side this position argues, when the model labels it",
    )


class TopicAnalysis(BaseModel):
    """Structure of the debate topic."""

    debate_type: Literal["binary", "multi-perspective", "comparison"] = "binary"
    positions: list[Position] = Field(default_factory=list)
    rounds: int = Field(default=2, ge=1, le=4)
    complexity: Literal["simple", "medium", "complex"] = "medium"
    needs_research: bool = False


class PersonaTraits(BaseModel):
    speaking_style: str
    emotional_range: str = ""
    rhetoric_preference: str = ""
    tone: str = ""
    catchphrases: list[str] = Field(default_factory=list)
    weaknesses: Optional[str] = None


class DebateStyle(BaseModel):
    opening_move: str = ""
    argumentation: str = ""
    engagement_with_opponent: str = ""
    closing_move: str = ""


class AgentPersona(BaseModel):
    """A debater's generated personality."""

    name: str = Field(..., description="Full name of the debater")
    age: Optional[int] = None
    background: str = Field(..., description="Professional and personal background")
    traits: PersonaTraits
    motivation: str = ""
    debate_style: DebateStyle = Field(default_factory=DebateStyle)


# =============================================================================
# Arguments (opening statements and rebuttals)
# =============================================================================


class Opening(BaseModel):
    text: str
    hook_type: Optional[
        Literal["emotional", "question", "statistic", "anecdote", "provocative"]
    ] = None


class ArgumentPoint(BaseModel):
    claim: str
    elaboration: str = ""
    rhetorical_device: Optional[str] = None
    emotional_tone: str = ""


class EvidencePresentation(BaseModel):
    framing: str = ""
    emphasis: Literal["statistical", "narrative", "comparative"] = "narrative"


class Evidence(BaseModel):
    claim: str
    source: str
    year: Optional[int] = None
    presentation: EvidencePresentation = Field(default_factory=EvidencePresentation)
    credibility_signal: Optional[str] = None


EngagementTone = Literal[
    "aggressive",
    "direct",
    "dismissive",
    "respectful",
    "sarcastic",
    "collaborative",
    "counter_attack",
]


class DirectEngagement(BaseModel):
    opponent_quote: Optional[str] = None
    response: str = ""
    tone: EngagementTone = "respectful"


class PersonalElement(BaseModel):
    type: Literal["anecdote", "professional_experience", "personal_stake"]
    text: str


class Conclusion(BaseModel):
    text: str
    rhetorical_device: Optional[
        Literal["question", "call_to_action", "reframe", "callback"]
    ] = None
    callback_to: Optional[str] = None


class KeyMoment(BaseModel):
    text: str
    type: Literal[
        "zinger", "rhetorical_climax", "emotional_peak", "concession", "direct_hit"
    ]
    timestamp: float = Field(default=0.0, ge=0.0, le=1.0)
    impact_level: int = Field(default=1, ge=1, le=3)


EmotionLevel = Literal["calm", "urgent", "passionate", "measured"]


class EmotionalJourney(BaseModel):
    start: EmotionLevel
    peak: EmotionLevel
    end: EmotionLevel


class LogicalIssue(BaseModel):
    """A fallacy callout logged against an argument."""

    fallacy: str
    severity: Literal["minor", "moderate", "major"] = "moderate"
    commentary: str = ""


class ArgumentOutput(BaseModel):
    """An opening statement or rebuttal."""

    kind: Literal["argument"] = "argument"
    opening: Opening
    main_points: list[ArgumentPoint] = Field(default_factory=list)
    direct_engagement: Optional[DirectEngagement] = None
    personal_element: Optional[PersonalElement] = None
    evidence: list[Evidence] = Field(default_factory=list)
    conclusion: Conclusion
    key_moments: list[KeyMoment] = Field(default_factory=list)
    emotional_journey: Optional[EmotionalJourney] = None
    logical_issues: list[LogicalIssue] = Field(default_factory=list)


# =============================================================================
# Cross-examination
# =============================================================================


class CrossExamQuestion(BaseModel):
    question: str
    intent: Literal["expose_weakness", "force_concession", "clarify_position", "trap"]
    target_weakness: str = ""


class CrossExamAnswer(BaseModel):
    question: str
    answer: str
    strategy: Literal["direct_answer", "deflection", "counter_attack", "concession"]
    evasion: bool = False


class CrossExamQuestionSet(BaseModel):
    questions: list[CrossExamQuestion] = Field(..., min_length=1)


class CrossExamAnswerSet(BaseModel):
    answers: list[CrossExamAnswer] = Field(..., min_length=1)


class CrossExamAnalysis(BaseModel):
    directness_score: float = Field(..., ge=0, le=10)
    concessions_made: list[str] = Field(default_factory=list)
    counter_attacks: list[str] = Field(default_factory=list)
    evasions: list[str] = Field(default_factory=list)
    winner: Literal["questioner", "respondent", "tie"]
    key_exchange: str = ""


class CrossExamExchange(BaseModel):
    """One full cross-examination round: questions, answers and analysis."""

    kind: Literal["cross-exam"] = "cross-exam"
    questions: list[CrossExamQuestion]
    answers: list[CrossExamAnswer]
    analysis: CrossExamAnalysis


# =============================================================================
# Lightning round and closings
# =============================================================================


class LightningQuestion(BaseModel):
    question: str
    time_limit_seconds: int = 30
    forces_position: bool = True


class LightningQuestionSet(BaseModel):
    questions: list[LightningQuestion] = Field(..., min_length=1)


class LightningAnswer(BaseModel):
    kind: Literal["lightning-answer"] = "lightning-answer"
    question: str
    answer: str
    word_count: int = 0
    concession_made: bool = False


class ClosingOutput(BaseModel):
    """A short, punchy closing statement."""

    kind: Literal["closing"] = "closing"
    statement: str
    tone: str = ""


# =============================================================================
# Judging
# =============================================================================


class SideScores(BaseModel):
    pro: float = Field(..., ge=0, le=10)
    con: float = Field(..., ge=0, le=10)


class SideAnalysis(BaseModel):
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    standout_moment: Optional[str] = None
    score_reasoning: str = ""


class JudgeCommentary(BaseModel):
    overall: str = ""
    pro_analysis: SideAnalysis = Field(default_factory=SideAnalysis)
    con_analysis: SideAnalysis = Field(default_factory=SideAnalysis)
    verdict: str = ""


class Judgment(BaseModel):
    """One judge's scored verdict."""

    judge_name: str
    persona: str = ""
    scores: SideScores
    commentary: JudgeCommentary = Field(default_factory=JudgeCommentary)


PhaseOutput = Annotated[
    Union[ArgumentOutput, CrossExamExchange, LightningAnswer, ClosingOutput],
    Field(discriminator="kind"),
]
