"""
Momentum tracking.

``score_shift`` turns one phase output into a signed MomentumEvent by
averaging five bounded factor scores. ``apply_momentum_event`` folds an
event into a MomentumState: per-side scores only ever grow, and the leader
and volatility are re-derived after every append.

Positive shifts favour pro, negative shifts favour con.
"""

import logging
from typing import Optional

from .models import (
    Leader,
    MomentumEvent,
    MomentumScore,
    MomentumState,
    Side,
    Volatility,
)
from .outputs import ArgumentOutput, PhaseOutput

logger = logging.getLogger(__name__)

FACTOR_BOUND = 10.0
APPEAL_BASELINE = 5.0
VOLATILITY_WINDOW = 5

# Order matters: on equal magnitude the later factor becomes the trigger.
FACTOR_NAMES = (
    "logical_strength",
    "evidence_quality",
    "rhetorical_impact",
    "direct_engagement",
    "audience_appeal",
)


def _clamp(score: float) -> float:
    return max(-FACTOR_BOUND, min(FACTOR_BOUND, score))


def _logical_strength(output: PhaseOutput) -> float:
    match output:
        case ArgumentOutput(main_points=points, direct_engagement=engagement, logical_issues=issues):
            score = -2.0 * len(issues)
            if len(points) >= 3:
                score += 3
            if engagement is not None:
                score += 2
            return _clamp(score)
        case _:
            return 0.0


def _evidence_quality(output: PhaseOutput) -> float:
    match output:
        case ArgumentOutput(evidence=evidence) if evidence:
            score = min(len(evidence) * 2.0, 8.0)
            if any("study" in e.source or "report" in e.source for e in evidence):
                score += 2
            return _clamp(score)
        case _:
            return 0.0


def _rhetorical_impact(output: PhaseOutput) -> float:
    match output:
        case ArgumentOutput() as argument:
            score = 2.0 * len(argument.key_moments)
            if argument.emotional_journey is not None:
                score += 2
            if argument.personal_element is not None:
                score += 3
            if argument.opening.hook_type:
                score += 2
            return _clamp(score)
        case _:
            return 0.0


def _direct_engagement(output: PhaseOutput) -> float:
    match output:
        case ArgumentOutput(direct_engagement=engagement) if engagement is not None:
            score = 0.0
            if engagement.opponent_quote:
                score += 4
            if len(engagement.response) > 100:
                score += 3
            if engagement.tone in ("aggressive", "direct"):
                score += 2
            return _clamp(score)
        case _:
            return 0.0


def _audience_appeal(output: PhaseOutput) -> float:
    score = APPEAL_BASELINE
    match output:
        case ArgumentOutput(conclusion=conclusion):
            if conclusion.rhetorical_device:
                score += 3
            if conclusion.callback_to:
                score += 2
    return _clamp(score)


def factor_scores(output: PhaseOutput) -> dict[str, float]:
    """The five clamped factor scores for one output, in factor order."""
    return {
        "logical_strength": _logical_strength(output),
        "evidence_quality": _evidence_quality(output),
        "rhetorical_impact": _rhetorical_impact(output),
        "direct_engagement": _direct_engagement(output),
        "audience_appeal": _audience_appeal(output),
    }


def key_factor(factors: dict[str, float]) -> str:
    """Name of the factor with the largest magnitude, for display."""
    best = FACTOR_NAMES[0]
    for name in FACTOR_NAMES[1:]:
        if abs(factors[name]) >= abs(factors[best]):
            best = name
    return best.replace("_", " ")


def describe_shift(shift: float, factor: str) -> str:
    magnitude = abs(shift)
    if magnitude < 1:
        return "No significant momentum shift"
    direction = Side.PRO.label if shift > 0 else Side.CON.label
    if magnitude > 5:
        return f"Strong {direction} momentum from {factor}"
    if magnitude > 3:
        return f"{direction} gains ground with {factor}"
    return f"Slight {direction} edge on {factor}"


def score_shift(
    output: PhaseOutput,
    phase_label: str,
    side: Optional[Side] = None,
) -> MomentumEvent:
    """
    Score one phase output as a momentum event.

    Args:
        output: The generated phase output
        phase_label: Label recorded on the event, e.g. "opening-statements-pro"
        side: The side that produced the output. Con output yields a
            negative shift. When None the shift is left as scored.

    Returns:
        The MomentumEvent (not yet applied to any state)
    """
    factors = factor_scores(output)
    mean = sum(factors.values()) / len(factors)
    if side is Side.CON:
        mean = -mean

    trigger = key_factor(factors)
    event = MomentumEvent(
        phase=phase_label,
        trigger=trigger,
        shift=round(mean, 1),
        description=describe_shift(mean, trigger),
    )
    logger.debug(f"Momentum {phase_label}: factors={factors} shift={event.shift}")
    return event


def determine_leader(score: MomentumScore) -> Leader:
    if score.pro > score.con:
        return Leader.PRO
    if score.con > score.pro:
        return Leader.CON
    return Leader.TIED


def calculate_volatility(history: list[MomentumEvent]) -> Volatility:
    """Bucket the mean absolute shift of the trailing events."""
    recent = history[-VOLATILITY_WINDOW:]
    if not recent:
        return Volatility.STABLE
    mean_shift = sum(abs(e.shift) for e in recent) / len(recent)
    if mean_shift > 5:
        return Volatility.DRAMATIC
    if mean_shift > 2:
        return Volatility.SHIFTING
    return Volatility.STABLE


def apply_momentum_event(state: MomentumState, event: MomentumEvent) -> MomentumState:
    """Return a new MomentumState with ``event`` appended and derived fields recomputed."""
    score = MomentumScore(
        pro=state.current_score.pro + max(event.shift, 0.0),
        con=state.current_score.con + max(-event.shift, 0.0),
    )
    history = [*state.history, event]
    return MomentumState(
        current_score=score,
        history=history,
        current_leader=determine_leader(score),
        volatility=calculate_volatility(history),
    )
