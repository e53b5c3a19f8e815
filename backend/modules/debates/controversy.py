"""
Controversy detection.

Five independent detectors look for clip-worthy moments in a phase output:
concessions, zingers, reversals, deflections and attacks. Each returns at
most one moment, and ``detect`` concatenates them in that order.
"""

import logging
import re
from typing import Optional

from .models import ControversyMoment, ControversyType, Impact, Side
from .outputs import (
    ArgumentOutput,
    ClosingOutput,
    CrossExamExchange,
    LightningAnswer,
    PhaseOutput,
)

logger = logging.getLogger(__name__)

CONCESSION_PHRASES = (
    "you're right",
    "i concede",
    "fair point",
    "i admit",
    "that's valid",
    "i agree that",
)

REVERSAL_PHRASES = (
    "by your own logic",
    "using your argument",
    "if we follow your reasoning",
    "that actually proves my point",
    "you've just made my case",
)

EXCERPT_LIMIT = 150

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def spoken_text(output: PhaseOutput) -> list[str]:
    """Every passage the speaking agent actually said, in reading order."""
    match output:
        case ArgumentOutput() as argument:
            passages = [argument.opening.text]
            for point in argument.main_points:
                passages.extend([point.claim, point.elaboration])
            if argument.personal_element:
                passages.append(argument.personal_element.text)
            if argument.direct_engagement:
                passages.append(argument.direct_engagement.response)
            passages.extend(moment.text for moment in argument.key_moments)
            passages.append(argument.conclusion.text)
        case CrossExamExchange(answers=answers):
            passages = [a.answer for a in answers]
        case LightningAnswer(answer=answer):
            passages = [answer]
        case ClosingOutput(statement=statement):
            passages = [statement]
        case _:
            passages = []
    return [p for p in passages if p]


def _find_phrase(passages: list[str], phrases: tuple[str, ...]) -> Optional[str]:
    """First passage containing any of ``phrases`` (case-insensitive)."""
    for passage in passages:
        lowered = passage.lower()
        if any(phrase in lowered for phrase in phrases):
            return passage
    return None


def _concession_excerpt(passage: str) -> str:
    for sentence in _SENTENCE_SPLIT.split(passage):
        lowered = sentence.lower()
        if "right" in lowered or "fair" in lowered or "concede" in lowered:
            return sentence.strip()
    return passage[:EXCERPT_LIMIT]


def _moment(
    kind: ControversyType,
    side: Side,
    agent: str,
    description: str,
    impact: Impact,
    excerpt: str,
) -> ControversyMoment:
    return ControversyMoment(
        type=kind,
        side=side,
        agent=agent,
        description=description,
        impact=impact,
        excerpt=excerpt,
    )


def detect_concession(output: PhaseOutput, side: Side, agent: str) -> Optional[ControversyMoment]:
    passage = _find_phrase(spoken_text(output), CONCESSION_PHRASES)
    if passage is None:
        return None
    return _moment(
        ControversyType.CONCESSION,
        side,
        agent,
        "Agent admitted weakness in their argument",
        Impact.HIGH,
        _concession_excerpt(passage),
    )


def detect_zinger(output: PhaseOutput, side: Side, agent: str) -> Optional[ControversyMoment]:
    match output:
        case ArgumentOutput(key_moments=key_moments, conclusion=conclusion):
            zingers = [m for m in key_moments if m.type in ("zinger", "rhetorical_climax")]
            if zingers:
                strongest = max(zingers, key=lambda m: m.impact_level)
                return _moment(
                    ControversyType.ZINGER,
                    side,
                    agent,
                    "Memorable one-liner",
                    Impact.HIGH if strongest.impact_level >= 2 else Impact.MEDIUM,
                    strongest.text,
                )
            if conclusion.rhetorical_device == "question":
                return _moment(
                    ControversyType.ZINGER,
                    side,
                    agent,
                    "Powerful rhetorical question",
                    Impact.HIGH,
                    conclusion.text,
                )
    return None


def detect_reversal(output: PhaseOutput, side: Side, agent: str) -> Optional[ControversyMoment]:
    passage = _find_phrase(spoken_text(output), REVERSAL_PHRASES)
    if passage is not None:
        excerpt = passage
        if isinstance(output, ArgumentOutput) and output.direct_engagement:
            excerpt = output.direct_engagement.response or passage
        return _moment(
            ControversyType.REVERSAL,
            side,
            agent,
            "Turned opponent's argument against them",
            Impact.CRITICAL,
            excerpt[: EXCERPT_LIMIT * 2],
        )

    match output:
        case ArgumentOutput(direct_engagement=engagement) if (
            engagement is not None and engagement.tone == "counter_attack"
        ):
            excerpt = engagement.response
        case CrossExamExchange(answers=answers):
            counters = [a for a in answers if a.strategy == "counter_attack"]
            if not counters:
                return None
            excerpt = counters[0].answer
        case _:
            return None
    return _moment(
        ControversyType.REVERSAL,
        side,
        agent,
        "Counter-attacked opponent's position",
        Impact.HIGH,
        excerpt,
    )


def detect_deflection(output: PhaseOutput, side: Side, agent: str) -> Optional[ControversyMoment]:
    match output:
        case CrossExamExchange(answers=answers):
            evasive = [a for a in answers if a.evasion or a.strategy == "deflection"]
            if evasive:
                return _moment(
                    ControversyType.DEFLECTION,
                    side,
                    agent,
                    "Avoided direct answer to question",
                    Impact.MEDIUM,
                    evasive[0].answer or "Deflected question",
                )
    return None


def detect_attack(output: PhaseOutput, side: Side, agent: str) -> Optional[ControversyMoment]:
    match output:
        case ArgumentOutput(direct_engagement=engagement) if (
            engagement is not None and engagement.tone == "aggressive"
        ):
            return _moment(
                ControversyType.ATTACK,
                side,
                agent,
                "Aggressive challenge to opponent",
                Impact.HIGH,
                engagement.response,
            )
        case ArgumentOutput(logical_issues=[first, *_]):
            return _moment(
                ControversyType.ATTACK,
                side,
                agent,
                "Called out logical fallacy",
                Impact.HIGH,
                f"Identified: {first.fallacy}",
            )
    return None


DETECTORS = (
    detect_concession,
    detect_zinger,
    detect_reversal,
    detect_deflection,
    detect_attack,
)


def detect(output: PhaseOutput, side: Side, agent: str) -> list[ControversyMoment]:
    """Run every detector over ``output`` and collect the moments found."""
    moments = []
    for detector in DETECTORS:
        moment = detector(output, side, agent)
        if moment is not None:
            moments.append(moment)
    if moments:
        logger.debug(
            f"Controversy for {agent} ({side.value}): "
            f"{[m.type.value for m in moments]}"
        )
    return moments


def rank_controversy_moments(moments: list[ControversyMoment]) -> list[ControversyMoment]:
    """Order moments by impact, most severe first. Ties keep their original order."""
    return sorted(moments, key=lambda m: m.impact.severity, reverse=True)


def top_moments(moments: list[ControversyMoment], limit: int = 3) -> list[ControversyMoment]:
    return rank_controversy_moments(moments)[:limit]
