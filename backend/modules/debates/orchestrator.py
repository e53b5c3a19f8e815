"""
Phase orchestration.

A PhaseOrchestrator drives one debate through the fixed phase sequence:

    preparing -> opening -> cross-examination -> rebuttals
              -> lightning-round -> closing -> verdict -> completed

Each phase runs to completion before the next starts. Symmetric phases
issue both sides' generation calls concurrently and finish when both have
returned. Every phase is bounded by a timeout. A timeout, a failed
precondition, or a failed generation call moves the debate to ``error``;
nothing is retried and nothing more is published.

The debate's status is the resume cursor: calling ``advance()`` on a
debate that stopped mid-sequence (but not in a terminal state) picks up at
its current phase.
"""

import asyncio
import logging
from typing import Any, Awaitable, Optional

from pydantic import BaseModel, Field

from modules.generation.interfaces import IStructuredGenerator
from shared.config import Settings, get_settings
from shared.exceptions import ArenaError

from . import prompts
from .controversy import detect
from .exceptions import PhaseTimeoutError, PreconditionError, UnknownDebateError
from .judges import JUDGE_ORDER, JUDGE_PERSONAS
from .models import (
    PHASE_SEQUENCE,
    CrossExamRound,
    Debate,
    DebateAgent,
    DebatePhase,
    FinalScore,
    LightningRound,
    Side,
    next_phase,
)
from .momentum import score_shift
from .outputs import (
    AgentPersona,
    ArgumentOutput,
    ClosingOutput,
    CrossExamAnalysis,
    CrossExamAnswerSet,
    CrossExamExchange,
    CrossExamQuestionSet,
    Judgment,
    LightningAnswer,
    LightningQuestionSet,
    Position,
    TopicAnalysis,
)
from .writer import DebateWriter

logger = logging.getLogger(__name__)


class OrchestratorSettings(BaseModel):
    """Timing and shape knobs for one debate run."""

    model_config = {"frozen": True}

    phase_timeout_seconds: float = Field(default=300.0, gt=0)
    phase_timeouts: dict[str, float] = Field(
        default_factory=dict,
        description="Per-phase overrides keyed by phase value, e.g. 'verdict'",
    )
    cross_exam_rounds: int = Field(default=1, ge=1, le=2)
    lightning_question_count: int = Field(default=2, ge=1)
    judge_reveal_delay_seconds: float = Field(default=2.0, ge=0)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "OrchestratorSettings":
        settings = settings or get_settings()
        return cls(
            phase_timeout_seconds=settings.phase_timeout_seconds,
            phase_timeouts=settings.phase_timeouts,
            cross_exam_rounds=settings.cross_exam_rounds,
            lightning_question_count=settings.lightning_question_count,
            judge_reveal_delay_seconds=settings.judge_reveal_delay_seconds,
        )

    def timeout_for(self, phase: DebatePhase) -> float:
        return self.phase_timeouts.get(phase.value, self.phase_timeout_seconds)


async def gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """Run ``aws`` concurrently; if one fails, cancel the rest and re-raise."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


def assign_sides(debate_id: str, positions: list[Position]) -> dict[Side, Position]:
    """
    Map topic-analysis positions onto the two sides.

    Explicit ``side`` labels win. Without labels, exactly two positions are
    required and are taken in order as pro then con.

    Raises:
        PreconditionError: If exactly one pro and one con cannot be resolved
    """
    labeled = [p for p in positions if p.side is not None]
    if labeled:
        by_side: dict[Side, list[Position]] = {Side.PRO: [], Side.CON: []}
        for position in labeled:
            by_side[Side(position.side)].append(position)
        if len(by_side[Side.PRO]) != 1 or len(by_side[Side.CON]) != 1:
            raise PreconditionError(
                debate_id,
                DebatePhase.PREPARING.value,
                f"expected one pro and one con position, got "
                f"{len(by_side[Side.PRO])} pro and {len(by_side[Side.CON])} con",
            )
        return {side: found[0] for side, found in by_side.items()}

    if len(positions) != 2:
        raise PreconditionError(
            debate_id,
            DebatePhase.PREPARING.value,
            f"expected exactly two positions, got {len(positions)}",
        )
    return {Side.PRO: positions[0], Side.CON: positions[1]}


def compute_final_score(judgments: list[Judgment], pro_name: str, con_name: str) -> FinalScore:
    """Sum the judges' scores per side and pick the winner."""
    pro_total = round(sum(j.scores.pro for j in judgments), 2)
    con_total = round(sum(j.scores.con for j in judgments), 2)
    if pro_total > con_total:
        winner = pro_name
    elif con_total > pro_total:
        winner = con_name
    else:
        winner = "tie"
    return FinalScore(
        pro=pro_total,
        con=con_total,
        winner=winner,
        margin=round(abs(pro_total - con_total), 2),
    )


def format_exchange(questions: CrossExamQuestionSet, answers: CrossExamAnswerSet) -> str:
    lines = []
    for i, question in enumerate(questions.questions):
        lines.append(f"Q{i + 1}: {question.question}")
        if i < len(answers.answers):
            lines.append(f"A{i + 1}: {answers.answers[i].answer}")
    return "\n".join(lines)


class PhaseOrchestrator:
    """
    Drives a single debate through its phases.

    All store mutations go through the DebateWriter, which publishes the
    matching message for each one.
    """

    def __init__(
        self,
        debate_id: str,
        writer: DebateWriter,
        generator: IStructuredGenerator,
        settings: Optional[OrchestratorSettings] = None,
    ) -> None:
        self.debate_id = debate_id
        self._writer = writer
        self._generator = generator
        self._settings = settings or OrchestratorSettings.from_settings()
        self._handlers = {
            DebatePhase.OPENING: self._run_opening,
            DebatePhase.CROSS_EXAMINATION: self._run_cross_examination,
            DebatePhase.REBUTTALS: self._run_rebuttals,
            DebatePhase.LIGHTNING_ROUND: self._run_lightning_round,
            DebatePhase.CLOSING: self._run_closing,
            DebatePhase.VERDICT: self._run_verdict,
        }

    # -------------------------------------------------------------------------
    # Top-level driver
    # -------------------------------------------------------------------------

    async def advance(self) -> Debate:
        """
        Run the debate from its current status to a terminal state.

        Returns:
            The debate as stored after the run (``completed`` or ``error``)
        """
        debate = self._current()
        if debate.is_terminal:
            logger.debug(f"Debate {self.debate_id} already {debate.status.value}")
            return debate

        try:
            if debate.status is DebatePhase.PREPARING:
                await self._bounded(DebatePhase.PREPARING, self.prepare())
                await self._writer.set_status(self.debate_id, DebatePhase.OPENING, None, 0.0)
                debate = self._current()

            remaining = PHASE_SEQUENCE[PHASE_SEQUENCE.index(debate.status):]
            for phase in remaining:
                await self._bounded(phase, self.run_phase(phase))
                following = next_phase(phase)
                if following is DebatePhase.COMPLETED:
                    await self._writer.complete(self.debate_id)
                else:
                    await self._writer.set_status(self.debate_id, following, None, 0.0)
                logger.info(f"Debate {self.debate_id}: {phase.value} -> {following.value}")
        except ArenaError as e:
            logger.error(f"Debate {self.debate_id} aborted: {e.message}")
            await self._writer.fail(self.debate_id, e.message)
        except Exception as e:
            logger.exception(f"Debate {self.debate_id} failed unexpectedly")
            await self._writer.fail(self.debate_id, str(e) or type(e).__name__)

        return self._current()

    async def prepare(self) -> Debate:
        """Analyze the topic and create one agent per side."""
        debate = self._current()
        await self._writer.set_status(self.debate_id, DebatePhase.PREPARING, "Analyzing topic", 0.0)

        analysis = await self._generator.generate(
            prompts.topic_analysis_prompt(debate.topic), TopicAnalysis
        )
        positions = assign_sides(self.debate_id, analysis.positions)

        personas: list[AgentPersona] = await gather_all(
            *(
                self._generator.generate(prompts.persona_prompt(debate.topic, positions[side]), AgentPersona)
                for side in Side
            )
        )
        agents = [
            DebateAgent(
                side=side,
                role=positions[side].role,
                stance=positions[side].stance,
                persona=persona,
                system_prompt=prompts.build_system_prompt(persona, positions[side].stance, debate.topic),
            )
            for side, persona in zip(Side, personas)
        ]
        logger.info(
            f"Debate {self.debate_id} agents: "
            + ", ".join(f"{a.name} ({a.side.value})" for a in agents)
        )
        await self._writer.initialize(self.debate_id, analysis, agents)
        return self._current()

    async def run_phase(self, phase: DebatePhase) -> Debate:
        """Check ``phase``'s preconditions, run it, and return the updated debate."""
        if phase not in self._handlers:
            raise ValueError(f"{phase.value} is not a runnable phase")
        debate = self._current()
        self._check_preconditions(phase, debate)
        logger.info(f"Debate {self.debate_id}: running {phase.value}")
        await self._handlers[phase](debate)
        return self._current()

    # -------------------------------------------------------------------------
    # Phases
    # -------------------------------------------------------------------------

    async def _run_opening(self, debate: Debate) -> None:
        async def opening_for(side: Side) -> None:
            agent = self._agent(debate, side)
            statement = await self._generator.generate(
                prompts.opening_prompt(debate, agent), ArgumentOutput
            )
            await self._record_argument(
                DebatePhase.OPENING, agent, statement, f"opening-statements-{side.value}"
            )

        await gather_all(*(opening_for(side) for side in Side))

    async def _run_cross_examination(self, debate: Debate) -> None:
        total = self._settings.cross_exam_rounds
        for round_index in range(1, total + 1):
            # Round 1: pro questions con. Round 2 swaps.
            questioner_side = Side.PRO if round_index % 2 == 1 else Side.CON
            await self._writer.set_status(
                self.debate_id,
                DebatePhase.CROSS_EXAMINATION,
                f"Round {round_index}",
                (round_index - 1) / total,
            )
            await self._run_cross_exam_round(self._current(), round_index, questioner_side)

    async def _run_cross_exam_round(
        self,
        debate: Debate,
        round_index: int,
        questioner_side: Side,
    ) -> None:
        respondent_side = questioner_side.opponent
        questioner = self._agent(debate, questioner_side)
        respondent = self._agent(debate, respondent_side)

        questions = await self._generator.generate(
            prompts.cross_exam_questions_prompt(
                debate,
                questioner,
                respondent,
                debate.side_payload(DebatePhase.OPENING, respondent_side),
            ),
            CrossExamQuestionSet,
        )
        answers = await self._generator.generate(
            prompts.cross_exam_answers_prompt(
                debate, respondent, questioner, [q.question for q in questions.questions]
            ),
            CrossExamAnswerSet,
        )
        analysis = await self._generator.generate(
            prompts.cross_exam_analysis_prompt(
                debate, questioner, respondent, format_exchange(questions, answers)
            ),
            CrossExamAnalysis,
        )

        exchange = CrossExamExchange(
            questions=questions.questions,
            answers=answers.answers,
            analysis=analysis,
        )
        await self._writer.set_cross_exam_round(
            self.debate_id,
            CrossExamRound(
                round_index=round_index,
                questioner=questioner_side,
                respondent=respondent_side,
                exchange=exchange,
            ),
        )
        await self._writer.append_controversy_moments(
            self.debate_id, detect(exchange, respondent_side, respondent.name)
        )
        await self._writer.append_momentum_event(
            self.debate_id, score_shift(exchange, f"cross-exam-{round_index}", questioner_side)
        )

    async def _run_rebuttals(self, debate: Debate) -> None:
        rounds = list(debate.phases.cross_examination.rounds.values())

        async def rebuttal_for(side: Side) -> None:
            agent = self._agent(debate, side)
            opponent = self._agent(debate, side.opponent)
            rebuttal = await self._generator.generate(
                prompts.rebuttal_prompt(
                    debate,
                    agent,
                    opponent,
                    debate.side_payload(DebatePhase.OPENING, side.opponent),
                    rounds,
                ),
                ArgumentOutput,
            )
            await self._record_argument(
                DebatePhase.REBUTTALS, agent, rebuttal, f"rebuttals-{side.value}"
            )

        await gather_all(*(rebuttal_for(side) for side in Side))

    async def _run_lightning_round(self, debate: Debate) -> None:
        count = self._settings.lightning_question_count
        question_set = await self._generator.generate(
            prompts.lightning_questions_prompt(debate, count), LightningQuestionSet
        )
        questions = question_set.questions[:count]
        pro = self._agent(debate, Side.PRO)
        con = self._agent(debate, Side.CON)

        # Every side x question answer is independent
        answers: list[LightningAnswer] = await gather_all(
            *(
                self._generator.generate(
                    prompts.lightning_answer_prompt(debate, agent, question), LightningAnswer
                )
                for agent in (pro, con)
                for question in questions
            )
        )
        pro_answers = answers[: len(questions)]
        con_answers = answers[len(questions):]

        concessions = [
            f"{agent.name}: {answer.answer}"
            for agent, side_answers in ((pro, pro_answers), (con, con_answers))
            for answer in side_answers
            if answer.concession_made
        ]
        await self._writer.set_lightning_round(
            self.debate_id,
            LightningRound(
                questions=questions,
                pro_answers=pro_answers,
                con_answers=con_answers,
                concessions_made=concessions,
            ),
        )

    async def _run_closing(self, debate: Debate) -> None:
        async def closing_for(side: Side) -> None:
            agent = self._agent(debate, side)
            closing = await self._generator.generate(
                prompts.closing_prompt(debate, agent), ClosingOutput
            )
            await self._writer.set_side_payload(self.debate_id, DebatePhase.CLOSING, side, closing)

        await gather_all(*(closing_for(side) for side in Side))

    async def _run_verdict(self, debate: Debate) -> None:
        await self._writer.set_status(self.debate_id, DebatePhase.VERDICT, "Revealing Scores", 0.0)

        judgments: list[Judgment] = []
        for i, judge_type in enumerate(JUDGE_ORDER):
            judge = JUDGE_PERSONAS[judge_type]
            if i > 0 and self._settings.judge_reveal_delay_seconds:
                await asyncio.sleep(self._settings.judge_reveal_delay_seconds)

            judgment = await self._generator.generate(prompts.judge_prompt(debate, judge), Judgment)
            judgments.append(judgment)
            await self._writer.set_judge_verdict(self.debate_id, judge_type, judgment)
            await self._writer.set_status(
                self.debate_id,
                DebatePhase.VERDICT,
                f"{judge.name} scores revealed",
                (i + 1) / len(JUDGE_ORDER),
            )

        final_score = compute_final_score(
            judgments,
            self._agent(debate, Side.PRO).name,
            self._agent(debate, Side.CON).name,
        )
        logger.info(
            f"Debate {self.debate_id} verdict: {final_score.winner} "
            f"({final_score.pro} - {final_score.con})"
        )
        await self._writer.set_final_score(self.debate_id, final_score)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _record_argument(
        self,
        phase: DebatePhase,
        agent: DebateAgent,
        output: ArgumentOutput,
        label: str,
    ) -> None:
        await self._writer.append_momentum_event(
            self.debate_id, score_shift(output, label, agent.side)
        )
        await self._writer.append_controversy_moments(
            self.debate_id, detect(output, agent.side, agent.name)
        )
        await self._writer.set_side_payload(self.debate_id, phase, agent.side, output)

    def _check_preconditions(self, phase: DebatePhase, debate: Debate) -> None:
        for side in Side:
            if debate.agent_for(side) is None:
                raise PreconditionError(self.debate_id, phase.value, f"no {side.value} agent")

        required: list[DebatePhase] = []
        if phase in (DebatePhase.CROSS_EXAMINATION, DebatePhase.REBUTTALS):
            required = [DebatePhase.OPENING]
        elif phase is DebatePhase.VERDICT:
            required = [DebatePhase.OPENING, DebatePhase.CLOSING]

        for earlier in required:
            missing = [s.value for s in Side if debate.side_payload(earlier, s) is None]
            if missing:
                raise PreconditionError(
                    self.debate_id,
                    phase.value,
                    f"{earlier.value} missing for {', '.join(missing)}",
                )

    async def _bounded(self, phase: DebatePhase, step: Awaitable[Any]) -> Any:
        timeout = self._settings.timeout_for(phase)
        try:
            return await asyncio.wait_for(step, timeout=timeout)
        except asyncio.TimeoutError:
            raise PhaseTimeoutError(self.debate_id, phase.value, timeout) from None

    def _agent(self, debate: Debate, side: Side) -> DebateAgent:
        agent = debate.agent_for(side)
        if agent is None:
            raise PreconditionError(self.debate_id, debate.status.value, f"no {side.value} agent")
        return agent

    def _current(self) -> Debate:
        debate = self._writer.repository.get(self.debate_id)
        if debate is None:
            raise UnknownDebateError(self.debate_id)
        return debate
