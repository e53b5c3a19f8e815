"""Tests for the phase orchestrator."""

import asyncio
import itertools

import pytest

from modules.debates.exceptions import GenerationError, PreconditionError
from modules.debates.models import (
    DebateMessageType,
    DebatePhase,
    Leader,
    Side,
)
from modules.debates.orchestrator import (
    OrchestratorSettings,
    PhaseOrchestrator,
    assign_sides,
    compute_final_score,
    gather_all,
)
from modules.debates.outputs import (
    AgentPersona,
    ArgumentOutput,
    ClosingOutput,
    CrossExamQuestionSet,
    Judgment,
    LightningAnswer,
    Position,
    TopicAnalysis,
)
from modules.realtime import channel_for

from tests.factories import (
    CON_NAME,
    PRO_NAME,
    ScriptedGenerator,
    make_agent,
    make_analysis,
    make_argument,
    make_debate,
    make_exchange_parts,
    make_judgment,
)

DEBATE_ID = "debate-test"


def history(broker):
    return broker.history(channel_for(DEBATE_ID), "updates")


async def initialized(writer):
    await writer.create(make_debate(DEBATE_ID))
    await writer.initialize(
        DEBATE_ID, make_analysis(), [make_agent(Side.PRO), make_agent(Side.CON)]
    )


class TestFullRun:
    """Tests for advance() over the whole phase sequence."""

    @pytest.mark.asyncio
    async def test_completes_with_pro_winner(self, writer, generator, fast_settings):
        """Should run every phase and finish with the judges' totals."""
        await writer.create(make_debate(DEBATE_ID))
        orchestrator = PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings)

        debate = await orchestrator.advance()

        assert debate.status is DebatePhase.COMPLETED
        assert debate.current_phase.progress == 1.0
        assert debate.current_phase.sub_label == "Finished"
        assert debate.final_score.pro == 24.0
        assert debate.final_score.con == 18.0
        assert debate.final_score.margin == 6.0
        assert debate.final_score.winner == PRO_NAME

    @pytest.mark.asyncio
    async def test_issues_expected_generation_calls(self, writer, generator, fast_settings):
        """Should make exactly one call per required output."""
        await writer.create(make_debate(DEBATE_ID))
        await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).advance()

        assert generator.count(TopicAnalysis) == 1
        assert generator.count(AgentPersona) == 2
        assert generator.count(ArgumentOutput) == 4
        assert generator.count(CrossExamQuestionSet) == 1
        assert generator.count(LightningAnswer) == 4
        assert generator.count(ClosingOutput) == 2
        assert generator.count(Judgment) == 3

    @pytest.mark.asyncio
    async def test_fills_every_phase_slot(self, writer, generator, fast_settings):
        """Should leave every phase payload populated."""
        await writer.create(make_debate(DEBATE_ID))
        debate = await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).advance()

        phases = debate.phases
        assert [a.name for a in debate.agents] == [PRO_NAME, CON_NAME]
        for phase in (DebatePhase.OPENING, DebatePhase.REBUTTALS, DebatePhase.CLOSING):
            for side in Side:
                assert debate.side_payload(phase, side) is not None
        assert list(phases.cross_examination.rounds) == [1]
        assert phases.lightning_round is not None
        assert len(phases.verdict.judgments()) == 3

    @pytest.mark.asyncio
    async def test_tracks_momentum_per_argument(self, writer, generator, fast_settings):
        """Openings, the cross-exam round and rebuttals each add one event."""
        await writer.create(make_debate(DEBATE_ID))
        debate = await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).advance()

        labels = sorted(e.phase for e in debate.momentum.history)
        assert labels == sorted(
            [
                "opening-statements-pro",
                "opening-statements-con",
                "cross-exam-1",
                "rebuttals-pro",
                "rebuttals-con",
            ]
        )
        assert debate.momentum.current_score.pro == 3.0
        assert debate.momentum.current_score.con == 2.0
        assert debate.momentum.current_leader is Leader.PRO

    @pytest.mark.asyncio
    async def test_publishes_init_then_ends_with_completed(self, writer, broker, generator, fast_settings):
        """The channel should open with preparation and close after the final status."""
        await writer.create(make_debate(DEBATE_ID))
        await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).advance()

        messages = history(broker)
        assert [m.sequence for m in messages] == list(range(1, len(messages) + 1))
        assert messages[0].type is DebateMessageType.STATUS
        assert messages[0].data["phase"] == "preparing"
        assert messages[1].type is DebateMessageType.INIT
        assert messages[-1].type is DebateMessageType.STATUS
        assert messages[-1].data["phase"] == "completed"
        assert broker.is_closed(channel_for(DEBATE_ID))

    @pytest.mark.asyncio
    async def test_already_terminal_is_untouched(self, writer, generator, fast_settings):
        """Should return a finished debate without generating anything."""
        await writer.create(make_debate(DEBATE_ID))
        await writer.fail(DEBATE_ID, "boom")

        debate = await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).advance()

        assert debate.status is DebatePhase.ERROR
        assert generator.calls == []


class TestPhaseOrdering:
    """Tests for phase preconditions and transitions."""

    @pytest.mark.asyncio
    async def test_cross_exam_starts_after_both_openings(self, writer, fast_settings):
        """After the openings: both statements stored, status cross-examination, progress 0."""
        snapshots = []
        questions, _, _ = make_exchange_parts()

        def capture(prompt):
            snapshots.append(writer.repository.get(DEBATE_ID))
            return questions

        generator = ScriptedGenerator({CrossExamQuestionSet: capture})
        await writer.create(make_debate(DEBATE_ID, topic="Should AI replace judges?"))
        await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).advance()

        snapshot = snapshots[0]
        assert snapshot.phases.opening_statements.pro_statement is not None
        assert snapshot.phases.opening_statements.con_statement is not None
        assert snapshot.status is DebatePhase.CROSS_EXAMINATION
        assert snapshot.current_phase.progress == 0.0

    @pytest.mark.asyncio
    async def test_cross_exam_without_openings_raises(self, writer, generator, fast_settings):
        """Should refuse to start cross-examination before the openings exist."""
        await initialized(writer)
        orchestrator = PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings)

        with pytest.raises(PreconditionError):
            await orchestrator.run_phase(DebatePhase.CROSS_EXAMINATION)
        assert generator.count(CrossExamQuestionSet) == 0

    @pytest.mark.asyncio
    async def test_verdict_requires_closings(self, writer, generator, fast_settings):
        await initialized(writer)
        for side in Side:
            await writer.set_side_payload(DEBATE_ID, DebatePhase.OPENING, side, make_argument())
        orchestrator = PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings)

        with pytest.raises(PreconditionError, match="closing-statements"):
            await orchestrator.run_phase(DebatePhase.VERDICT)

    @pytest.mark.asyncio
    async def test_resumes_from_current_status(self, writer, generator, fast_settings):
        """Should pick up at the stored status instead of starting over."""
        await initialized(writer)
        for side in Side:
            await writer.set_side_payload(DEBATE_ID, DebatePhase.OPENING, side, make_argument())
        await writer.set_status(DEBATE_ID, DebatePhase.REBUTTALS, None, 0.0)

        debate = await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).advance()

        assert debate.status is DebatePhase.COMPLETED
        assert generator.count(TopicAnalysis) == 0
        assert generator.count(CrossExamQuestionSet) == 0
        assert generator.count(ArgumentOutput) == 2

    @pytest.mark.asyncio
    async def test_two_cross_exam_rounds_swap_roles(self, writer, generator):
        """Round 2 should have con questioning pro, with momentum favouring con."""
        settings = OrchestratorSettings(cross_exam_rounds=2, judge_reveal_delay_seconds=0.0)
        await writer.create(make_debate(DEBATE_ID))

        debate = await PhaseOrchestrator(DEBATE_ID, writer, generator, settings).advance()

        rounds = debate.phases.cross_examination.rounds
        assert rounds[1].questioner is Side.PRO
        assert rounds[1].respondent is Side.CON
        assert rounds[2].questioner is Side.CON
        assert rounds[2].respondent is Side.PRO
        round_two = next(e for e in debate.momentum.history if e.phase == "cross-exam-2")
        assert round_two.shift < 0


class TestFailures:
    """Tests for fatal failures ending the run in error."""

    @pytest.mark.asyncio
    async def test_timeout_moves_to_error_and_stops_publishing(self, writer, broker, fast_settings):
        """A timed-out phase should end in error with nothing published after it."""

        async def hang(prompt):
            await asyncio.Event().wait()

        generator = ScriptedGenerator({CrossExamQuestionSet: hang})
        settings = fast_settings.model_copy(update={"phase_timeouts": {"cross-examination": 0.05}})
        await writer.create(make_debate(DEBATE_ID))

        debate = await PhaseOrchestrator(DEBATE_ID, writer, generator, settings).advance()

        assert debate.status is DebatePhase.ERROR
        assert "timed out" in debate.error_message
        messages = history(broker)
        phases = {m.data["phase"] for m in messages if m.type is DebateMessageType.STATUS}
        assert phases == {"preparing", "opening-statements", "cross-examination"}
        assert not any(m.type is DebateMessageType.CROSS_EXAM for m in messages)
        assert broker.is_closed(channel_for(DEBATE_ID))
        assert await writer.publisher.publish_status(debate) is None
        assert len(history(broker)) == len(messages)

    @pytest.mark.asyncio
    async def test_generation_failure_is_fatal(self, writer, fast_settings):
        """A failed generation call should end the run without retrying."""
        generator = ScriptedGenerator(
            {ArgumentOutput: GenerationError("ArgumentOutput", "invalid JSON")}
        )
        await writer.create(make_debate(DEBATE_ID))

        debate = await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).advance()

        assert debate.status is DebatePhase.ERROR
        assert "Generation failed" in debate.error_message
        assert generator.count(ArgumentOutput) == 2
        assert generator.count(CrossExamQuestionSet) == 0

    @pytest.mark.asyncio
    async def test_bad_positions_fail_preparation(self, writer, fast_settings):
        """Analysis without one pro and one con should fail before personas."""
        analysis = TopicAnalysis(
            positions=[
                Position(role="A", stance="For", persona="x", side="pro"),
                Position(role="B", stance="Also for", persona="y", side="pro"),
            ]
        )
        generator = ScriptedGenerator({TopicAnalysis: analysis})
        await writer.create(make_debate(DEBATE_ID))

        debate = await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).advance()

        assert debate.status is DebatePhase.ERROR
        assert "Precondition failed" in debate.error_message
        assert generator.count(AgentPersona) == 0


class TestLightningRound:
    """Tests for the lightning round fan-out."""

    @pytest.mark.asyncio
    async def test_concessions_follow_side_and_question_order(self, writer, fast_settings):
        """Concessions should be pro first, in question order, whatever finishes first."""
        counter = itertools.count()

        async def answer(prompt):
            index = next(counter)
            # Later calls finish first
            await asyncio.sleep(0.01 * (4 - index))
            return LightningAnswer(
                question="q",
                answer=f"answer {index}",
                concession_made=index in (1, 2),
            )

        generator = ScriptedGenerator({LightningAnswer: answer})
        await initialized(writer)

        debate = await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).run_phase(
            DebatePhase.LIGHTNING_ROUND
        )

        lightning = debate.phases.lightning_round
        assert generator.count(LightningAnswer) == 4
        assert [a.answer for a in lightning.pro_answers] == ["answer 0", "answer 1"]
        assert [a.answer for a in lightning.con_answers] == ["answer 2", "answer 3"]
        assert lightning.concessions_made == [f"{PRO_NAME}: answer 1", f"{CON_NAME}: answer 2"]

    @pytest.mark.asyncio
    async def test_question_count_is_configurable(self, writer, generator):
        settings = OrchestratorSettings(lightning_question_count=1, judge_reveal_delay_seconds=0.0)
        await initialized(writer)

        debate = await PhaseOrchestrator(DEBATE_ID, writer, generator, settings).run_phase(
            DebatePhase.LIGHTNING_ROUND
        )

        assert len(debate.phases.lightning_round.questions) == 1
        assert generator.count(LightningAnswer) == 2


class TestVerdict:
    """Tests for judging and the final score."""

    @pytest.mark.asyncio
    async def test_reveals_judges_with_progress(self, writer, broker, generator, fast_settings):
        await initialized(writer)
        for side in Side:
            await writer.set_side_payload(DEBATE_ID, DebatePhase.OPENING, side, make_argument())
            await writer.set_side_payload(
                DEBATE_ID, DebatePhase.CLOSING, side, ClosingOutput(statement="Done.")
            )

        await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).run_phase(
            DebatePhase.VERDICT
        )

        statuses = [
            (m.data["sub_label"], round(m.data["progress"], 2))
            for m in history(broker)
            if m.type is DebateMessageType.STATUS and m.data["phase"] == "verdict"
        ]
        assert statuses == [
            ("Revealing Scores", 0.0),
            ("Professor Ada Lovelace scores revealed", 0.33),
            ("Dr. Carl Sagan scores revealed", 0.67),
            ("Maya Angelou scores revealed", 1.0),
        ]
        judge_messages = [m for m in history(broker) if m.type is DebateMessageType.VERDICT_JUDGE]
        assert [m.judge_type.value for m in judge_messages] == ["logic", "evidence", "rhetoric"]


class TestHelpers:
    """Tests for the orchestrator's pure helpers."""

    def test_final_score_tie(self):
        """Equal totals should be reported as a tie."""
        judgments = [make_judgment("A", 7, 7), make_judgment("B", 5, 5)]
        score = compute_final_score(judgments, PRO_NAME, CON_NAME)
        assert score.winner == "tie"
        assert score.margin == 0.0

    def test_final_score_con_wins(self):
        judgments = [make_judgment("A", 5, 9), make_judgment("B", 6, 6.5)]
        score = compute_final_score(judgments, PRO_NAME, CON_NAME)
        assert score.winner == CON_NAME
        assert score.pro == 11.0
        assert score.con == 15.5
        assert score.margin == 4.5

    def test_assign_sides_from_order(self):
        """Unlabeled positions should map first to pro, second to con."""
        first = Position(role="A", stance="For", persona="x")
        second = Position(role="B", stance="Against", persona="y")
        assert assign_sides(DEBATE_ID, [first, second]) == {Side.PRO: first, Side.CON: second}

    def test_assign_sides_from_labels(self):
        con = Position(role="B", stance="Against", persona="y", side="con")
        pro = Position(role="A", stance="For", persona="x", side="pro")
        assert assign_sides(DEBATE_ID, [con, pro]) == {Side.PRO: pro, Side.CON: con}

    def test_assign_sides_rejects_three_unlabeled(self):
        positions = [Position(role=r, stance=r, persona=r) for r in "ABC"]
        with pytest.raises(PreconditionError):
            assign_sides(DEBATE_ID, positions)

    def test_timeout_override(self):
        settings = OrchestratorSettings(phase_timeout_seconds=30, phase_timeouts={"verdict": 90})
        assert settings.timeout_for(DebatePhase.VERDICT) == 90
        assert settings.timeout_for(DebatePhase.OPENING) == 30

    @pytest.mark.asyncio
    async def test_gather_all_cancels_siblings_on_failure(self):
        """A failing call should cancel the calls still in flight."""
        cancelled = asyncio.Event()

        async def slow():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        async def failing():
            await asyncio.sleep(0)
            raise GenerationError("X", "nope")

        with pytest.raises(GenerationError):
            await gather_all(slow(), failing())
        await asyncio.sleep(0.01)
        assert cancelled.is_set()
