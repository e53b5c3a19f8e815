"""Tests for core/display.py terminal rendering."""

import pytest
from unittest.mock import patch

from rich.console import Console

from core.display import format_phase_name, render_message, render_summary
from modules.debates.orchestrator import PhaseOrchestrator
from modules.debates.reconstructor import DebateReconstructor
from modules.realtime.tokens import DEFAULT_TOPIC, channel_for

from tests.factories import CON_NAME, PRO_NAME, make_debate

DEBATE_ID = "debate-test"


@pytest.fixture
def recording_console():
    console = Console(record=True, width=120, color_system=None)
    with patch("core.display.console", console):
        yield console


class TestFormatting:
    @pytest.mark.parametrize(
        "phase, expected",
        [
            ("cross-examination", "Cross Examination"),
            ("verdict", "Verdict"),
            ("opening-statements", "Opening Statements"),
        ],
    )
    def test_format_phase_name(self, phase, expected):
        assert format_phase_name(phase) == expected


class TestRenderDebate:
    """Rendering a full message stream the way the CLI does."""

    @pytest.mark.asyncio
    async def test_renders_every_phase(self, recording_console, writer, broker, generator, fast_settings):
        await writer.create(make_debate(DEBATE_ID))
        debate = await PhaseOrchestrator(DEBATE_ID, writer, generator, fast_settings).advance()

        reconstructor = DebateReconstructor(DEBATE_ID, debate.topic)
        for message in broker.history(channel_for(DEBATE_ID), DEFAULT_TOPIC):
            render_message(message, reconstructor.apply(message))
        render_summary(debate)

        output = recording_console.export_text()
        assert "Opening Statements" in output
        assert f"Round 1: {PRO_NAME} (Pro) questions {CON_NAME} (Con)" in output
        assert "Absolutely." in output
        assert f"Winner: {PRO_NAME}" in output
        assert "Pro 24.0 - Con 18.0 (margin 6.0)" in output

    def test_summary_shows_error(self, recording_console):
        debate = make_debate(DEBATE_ID).model_copy(update={"error_message": "Phase verdict timed out after 5s"})
        render_summary(debate)
        assert "Error: Phase verdict timed out after 5s" in recording_console.export_text()
