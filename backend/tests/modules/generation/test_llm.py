"""Tests for LLM-backed structured generation."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from modules.debates.outputs import ClosingOutput, SideScores
from modules.generation import GenerationError, IStructuredGenerator, LLMStructuredGenerator, Prompt
from shared.config import Settings


@pytest.fixture
def llm():
    mock = MagicMock()
    mock.ainvoke = AsyncMock()
    return mock


class TestLLMStructuredGenerator:
    """Tests for LLMStructuredGenerator.generate()."""

    def test_implements_interface(self, llm):
        assert isinstance(LLMStructuredGenerator(llm), IStructuredGenerator)

    @pytest.mark.asyncio
    async def test_parses_and_validates(self, llm):
        """Should return a validated instance of the requested model."""
        llm.ainvoke.return_value = AIMessage(content='{"statement": "We rest our case.", "tone": "calm"}')

        result = await LLMStructuredGenerator(llm).generate(
            Prompt(system="You are Alex.", user="Close the debate."), ClosingOutput
        )

        assert result == ClosingOutput(statement="We rest our case.", tone="calm")

    @pytest.mark.asyncio
    async def test_sends_system_and_schema_instructions(self, llm):
        llm.ainvoke.return_value = AIMessage(content='{"pro": 7, "con": 6}')

        await LLMStructuredGenerator(llm).generate(Prompt(system="Judge.", user="Score it."), SideScores)

        system, human = llm.ainvoke.call_args.args[0]
        assert isinstance(system, SystemMessage)
        assert system.content == "Judge."
        assert isinstance(human, HumanMessage)
        assert human.content.startswith("Score it.")
        assert "pro" in human.content

    @pytest.mark.asyncio
    async def test_accepts_fenced_json(self, llm):
        llm.ainvoke.return_value = AIMessage(content='```json\n{"pro": 7, "con": 6}\n```')

        result = await LLMStructuredGenerator(llm).generate(Prompt(user="Score it."), SideScores)

        assert result.pro == 7

    @pytest.mark.asyncio
    async def test_invalid_json_raises_generation_error(self, llm):
        llm.ainvoke.return_value = AIMessage(content="I refuse to answer in JSON.")

        with pytest.raises(GenerationError) as exc_info:
            await LLMStructuredGenerator(llm).generate(Prompt(user="Score it."), SideScores)

        assert exc_info.value.details["output_type"] == "SideScores"

    @pytest.mark.asyncio
    async def test_schema_violation_raises_generation_error(self, llm):
        """Out-of-range scores should fail validation."""
        llm.ainvoke.return_value = AIMessage(content='{"pro": 42, "con": 6}')

        with pytest.raises(GenerationError) as exc_info:
            await LLMStructuredGenerator(llm).generate(Prompt(user="Score it."), SideScores)

        assert exc_info.value.details["original_error"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_transport_failure_raises_generation_error(self, llm):
        llm.ainvoke.side_effect = ConnectionError("connection refused")

        with pytest.raises(GenerationError, match="connection refused") as exc_info:
            await LLMStructuredGenerator(llm).generate(Prompt(user="Score it."), SideScores)

        assert exc_info.value.service == "llm"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @patch("modules.generation.llm.build_chat_model")
    def test_from_settings(self, mock_build):
        settings = Settings(llm_model="ollama/llama3")
        LLMStructuredGenerator.from_settings(settings)
        mock_build.assert_called_once_with(settings)
