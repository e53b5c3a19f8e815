"""LLM-backed structured generation.

Uses a LangChain chat model from the configured provider. The expected
output type's JSON schema is appended to the prompt via JsonOutputParser,
and the parsed JSON is validated with the pydantic model so field types
are enforced.
"""

import logging
from typing import TypeVar

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.output_parsers import JsonOutputParser
from pydantic import BaseModel

from providers.factory import build_chat_model
from shared.config import Settings, get_settings

from .exceptions import GenerationError
from .models import Prompt

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class LLMStructuredGenerator:
    """Implements IStructuredGenerator on top of a LangChain chat model."""

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "LLMStructuredGenerator":
        return cls(build_chat_model(settings or get_settings()))

    async def generate(self, prompt: Prompt, output_type: type[T]) -> T:
        name = output_type.__name__
        parser = JsonOutputParser(pydantic_object=output_type)
        format_instructions = parser.get_format_instructions()

        messages = [
            SystemMessage(content=prompt.system),
            HumanMessage(content=f"{prompt.user}\n\n{format_instructions}"),
        ]

        try:
            response = await self._llm.ainvoke(messages)
            # Raises OutputParserException on malformed JSON
            parsed = parser.parse(response.content)
            # Raises ValidationError on missing fields or wrong types
            result = output_type.model_validate(parsed)
        except Exception as e:
            logger.warning(f"Generation of {name} failed: {e}")
            raise GenerationError(name, str(e), original_error=type(e).__name__) from e

        logger.debug(f"Generated {name}")
        return result
