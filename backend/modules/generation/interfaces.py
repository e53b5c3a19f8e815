"""
Generation module interface.

The debate orchestrator depends on IStructuredGenerator for every
natural-language call. Anything that can turn a Prompt into a validated
pydantic model fits: the LLM-backed client, or a scripted fake in tests.
"""

from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from .models import Prompt

T = TypeVar("T", bound=BaseModel)


@runtime_checkable
class IStructuredGenerator(Protocol):
    """Interface for structured generation calls."""

    async def generate(self, prompt: Prompt, output_type: type[T]) -> T:
        """
        Produce one structured result.

        No retries are performed; callers decide how to handle failure.

        Args:
            prompt: System and user text for the call
            output_type: Pydantic model the result must validate against

        Returns:
            A validated instance of ``output_type``

        Raises:
            GenerationError: If the call fails or the output does not validate
        """
        ...
