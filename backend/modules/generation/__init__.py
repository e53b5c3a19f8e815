"""
Generation module.

Turns prompts into validated structured outputs.

Public API:
- IStructuredGenerator: Interface the orchestrator depends on
- LLMStructuredGenerator: LangChain chat-model implementation
- Prompt: System and user text for one call
"""

from .exceptions import GenerationError
from .interfaces import IStructuredGenerator
from .llm import LLMStructuredGenerator
from .models import Prompt

__all__ = [
    "GenerationError",
    "IStructuredGenerator",
    "LLMStructuredGenerator",
    "Prompt",
]
