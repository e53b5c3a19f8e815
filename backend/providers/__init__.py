"""LLM provider implementations."""

from .base import LLMProvider, ModelConfig
from .factory import build_chat_model, get_providers, parse_model_string

__all__ = ["LLMProvider", "ModelConfig", "build_chat_model", "get_providers", "parse_model_string"]
