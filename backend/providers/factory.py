"""Factory functions for creating LLM providers and chat models."""

from langchain_openai import ChatOpenAI

from shared.config import Settings

from .base import ModelConfig
from .openai_compatible import PROVIDER_CONFIGS, OpenAICompatibleProvider


def get_providers() -> dict[str, OpenAICompatibleProvider]:
    """One provider instance per supported provider type."""
    return {name: OpenAICompatibleProvider(name) for name in PROVIDER_CONFIGS}


def parse_model_string(model: str) -> tuple[str, str]:
    """Parse 'provider/model_id' into (provider_type, model_id).

    Args:
        model: Model string, e.g. "ollama/llama3" or "openai/gpt-4o-mini"

    Raises:
        ValueError: If model string doesn't contain a '/'
    """
    if "/" not in model:
        raise ValueError(
            f"Invalid model string '{model}'. "
            "Expected format: 'provider/model_id' (e.g., 'ollama/llama3')"
        )
    provider_type, model_id = model.split("/", 1)
    return provider_type, model_id


def _api_key_for(provider_type: str, settings: Settings) -> str:
    keys = {
        "openai": settings.openai_api_key,
        "grok": settings.xai_api_key,
        "openrouter": settings.openrouter_api_key,
    }
    return keys.get(provider_type, "")


def model_config_from_settings(settings: Settings) -> ModelConfig:
    provider_type, model_id = parse_model_string(settings.llm_model)
    return ModelConfig(
        provider_type=provider_type,
        model_id=model_id,
        api_base=settings.llm_api_base,
        api_key=_api_key_for(provider_type, settings),
        temperature=settings.llm_temperature,
    )


def build_chat_model(settings: Settings) -> ChatOpenAI:
    """Build the chat model named by ``settings.llm_model``."""
    config = model_config_from_settings(settings)
    provider = OpenAICompatibleProvider(config.provider_type)
    return provider.get_llm(config)
