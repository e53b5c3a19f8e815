"""Unified provider for all OpenAI-compatible APIs.

Covers hosted APIs (openai, grok, openrouter) and local servers
(ollama, vllm, lm_studio). They differ only in default endpoint, whether an
API key is required, and extra headers.
"""

from dataclasses import dataclass

from langchain_openai import ChatOpenAI

from .base import LLMProvider, ModelConfig


@dataclass
class ProviderConfig:
    """Defaults for one OpenAI-compatible provider.

    Attributes:
        default_base_url: Default API endpoint URL (None uses OpenAI's default)
        api_key_required: Whether an API key must be provided
        api_key_env_var: Environment variable holding the key (for error messages)
        default_headers: Custom HTTP headers to include in requests
    """

    default_base_url: str | None = None
    api_key_required: bool = True
    api_key_env_var: str = ""
    default_headers: dict[str, str] | None = None


PROVIDER_CONFIGS: dict[str, ProviderConfig] = {
    "openai": ProviderConfig(api_key_env_var="OPENAI_API_KEY"),
    "grok": ProviderConfig(
        default_base_url="https://api.x.ai/v1",
        api_key_env_var="XAI_API_KEY",
    ),
    "openrouter": ProviderConfig(
        default_base_url="https://openrouter.ai/api/v1",
        api_key_env_var="OPENROUTER_API_KEY",
        default_headers={"X-Title": "Debate Arena"},
    ),
    "ollama": ProviderConfig(
        default_base_url="http://localhost:11434/v1",
        api_key_required=False,
    ),
    "vllm": ProviderConfig(
        default_base_url="http://localhost:8000/v1",
        api_key_required=False,
    ),
    "lm_studio": ProviderConfig(
        default_base_url="http://localhost:1234/v1",
        api_key_required=False,
    ),
}


class OpenAICompatibleProvider(LLMProvider):
    """Provider for any backend in PROVIDER_CONFIGS."""

    def __init__(self, provider_type: str):
        """Initialize the provider.

        Args:
            provider_type: A key of PROVIDER_CONFIGS

        Raises:
            KeyError: If provider_type is not recognized
        """
        if provider_type not in PROVIDER_CONFIGS:
            raise KeyError(
                f"Unknown provider type: {provider_type}. "
                f"Valid types: {list(PROVIDER_CONFIGS.keys())}"
            )
        self.provider_type = provider_type
        self.provider_config = PROVIDER_CONFIGS[provider_type]

    def get_llm(self, config: ModelConfig) -> ChatOpenAI:
        """Return a ChatOpenAI client configured for this provider.

        Raises:
            ValueError: If an API key is required but not provided
        """
        if self.provider_config.api_key_required and not config.api_key:
            raise ValueError(
                f"{self.provider_type.title()} API key is required. "
                f"Set it via the {self.provider_config.api_key_env_var} environment variable."
            )

        kwargs: dict = {"model": config.model_id, "temperature": config.temperature}

        if base_url := (config.api_base or self.provider_config.default_base_url):
            kwargs["base_url"] = base_url

        # Local servers ignore the key but the client requires one
        kwargs["api_key"] = config.api_key or "not-needed"

        if self.provider_config.default_headers:
            kwargs["default_headers"] = self.provider_config.default_headers

        return ChatOpenAI(**kwargs)
