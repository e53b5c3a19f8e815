"""Tests for the unified OpenAI-compatible provider.

This module tests the OpenAICompatibleProvider which handles:
- Cloud providers: openai, grok, openrouter (require API keys)
- Local providers: ollama, vllm, lm_studio (no API key required)
"""

import pytest
from unittest.mock import patch, MagicMock

from providers.openai_compatible import (
    OpenAICompatibleProvider,
    PROVIDER_CONFIGS,
)
from providers.base import ModelConfig


def make_config(provider_type: str, model_id: str = "test-model-id", **kwargs) -> ModelConfig:
    return ModelConfig(provider_type=provider_type, model_id=model_id, **kwargs)


class TestOpenAICompatibleProviderInstantiation:
    """Test provider instantiation for all types."""

    @pytest.mark.parametrize("provider_type", list(PROVIDER_CONFIGS.keys()))
    def test_provider_instantiation(self, provider_type):
        """All provider types should instantiate without errors."""
        provider = OpenAICompatibleProvider(provider_type)
        assert provider.provider_type == provider_type
        assert provider.provider_config == PROVIDER_CONFIGS[provider_type]

    def test_unknown_provider_raises_error(self):
        """Should raise KeyError for unknown provider type."""
        with pytest.raises(KeyError, match="Unknown provider type"):
            OpenAICompatibleProvider("unknown_provider")


class TestAPIKeyValidation:
    """Test API key validation for providers that require it."""

    @pytest.mark.parametrize(
        "provider_type,env_var",
        [
            ("openai", "OPENAI_API_KEY"),
            ("grok", "XAI_API_KEY"),
            ("openrouter", "OPENROUTER_API_KEY"),
        ],
    )
    def test_api_key_required(self, provider_type, env_var):
        """Cloud providers should raise ValueError naming the env var if no key is set."""
        provider = OpenAICompatibleProvider(provider_type)

        with pytest.raises(ValueError, match="API key is required") as exc_info:
            provider.get_llm(make_config(provider_type))

        assert env_var in str(exc_info.value)

    @pytest.mark.parametrize("provider_type", ["ollama", "vllm", "lm_studio"])
    @patch("providers.openai_compatible.ChatOpenAI")
    def test_local_providers_use_not_needed_api_key(self, mock_chat_openai, provider_type):
        """Local providers should work without a key and send a placeholder."""
        mock_chat_openai.return_value = MagicMock()

        OpenAICompatibleProvider(provider_type).get_llm(make_config(provider_type))

        call_kwargs = mock_chat_openai.call_args.kwargs
        assert call_kwargs["api_key"] == "not-needed"


class TestChatOpenAIConfiguration:
    """Test that ChatOpenAI is configured correctly for each provider."""

    @patch("providers.openai_compatible.ChatOpenAI")
    def test_openai_configuration(self, mock_chat_openai):
        """OpenAI should be configured without base_url (uses default)."""
        mock_chat_openai.return_value = MagicMock()

        provider = OpenAICompatibleProvider("openai")
        provider.get_llm(make_config("openai", "gpt-4o-mini", api_key="sk-test-key", temperature=0.3))

        call_kwargs = mock_chat_openai.call_args.kwargs
        assert call_kwargs["model"] == "gpt-4o-mini"
        assert call_kwargs["api_key"] == "sk-test-key"
        assert call_kwargs["temperature"] == 0.3
        assert "base_url" not in call_kwargs

    @pytest.mark.parametrize(
        "provider_type,base_url",
        [
            ("grok", "https://api.x.ai/v1"),
            ("openrouter", "https://openrouter.ai/api/v1"),
            ("ollama", "http://localhost:11434/v1"),
            ("vllm", "http://localhost:8000/v1"),
            ("lm_studio", "http://localhost:1234/v1"),
        ],
    )
    @patch("providers.openai_compatible.ChatOpenAI")
    def test_default_base_urls(self, mock_chat_openai, provider_type, base_url):
        mock_chat_openai.return_value = MagicMock()

        OpenAICompatibleProvider(provider_type).get_llm(make_config(provider_type, api_key="key"))

        assert mock_chat_openai.call_args.kwargs["base_url"] == base_url

    @patch("providers.openai_compatible.ChatOpenAI")
    def test_openrouter_sets_custom_headers(self, mock_chat_openai):
        """OpenRouter should set the X-Title header."""
        mock_chat_openai.return_value = MagicMock()

        provider = OpenAICompatibleProvider("openrouter")
        provider.get_llm(make_config("openrouter", "anthropic/claude-3-opus", api_key="sk-or-test-key"))

        call_kwargs = mock_chat_openai.call_args.kwargs
        assert call_kwargs["model"] == "anthropic/claude-3-opus"
        assert call_kwargs["default_headers"] == {"X-Title": "Debate Arena"}

    @patch("providers.openai_compatible.ChatOpenAI")
    def test_custom_base_url_overrides_default(self, mock_chat_openai):
        """Custom api_base in config should override provider default."""
        mock_chat_openai.return_value = MagicMock()

        provider = OpenAICompatibleProvider("grok")
        provider.get_llm(
            make_config("grok", "grok-3", api_base="https://custom.api.com/v1", api_key="xai-test-key")
        )

        call_kwargs = mock_chat_openai.call_args.kwargs
        assert call_kwargs["base_url"] == "https://custom.api.com/v1"
        assert "default_headers" not in call_kwargs
