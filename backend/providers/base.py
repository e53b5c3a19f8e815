"""Base classes and models for LLM providers."""

from abc import ABC, abstractmethod

from langchain_openai import ChatOpenAI
from pydantic import BaseModel


class ModelConfig(BaseModel):
    """Configuration for the chat model used by the generation client.

    Attributes:
        provider_type: Extracted from the model string prefix (e.g., "ollama")
        model_id: Model identifier (e.g., "llama3")
        api_base: Base URL for the API endpoint (empty uses the provider default)
        api_key: API key (empty string for local servers)
        temperature: Sampling temperature
    """

    model_config = {"frozen": True}

    provider_type: str
    model_id: str
    api_base: str = ""
    api_key: str = ""
    temperature: float = 0.8


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Every supported backend speaks the OpenAI-compatible API, so
    implementations are thin wrappers around ChatOpenAI with
    provider-specific defaults.
    """

    @abstractmethod
    def get_llm(self, config: ModelConfig) -> ChatOpenAI:
        """Return a configured LLM client for the given model.

        Args:
            config: Model configuration with provider details

        Returns:
            A configured ChatOpenAI client
        """
        pass
