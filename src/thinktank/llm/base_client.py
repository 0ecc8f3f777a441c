"""
Abstract base client for LLM inference.

Defines the interface that all provider client implementations (OpenRouter,
etc.) must adhere to. The retry processor only talks to this interface, so
providers can be swapped without touching retry or classification logic.
"""

from abc import ABC, abstractmethod

import structlog

from thinktank.models.llm_models import GenerationParameters, ProviderResult


logger = structlog.get_logger(__name__)


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM provider clients.

    Responsibilities:
    - Send one generation request to the provider
    - Parse the response into a ProviderResult
    - Surface failures as exceptions (raw or CategorizedLLMError)

    Does NOT handle:
    - Retries of any kind (that's ModelProcessor's job)
    - Turning a ProviderResult into review text (that's APIService's job)
    """

    provider_name: str = "unknown"

    def __init__(
        self,
        model_name: str,
        api_key: str,
        base_url: str,
        timeout: int = 300,
        **kwargs
    ):
        """
        Initialize base client.

        Args:
            model_name: Provider model identifier (e.g., "openai/gpt-5.2")
            api_key: Provider API key
            base_url: Base URL of the provider API
            timeout: Request timeout in seconds
            **kwargs: Additional provider-specific config
        """
        self.model_name = model_name
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.extra_config = kwargs

        logger.info(
            "Initialized LLM client",
            client_class=self.__class__.__name__,
            model_name=model_name,
            base_url=self.base_url,
            timeout=timeout,
        )

    @abstractmethod
    async def generate(self, prompt: str, params: GenerationParameters) -> ProviderResult:
        """
        Generate a completion for a single prompt.

        Implementations must make exactly one remote call. Failures are
        raised, either raw (httpx errors) or already categorized; the
        retry processor classifies them either way.

        Args:
            prompt: Complete prompt text
            params: Sampling parameters

        Returns:
            ProviderResult with generated text and metadata
        """
        pass

    async def close(self):
        """
        Close client connections and cleanup resources.

        Called by the processor once per session. Default implementation
        does nothing.
        """
        logger.debug("Closing LLM client", client_class=self.__class__.__name__)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"model_name={self.model_name}, "
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
