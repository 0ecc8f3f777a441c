"""
OpenRouter client implementation for LLM inference.

Communicates with the OpenRouter chat completions API (OpenAI-compatible)
using httpx AsyncClient. Supports:
- Single-turn chat completion from a prompt
- Connection pooling via a persistent AsyncClient
- Provider error bodies returned with HTTP 200
"""

import json
import time
from typing import Any, Dict, Optional

import httpx
import structlog

from thinktank.llm.api_service import APIService
from thinktank.llm.base_client import BaseLLMClient
from thinktank.llm.errors import (
    CategorizedLLMError,
    ErrorCategory,
    category_from_message,
    category_from_status_code,
    wrap,
)
from thinktank.models.llm_models import GenerationParameters, ProviderResult, SafetyInfo
from thinktank.monitoring.metrics import llm_latency_seconds


logger = structlog.get_logger(__name__)


class OpenRouterClient(BaseLLMClient):
    """
    OpenRouter-specific LLM client using httpx for async HTTP communication.

    API Endpoints:
    - POST /chat/completions: Generate completion

    HTTP status errors are raised as raw ``httpx.HTTPStatusError`` so the
    classifier can read the status code and Retry-After header. There is
    no internal retry loop.
    """

    provider_name = "openrouter"

    def __init__(
        self,
        model_name: str,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: int = 300,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs
    ):
        """
        Initialize OpenRouter client.

        Args:
            model_name: OpenRouter model id (e.g., "openai/gpt-5.2")
            api_key: OpenRouter API key
            base_url: API base URL
            timeout: Request timeout in seconds
            connection_limits: httpx connection pool limits
            transport: Optional httpx transport (tests use httpx.MockTransport)
            **kwargs: Additional config
        """
        super().__init__(model_name, api_key, base_url, timeout, **kwargs)

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0
            )

        self._client: Optional[httpx.AsyncClient] = None
        self._connection_limits = connection_limits
        self._transport = transport

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "X-Title": "thinktank",
                },
                follow_redirects=True
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    def _build_payload(self, prompt: str, params: GenerationParameters) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
        }
        payload.update(params.to_payload())
        return payload

    async def generate(self, prompt: str, params: GenerationParameters) -> ProviderResult:
        """
        Generate completion using the OpenRouter API.

        POST /chat/completions with payload:
        {
            "model": "openai/gpt-5.2",
            "messages": [{"role": "user", "content": "..."}],
            "stream": false,
            "temperature": 0.7,
            "max_tokens": 4096
        }

        Raises:
            httpx.HTTPStatusError: Non-2xx response
            httpx.TransportError: Network failure or timeout
            CategorizedLLMError: Error body, malformed JSON, or no choices
        """
        start_time = time.time()
        payload = self._build_payload(prompt, params)

        logger.info(
            "Sending generation request to OpenRouter",
            model=self.model_name,
            prompt_length=len(prompt),
            params=params.to_payload(),
        )

        client = await self._get_client()
        try:
            response = await client.post("/chat/completions", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "OpenRouter HTTP error",
                model=self.model_name,
                status_code=e.response.status_code,
                error_text=e.response.text[:500],
            )
            llm_latency_seconds.labels(model=self.model_name, success="false").observe(
                time.time() - start_time
            )
            raise
        except httpx.TransportError as e:
            logger.warning(
                "OpenRouter transport error",
                model=self.model_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            llm_latency_seconds.labels(model=self.model_name, success="false").observe(
                time.time() - start_time
            )
            raise

        try:
            response_data = response.json()
        except json.JSONDecodeError as e:
            logger.error("Failed to parse OpenRouter response JSON", error=str(e))
            raise wrap(
                e,
                self.provider_name,
                "Invalid JSON response from OpenRouter",
                ErrorCategory.SERVER,
            )

        if not isinstance(response_data, dict):
            logger.error(
                "Unexpected OpenRouter response shape",
                body_type=type(response_data).__name__,
            )
            raise CategorizedLLMError(
                "Unexpected response shape from OpenRouter",
                ErrorCategory.SERVER,
                provider=self.provider_name,
                details={"body_type": type(response_data).__name__},
            )

        result = self._parse_response(response_data, start_time)

        logger.info(
            "OpenRouter generation successful",
            model=result.model,
            latency_ms=result.latency_ms,
            prompt_tokens=result.prompt_tokens,
            completion_tokens=result.completion_tokens,
            finish_reason=result.finish_reason,
        )
        llm_latency_seconds.labels(model=self.model_name, success="true").observe(
            result.latency_ms / 1000.0
        )
        return result

    def _parse_response(self, data: Dict[str, Any], start_time: float) -> ProviderResult:
        error_body = data.get("error")
        if error_body:
            raise self._error_from_body(error_body)

        choices = data.get("choices") or []
        if not choices:
            raise CategorizedLLMError(
                "OpenRouter returned no choices",
                ErrorCategory.UNKNOWN,
                provider=self.provider_name,
                details={"response_id": data.get("id")},
            )

        choice = choices[0]
        finish_reason = choice.get("finish_reason") or ""
        content = (choice.get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}

        safety_info = []
        if finish_reason == "content_filter":
            safety_info.append(SafetyInfo(category="content_filter", blocked=True))

        return ProviderResult(
            content=content,
            model=data.get("model", self.model_name),
            finish_reason=finish_reason,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            latency_ms=int((time.time() - start_time) * 1000),
            safety_info=safety_info,
            raw_metadata={
                "id": data.get("id"),
                "provider": data.get("provider"),
            },
        )

    def _error_from_body(self, error_body: Any) -> CategorizedLLMError:
        """Categorize an error object returned inside a 200 response."""
        if not isinstance(error_body, dict):
            error_body = {"message": str(error_body)}

        message = str(error_body.get("message") or "OpenRouter returned an error")
        code = error_body.get("code")
        category = ErrorCategory.UNKNOWN
        if isinstance(code, int):
            category = category_from_status_code(code)
        if category is ErrorCategory.UNKNOWN:
            category = category_from_message(message)

        logger.warning(
            "OpenRouter error body",
            model=self.model_name,
            code=code,
            category=category.value,
            error_message=message,
        )
        return CategorizedLLMError(
            message,
            category,
            provider=self.provider_name,
            details={"code": code, "metadata": error_body.get("metadata")},
        )

    async def close(self):
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed OpenRouter client connection")


class OpenRouterAPIService(APIService):
    """APIService that builds OpenRouterClient instances."""

    def __init__(
        self,
        timeout: int = 300,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport

    def init_llm_client(
        self, api_key: str, model_name: str, api_endpoint: str
    ) -> BaseLLMClient:
        if not api_key:
            raise CategorizedLLMError(
                "OpenRouter API key is not set",
                ErrorCategory.AUTH,
                provider=OpenRouterClient.provider_name,
            )
        if not model_name:
            raise CategorizedLLMError(
                "Model name is required",
                ErrorCategory.INVALID_REQUEST,
                provider=OpenRouterClient.provider_name,
            )

        return OpenRouterClient(
            model_name=model_name,
            api_key=api_key,
            base_url=api_endpoint or "https://openrouter.ai/api/v1",
            timeout=self.timeout,
            transport=self._transport,
        )
