"""
API service: client construction and response extraction.

The retry processor consumes two provider-facing operations besides
``generate``: building a client for a model, and turning a raw
ProviderResult into plain review text. Both live behind APIService.
"""

from abc import ABC, abstractmethod

import structlog

from thinktank.llm.base_client import BaseLLMClient
from thinktank.llm.errors import CategorizedLLMError, ErrorCategory
from thinktank.models.llm_models import ProviderResult


logger = structlog.get_logger(__name__)


class APIService(ABC):
    """Constructs provider clients and extracts text from their results."""

    @abstractmethod
    def init_llm_client(
        self, api_key: str, model_name: str, api_endpoint: str
    ) -> BaseLLMClient:
        """
        Construct a client for one model.

        Raises:
            CategorizedLLMError: Missing credentials or unsupported model
        """
        pass

    def process_llm_response(self, result: ProviderResult | None) -> str:
        """
        Extract review text from a provider result.

        Raises:
            CategorizedLLMError: CONTENT_FILTERED when the provider's safety
                filter blocked the output, UNKNOWN when the result is empty
        """
        if result is None:
            raise CategorizedLLMError(
                "Provider returned no result", ErrorCategory.UNKNOWN
            )

        content = result.content.strip()
        if not content:
            if result.blocked_by_safety or result.finish_reason == "content_filter":
                raise CategorizedLLMError(
                    "Response blocked by provider safety filter",
                    ErrorCategory.CONTENT_FILTERED,
                    details={
                        "finish_reason": result.finish_reason,
                        "safety": [info.category for info in result.safety_info if info.blocked],
                    },
                )
            raise CategorizedLLMError(
                "Provider returned an empty response",
                ErrorCategory.UNKNOWN,
                details={"finish_reason": result.finish_reason},
            )

        if result.finish_reason == "length":
            logger.warning(
                "Response truncated at max tokens",
                model=result.model,
                completion_tokens=result.completion_tokens,
            )

        return content
