"""
LLM client abstraction and implementations.

Components:
- BaseLLMClient: Abstract base class for provider clients
- APIService: Client construction and response text extraction
- OpenRouterClient / OpenRouterAPIService: OpenRouter implementation
- errors: ErrorCategory taxonomy and CategorizedLLMError
"""

from thinktank.llm.api_service import APIService
from thinktank.llm.base_client import BaseLLMClient
from thinktank.llm.errors import (
    CategorizedLLMError,
    ErrorCategory,
    LLMClientError,
    RETRYABLE_CATEGORIES,
    category_from_message,
    category_from_status_code,
    is_categorized_error,
    wrap,
)
from thinktank.llm.openrouter_client import OpenRouterAPIService, OpenRouterClient

__all__ = [
    "APIService",
    "BaseLLMClient",
    "OpenRouterClient",
    "OpenRouterAPIService",
    "LLMClientError",
    "CategorizedLLMError",
    "ErrorCategory",
    "RETRYABLE_CATEGORIES",
    "category_from_message",
    "category_from_status_code",
    "is_categorized_error",
    "wrap",
]
