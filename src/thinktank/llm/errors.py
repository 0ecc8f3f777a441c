"""
Categorized errors for the LLM client layer.

Every failure that leaves a provider client is eventually expressed as a
CategorizedLLMError. The category is what the retry processor acts on:
it decides retry eligibility and, through the backoff policy, how long to
wait before the next attempt.

The category set is closed. Adding a member requires adding it to
``_RETRY_POLICY`` and ``_SUGGESTIONS`` below; the import-time checks fail
otherwise.
"""

import re
from enum import Enum


class ErrorCategory(str, Enum):
    """
    Closed taxonomy of remote-call failure categories.

    Only NETWORK, RATE_LIMIT and SERVER are transient. Everything else,
    including UNKNOWN, is treated as permanent.
    """

    UNKNOWN = "unknown"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    INVALID_REQUEST = "invalid_request"
    NOT_FOUND = "not_found"
    SERVER = "server"
    NETWORK = "network"
    CANCELLED = "cancelled"
    INPUT_LIMIT = "input_limit"
    CONTENT_FILTERED = "content_filtered"
    INSUFFICIENT_CREDITS = "insufficient_credits"

    @property
    def retry_possible(self) -> bool:
        """Whether another attempt is policy-permitted for this category."""
        return _RETRY_POLICY[self]


_RETRY_POLICY: dict[ErrorCategory, bool] = {
    ErrorCategory.UNKNOWN: False,
    ErrorCategory.AUTH: False,
    ErrorCategory.RATE_LIMIT: True,
    ErrorCategory.INVALID_REQUEST: False,
    ErrorCategory.NOT_FOUND: False,
    ErrorCategory.SERVER: True,
    ErrorCategory.NETWORK: True,
    ErrorCategory.CANCELLED: False,
    ErrorCategory.INPUT_LIMIT: False,
    ErrorCategory.CONTENT_FILTERED: False,
    ErrorCategory.INSUFFICIENT_CREDITS: False,
}

_SUGGESTIONS: dict[ErrorCategory, str] = {
    ErrorCategory.UNKNOWN: "Check the logs for details about the unexpected failure.",
    ErrorCategory.AUTH: "Check that OPENROUTER_API_KEY is set and valid.",
    ErrorCategory.RATE_LIMIT: "The provider is throttling requests; wait before running again or use fewer models.",
    ErrorCategory.INVALID_REQUEST: "The request was rejected; check model parameters and prompt format.",
    ErrorCategory.NOT_FOUND: "The model was not found; check the model name.",
    ErrorCategory.SERVER: "The provider reported a server error; try again later.",
    ErrorCategory.NETWORK: "Check your network connection and the provider endpoint.",
    ErrorCategory.CANCELLED: "The operation was cancelled.",
    ErrorCategory.INPUT_LIMIT: "The prompt exceeds the model's context window; review fewer files.",
    ErrorCategory.CONTENT_FILTERED: "The provider's safety filter blocked the request or response.",
    ErrorCategory.INSUFFICIENT_CREDITS: "Add credits to your provider account.",
}

RETRYABLE_CATEGORIES: frozenset[ErrorCategory] = frozenset(
    category for category, retryable in _RETRY_POLICY.items() if retryable
)

for _table_name, _table in (("_RETRY_POLICY", _RETRY_POLICY), ("_SUGGESTIONS", _SUGGESTIONS)):
    _missing = set(ErrorCategory) - set(_table)
    if _missing:
        raise RuntimeError(
            f"{_table_name} is missing categories: {sorted(c.value for c in _missing)}"
        )


class LLMClientError(Exception):
    """
    Base exception for all LLM client errors.

    All LLM-specific exceptions inherit from this to allow catching
    any LLM-related error with a single except clause.
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CategorizedLLMError(LLMClientError):
    """
    An LLM failure tagged with a recovery category.

    ``retry_possible`` is derived from the category when the error is
    created and cannot be set independently. ``estimated_wait`` is only
    present when the provider gave a concrete hint (e.g. a Retry-After
    header); otherwise the backoff policy supplies the category default.

    Attributes:
        message: Human-readable description
        category: ErrorCategory assigned at classification time
        provider: Provider name the failure came from (may be empty)
        estimated_wait: Provider-suggested wait in seconds, or None
        cause: The wrapped original exception, or None
        details: Extra structured context for logs and audit entries
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        *,
        provider: str = "",
        estimated_wait: float | None = None,
        cause: BaseException | None = None,
        details: dict | None = None,
    ):
        if estimated_wait is not None and estimated_wait < 0:
            raise ValueError("estimated_wait must be >= 0")

        super().__init__(message, details)
        self._category = ErrorCategory(category)
        self._retry_possible = self._category.retry_possible
        self._estimated_wait = estimated_wait
        self.provider = provider
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def category(self) -> ErrorCategory:
        return self._category

    @property
    def retry_possible(self) -> bool:
        return self._retry_possible

    @property
    def estimated_wait(self) -> float | None:
        return self._estimated_wait

    def suggestion(self) -> str:
        """Short user-facing hint for this category."""
        return _SUGGESTIONS[self._category]

    def user_facing_message(self) -> str:
        """Message plus suggestion, for console output upstream."""
        return f"{self.message}\n\nSuggestion: {self.suggestion()}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"category={self._category.value}, "
            f"retry_possible={self._retry_possible}, "
            f"message={self.message!r})"
        )


def wrap(
    error: BaseException,
    provider: str,
    message: str,
    category: ErrorCategory,
    estimated_wait: float | None = None,
    details: dict | None = None,
) -> CategorizedLLMError:
    """Wrap an arbitrary exception in a CategorizedLLMError, chaining it as the cause."""
    return CategorizedLLMError(
        message or str(error),
        category,
        provider=provider,
        estimated_wait=estimated_wait,
        cause=error,
        details=details,
    )


def is_categorized_error(error: BaseException | None) -> CategorizedLLMError | None:
    """
    Find a CategorizedLLMError in an exception chain.

    Follows explicit ``__cause__`` links only, so an error wrapped upstream
    (``raise ... from err``) keeps its original classification. An error
    merely being handled when another was raised (``__context__``) does not
    carry over.

    Returns:
        The first CategorizedLLMError found, or None
    """
    seen: set[int] = set()
    current = error
    while current is not None and id(current) not in seen:
        if isinstance(current, CategorizedLLMError):
            return current
        seen.add(id(current))
        current = current.__cause__
    return None


def category_from_status_code(status_code: int) -> ErrorCategory:
    """Map an HTTP status code to an ErrorCategory."""
    if status_code in (401, 403):
        return ErrorCategory.AUTH
    if status_code == 402:
        return ErrorCategory.INSUFFICIENT_CREDITS
    if status_code == 404:
        return ErrorCategory.NOT_FOUND
    if status_code == 408:
        return ErrorCategory.NETWORK
    if status_code == 413:
        return ErrorCategory.INPUT_LIMIT
    if status_code == 429:
        return ErrorCategory.RATE_LIMIT
    if status_code == 400 or status_code == 422:
        return ErrorCategory.INVALID_REQUEST
    if 500 <= status_code <= 599:
        return ErrorCategory.SERVER
    return ErrorCategory.UNKNOWN


# Order matters: the first matching category wins, so narrower categories
# (e.g. "invalid api key" is AUTH, "context length" is INPUT_LIMIT) come
# before broader ones like INVALID_REQUEST.
_MESSAGE_PATTERNS: list[tuple[ErrorCategory, re.Pattern[str]]] = [
    (ErrorCategory.CANCELLED, re.compile(r"\bcancell?ed\b")),
    (
        ErrorCategory.CONTENT_FILTERED,
        re.compile(
            r"content[ _]filter|blocked by (the )?(safety|content|moderation)"
            r"|safety (filter|settings|system)|moderation|flagged"
        ),
    ),
    (
        ErrorCategory.INSUFFICIENT_CREDITS,
        re.compile(r"insufficient[ _](credits|quota|funds)|payment required|billing|\b402\b"),
    ),
    (
        ErrorCategory.INPUT_LIMIT,
        re.compile(
            r"context[ _]length|context window|maximum context|token limit"
            r"|too many tokens|input too long|prompt is too long|\b413\b"
        ),
    ),
    (
        ErrorCategory.RATE_LIMIT,
        re.compile(r"rate[ _]?limit|too many requests|resource[ _]exhausted|\b429\b"),
    ),
    (
        ErrorCategory.AUTH,
        re.compile(
            r"unauthori[sz]ed|authenticat|api[ _]key|permission denied|forbidden|\b401\b|\b403\b"
        ),
    ),
    (
        ErrorCategory.NOT_FOUND,
        re.compile(r"not found|no such model|does not exist|\b404\b"),
    ),
    (
        ErrorCategory.INVALID_REQUEST,
        re.compile(r"invalid[ _](request|argument|parameter)|bad request|\b400\b"),
    ),
    (
        ErrorCategory.SERVER,
        re.compile(
            r"server error|service unavailable|bad gateway|gateway timeout|overloaded"
            r"|\b50[0-4]\b"
        ),
    ),
    (
        ErrorCategory.NETWORK,
        re.compile(
            r"connection|network|timeout|timed out|\bdns\b|\beof\b|reset by peer|unreachable"
        ),
    ),
]


def category_from_message(message: str) -> ErrorCategory:
    """Best-effort category from an error message; UNKNOWN when nothing matches."""
    lowered = message.lower()
    for category, pattern in _MESSAGE_PATTERNS:
        if pattern.search(lowered):
            return category
    return ErrorCategory.UNKNOWN
