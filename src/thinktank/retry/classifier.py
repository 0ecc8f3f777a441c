"""
Error classification for retry logic.

Maps any failure surfaced by a provider client (httpx errors, provider
error bodies, already-categorized errors) into a CategorizedLLMError.
Classification is a pure function of the exception; it performs no I/O.
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

import httpx

from thinktank.llm.errors import (
    CategorizedLLMError,
    ErrorCategory,
    category_from_message,
    category_from_status_code,
    is_categorized_error,
    wrap,
)


def parse_retry_after(value: str | None, now: datetime | None = None) -> float | None:
    """
    Parse a Retry-After header value into seconds.

    Accepts both forms allowed by RFC 9110: delay-seconds and HTTP-date.

    Returns:
        Positive number of seconds, or None if absent, malformed or in the past
    """
    if not value:
        return None

    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        try:
            retry_at = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if retry_at.tzinfo is None:
            retry_at = retry_at.replace(tzinfo=timezone.utc)
        seconds = (retry_at - (now or datetime.now(timezone.utc))).total_seconds()

    return seconds if seconds > 0 else None


def _classify_status_error(error: httpx.HTTPStatusError, provider: str) -> CategorizedLLMError:
    response = error.response
    status_code = response.status_code
    try:
        body = response.text[:500]
    except httpx.ResponseNotRead:
        body = ""

    category = category_from_status_code(status_code)
    if category is ErrorCategory.UNKNOWN and body:
        category = category_from_message(body)

    estimated_wait = None
    if category.retry_possible:
        estimated_wait = parse_retry_after(response.headers.get("retry-after"))

    return wrap(
        error,
        provider,
        f"HTTP {status_code} from provider: {body or response.reason_phrase}",
        category,
        estimated_wait=estimated_wait,
        details={"status_code": status_code},
    )


def classify(error: BaseException, provider: str = "") -> CategorizedLLMError:
    """
    Classify a failure into a CategorizedLLMError.

    Rules, in order:
    1. Already categorized (directly or anywhere in the cause chain):
       returned unchanged, so category and retry eligibility are preserved
    2. httpx.HTTPStatusError: category from the status code, Retry-After
       header as the estimated wait
    3. Transport failures and timeouts: NETWORK
    4. Anything else: category from the message, UNKNOWN if nothing matches

    Args:
        error: Exception raised by a client or response extraction
        provider: Provider name to record on newly created errors

    Returns:
        CategorizedLLMError (the same instance if one was already present)
    """
    categorized = is_categorized_error(error)
    if categorized is not None:
        return categorized

    if isinstance(error, httpx.HTTPStatusError):
        return _classify_status_error(error, provider)

    if isinstance(error, (httpx.TransportError, TimeoutError, ConnectionError)):
        return wrap(
            error,
            provider,
            f"Network error: {str(error) or type(error).__name__}",
            ErrorCategory.NETWORK,
            details={"error_type": type(error).__name__},
        )

    message = str(error) or type(error).__name__
    return wrap(
        error,
        provider,
        message,
        category_from_message(message),
        details={"error_type": type(error).__name__},
    )
