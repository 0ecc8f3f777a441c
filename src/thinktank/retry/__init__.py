"""
Retry-and-recovery engine for a single model invocation.

Classifies every failed attempt, retries transient categories with a fixed
per-category wait, and stops on non-retryable failures, an exhausted
attempt budget, or cancellation while waiting:

1. **Classify**: ``classify`` maps any failure to a CategorizedLLMError
2. **Back off**: ``BackoffPolicy`` picks the wait (network 30s, rate limit 60s)
3. **Wait**: races the timer against ``ProcessContext`` cancellation
4. **Stop**: raises the final CategorizedLLMError or ProcessCancelledError

Main Components:
    - ModelProcessor: Retry state machine around one model call
    - BackoffPolicy: Per-category wait policy
    - ProcessContext: Cancellation and deadline signal
    - RetrySession / Attempt: Per-call attempt history
    - ProcessCancelledError: Raised when cancelled while waiting

Usage:
    >>> from thinktank.retry import ModelProcessor
    >>> processor = ModelProcessor(api_service, audit_logger, settings)
    >>> text = await processor.process("openai/gpt-5.2", prompt)
"""

from thinktank.retry.backoff import DEFAULT_WAIT_SECONDS, BackoffPolicy
from thinktank.retry.classifier import classify, parse_retry_after
from thinktank.retry.context import ProcessContext
from thinktank.retry.exceptions import ProcessCancelledError, is_cancellation
from thinktank.retry.processor import MAX_ATTEMPTS, ModelProcessor, Timer
from thinktank.retry.session import Attempt, RetrySession

__all__ = [
    "MAX_ATTEMPTS",
    "DEFAULT_WAIT_SECONDS",
    "ModelProcessor",
    "BackoffPolicy",
    "ProcessContext",
    "ProcessCancelledError",
    "is_cancellation",
    "classify",
    "parse_retry_after",
    "Attempt",
    "RetrySession",
    "Timer",
]
