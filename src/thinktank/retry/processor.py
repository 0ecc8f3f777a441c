"""
Model processor: one remote model invocation with classified retry.

This module implements the ModelProcessor that drives a single model call
through the retry state machine:

    Ready -> Invoking -> Succeeded
                      -> Classifying -> Waiting -> Invoking
                                     -> Stopped

Retry Policy:
    - At most settings.MAX_ATTEMPTS (default MAX_ATTEMPTS = 3) invocations
      per session
    - Only NETWORK, RATE_LIMIT and SERVER failures are retried
    - Wait before a retry comes from BackoffPolicy (fixed per category,
      provider Retry-After hint takes precedence)
    - The wait races the injected timer against ProcessContext
      cancellation; cancellation raises ProcessCancelledError

Usage:
    processor = ModelProcessor(api_service, audit_logger, settings)
    text = await processor.process("openai/gpt-5.2", prompt, ctx)
"""

import asyncio
import time
from typing import Any, Awaitable, Callable

import structlog

from thinktank.audit import AuditLogger, AuditStatus, NoOpAuditLogger
from thinktank.config import Settings
from thinktank.llm.api_service import APIService
from thinktank.llm.base_client import BaseLLMClient
from thinktank.llm.errors import CategorizedLLMError
from thinktank.models.llm_models import GenerationParameters
from thinktank.monitoring.metrics import (
    llm_attempts_total,
    llm_cancellations_total,
    llm_retries_total,
    llm_retry_wait_seconds,
    llm_terminal_failures_total,
)
from thinktank.retry.backoff import BackoffPolicy
from thinktank.retry.classifier import classify
from thinktank.retry.context import ProcessContext
from thinktank.retry.exceptions import ProcessCancelledError
from thinktank.retry.session import Attempt, RetrySession

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 3

Timer = Callable[[float], Awaitable[Any]]
"""Wait primitive: completes once after the given number of seconds."""


class ModelProcessor:
    """
    Runs one model invocation with classified-failure retry.

    The processor holds no per-call state; every ``process`` call owns its
    own RetrySession, so one instance can serve many models concurrently.

    Attributes:
        api_service: Builds provider clients and extracts response text
        audit_logger: Receives operation boundary entries
        settings: Application settings (API key, endpoint, sampling params)
        backoff: Wait policy between attempts
        timer: Wait primitive, ``asyncio.sleep`` unless replaced
        max_attempts: Attempt budget per session
    """

    def __init__(
        self,
        api_service: APIService,
        audit_logger: AuditLogger | None,
        settings: Settings,
        *,
        backoff: BackoffPolicy | None = None,
        timer: Timer | None = None,
        max_attempts: int | None = None,
    ):
        """
        Initialize the processor.

        Args:
            api_service: Client construction and text extraction
            audit_logger: Audit sink (no-op if None)
            settings: Application settings
            backoff: Wait policy (built from settings if None)
            timer: Replacement wait primitive; tests pass an instant timer
            max_attempts: Attempt budget, must be >= 1 (settings.MAX_ATTEMPTS if None)
        """
        if max_attempts is None:
            max_attempts = settings.MAX_ATTEMPTS
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        self.api_service = api_service
        self.audit_logger = audit_logger or NoOpAuditLogger()
        self.settings = settings
        self.backoff = backoff or BackoffPolicy.from_settings(settings)
        self.timer: Timer = timer or asyncio.sleep
        self.max_attempts = max_attempts

    async def process(
        self, model_name: str, prompt: str, ctx: ProcessContext | None = None
    ) -> str:
        """
        Generate review text from one model.

        Args:
            model_name: Model to invoke
            prompt: Complete prompt text
            ctx: Cancellation context; only consulted while waiting to retry

        Returns:
            Extracted response text

        Raises:
            CategorizedLLMError: Terminal failure. ``retry_possible`` is True
                when the attempt budget ran out on a transient cause, False
                for a non-retryable cause
            ProcessCancelledError: Cancelled while waiting to retry
        """
        ctx = ctx or ProcessContext()
        log = logger.bind(model=model_name)

        client = self._init_client(model_name, log)
        try:
            return await self._generate_with_retry(client, model_name, prompt, ctx, log)
        finally:
            await self._close_client(client, log)

    async def _close_client(self, client: BaseLLMClient, log: Any) -> None:
        """Close the client; a failing close never replaces the call's outcome."""
        try:
            await client.close()
        except Exception as exc:
            log.warning(
                "Failed to close LLM client",
                error=str(exc),
                error_type=type(exc).__name__,
            )

    def _init_client(self, model_name: str, log: Any) -> BaseLLMClient:
        inputs = {"model": model_name, "endpoint": self.settings.OPENROUTER_BASE_URL}
        self._audit("InitLLMClient", AuditStatus.IN_PROGRESS, inputs=inputs)

        try:
            client = self.api_service.init_llm_client(
                api_key=self.settings.OPENROUTER_API_KEY,
                model_name=model_name,
                api_endpoint=self.settings.OPENROUTER_BASE_URL,
            )
        except Exception as exc:
            error = classify(exc)
            log.error(
                "Failed to initialize LLM client",
                category=error.category.value,
                error=error.message,
            )
            self._audit("InitLLMClient", AuditStatus.FAILURE, inputs=inputs, error=error)
            raise error

        self._audit("InitLLMClient", AuditStatus.SUCCESS, inputs=inputs)
        return client

    def _generation_parameters(self) -> GenerationParameters:
        return GenerationParameters(
            temperature=self.settings.LLM_TEMPERATURE,
            max_tokens=self.settings.LLM_MAX_TOKENS,
        )

    async def _generate_with_retry(
        self,
        client: BaseLLMClient,
        model_name: str,
        prompt: str,
        ctx: ProcessContext,
        log: Any,
    ) -> str:
        session = RetrySession(model_name=model_name, max_attempts=self.max_attempts)
        params = self._generation_parameters()
        provider = getattr(client, "provider_name", "")

        for attempt in range(1, self.max_attempts + 1):
            inputs = {
                "model": model_name,
                "attempt": attempt,
                "max_attempts": self.max_attempts,
                "prompt_length": len(prompt),
            }
            self._audit("GenerateContent", AuditStatus.IN_PROGRESS, inputs=inputs)
            log.info("Starting generation attempt", attempt=attempt, max_attempts=self.max_attempts)

            started = time.monotonic()
            try:
                result = await client.generate(prompt, params)
                text = self.api_service.process_llm_response(result)
            except Exception as exc:
                latency_ms = int((time.monotonic() - started) * 1000)
                error = classify(exc, provider=provider)

                if not error.retry_possible or attempt >= self.max_attempts:
                    session.record(Attempt(attempt, error, 0.0, latency_ms))
                    self._on_terminal_failure(session, error, inputs, log)
                    raise error

                wait = self.backoff.wait_for(error, attempt)
                session.record(Attempt(attempt, error, wait, latency_ms))

                log.warning(
                    "Generation attempt failed, retrying",
                    attempt=attempt,
                    category=error.category.value,
                    error=error.message,
                    wait_seconds=wait,
                )
                llm_attempts_total.labels(model=model_name, outcome="retryable_failure").inc()
                llm_retries_total.labels(category=error.category.value).inc()
                llm_retry_wait_seconds.observe(wait)
                self._audit(
                    "GenerateContent",
                    AuditStatus.RETRYING,
                    inputs=inputs,
                    outputs={"wait_seconds": wait, "category": error.category.value},
                    error=error,
                )

                await self._wait(wait, ctx, session, log)
                continue

            latency_ms = int((time.monotonic() - started) * 1000)
            session.record(Attempt(attempt, None, 0.0, latency_ms))
            llm_attempts_total.labels(model=model_name, outcome="success").inc()
            log.info(
                "Generation succeeded",
                attempt=attempt,
                latency_ms=latency_ms,
                total_wait_seconds=session.total_wait_seconds,
            )
            self._audit(
                "GenerateContent",
                AuditStatus.SUCCESS,
                inputs=inputs,
                outputs={"content_length": len(text), **session.summary()},
            )
            return text

        # The loop either returns or raises on its last attempt
        raise AssertionError("retry loop exited without a result")

    def _on_terminal_failure(
        self,
        session: RetrySession,
        error: CategorizedLLMError,
        inputs: dict[str, Any],
        log: Any,
    ) -> None:
        exhausted = error.retry_possible
        llm_attempts_total.labels(model=session.model_name, outcome="terminal_failure").inc()
        llm_terminal_failures_total.labels(
            category=error.category.value, exhausted=str(exhausted).lower()
        ).inc()
        log.error(
            "Retries exhausted" if exhausted else "Non-retryable generation failure",
            category=error.category.value,
            error=error.message,
            **session.summary(),
        )
        self._audit(
            "GenerateContent",
            AuditStatus.FAILURE,
            inputs=inputs,
            outputs={"exhausted": exhausted, **session.summary()},
            error=error,
        )

    async def _wait(
        self,
        delay: float,
        ctx: ProcessContext,
        session: RetrySession,
        log: Any,
    ) -> None:
        """
        Wait ``delay`` seconds unless the context is cancelled first.

        Cancellation wins when both signals are ready. Task cancellation
        (``Task.cancel()``) propagates as ``asyncio.CancelledError``.

        Raises:
            ProcessCancelledError: Context cancelled or deadline passed
        """
        cause = ctx.cause()
        if cause is None:
            timer = asyncio.ensure_future(self.timer(delay))
            cancelled = asyncio.ensure_future(ctx.wait_cancelled())
            try:
                done, _ = await asyncio.wait(
                    {timer, cancelled},
                    timeout=ctx.remaining(),
                    return_when=asyncio.FIRST_COMPLETED,
                )
            finally:
                pending = [task for task in (timer, cancelled) if not task.done()]
                for task in pending:
                    task.cancel()
                if pending:
                    await asyncio.gather(*pending, return_exceptions=True)

            if timer in done and cancelled not in done:
                timer.result()
                return
            cause = ctx.cause() or TimeoutError("context deadline exceeded")

        llm_cancellations_total.inc()
        log.warning(
            "Retry wait cancelled",
            attempts=session.invocation_count,
            cause=type(cause).__name__,
            wait_seconds=delay,
        )
        error = ProcessCancelledError(session.model_name, cause, session.invocation_count)
        self._audit(
            "GenerateContent",
            AuditStatus.FAILURE,
            inputs={"model": session.model_name},
            outputs=session.summary(),
            error=error,
        )
        raise error

    def _audit(self, operation: str, status: AuditStatus, **kwargs: Any) -> None:
        """Forward to the audit logger; sink failures never change the outcome."""
        try:
            self.audit_logger.log_op(operation, status, **kwargs)
        except Exception as exc:
            logger.warning(
                "Audit logger failed",
                operation=operation,
                status=status.value,
                error=str(exc),
            )
