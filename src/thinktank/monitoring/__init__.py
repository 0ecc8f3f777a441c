"""Monitoring and metrics instrumentation for the thinktank model processor.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from thinktank.monitoring.metrics import (
    llm_attempts_total,
    llm_cancellations_total,
    llm_latency_seconds,
    llm_retries_total,
    llm_retry_wait_seconds,
    llm_terminal_failures_total,
)

__all__ = [
    "llm_attempts_total",
    "llm_retries_total",
    "llm_retry_wait_seconds",
    "llm_cancellations_total",
    "llm_terminal_failures_total",
    "llm_latency_seconds",
]
