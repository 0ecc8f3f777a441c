"""Custom Prometheus metrics for the thinktank model processor.

Metrics live in the default registry; the orchestrator decides whether to
expose them (push gateway or /metrics). Alert rules should be configured for:
- llm_retries_total (high retry rate indicates provider instability)
- llm_terminal_failures_total (reviews missing a model's output)
"""

from prometheus_client import Counter, Histogram

# === Attempt Metrics ===

llm_attempts_total = Counter(
    "llm_attempts_total",
    "Total generation attempts by model and outcome",
    ["model", "outcome"],
)
"""
Generation attempts counter.

Labels:
- model: model name as requested by the orchestrator
- outcome: success, retryable_failure, terminal_failure
"""

# === Retry Metrics ===

llm_retries_total = Counter(
    "llm_retries_total",
    "Total retries scheduled by failure category",
    ["category"],
)
"""
Retries counter by failure category.

Labels:
- category: network, rate_limit, server

Alert thresholds:
- WARN: rate_limit retries > 10% of attempts (reduce model fan-out)
"""

llm_retry_wait_seconds = Histogram(
    "llm_retry_wait_seconds",
    "Wait scheduled before a retry",
    buckets=(1, 5, 15, 30, 60, 120, 300),
)

llm_cancellations_total = Counter(
    "llm_cancellations_total",
    "Sessions cancelled while waiting to retry",
)

# === Terminal Failure Metrics ===

llm_terminal_failures_total = Counter(
    "llm_terminal_failures_total",
    "Total sessions ending in a categorized error",
    ["category", "exhausted"],
)
"""
Terminal failures by category.

Labels:
- category: final attempt's failure category
- exhausted: true (retry budget used up), false (non-retryable)
"""

# === Latency Metrics ===

llm_latency_seconds = Histogram(
    "llm_latency_seconds",
    "LLM generation latency in seconds",
    ["model", "success"],
    buckets=(1, 5, 10, 30, 60, 120, 300, 600),
)
