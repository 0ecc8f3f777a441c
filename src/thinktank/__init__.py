"""
Model processor for the thinktank multi-model code review tool.

Runs a single remote model invocation with classified-failure recovery:
- Error classification (category, retry eligibility, estimated wait)
- Fixed per-category backoff (network 30s, rate limit 60s)
- Bounded retry loop (3 attempts) with a cancellable wait between attempts

Architecture: httpx provider clients + structlog logging + pydantic-settings configuration
"""

__version__ = "0.1.0"
