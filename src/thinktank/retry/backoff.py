"""
Backoff policy: how long to wait before the next attempt.

Waits are fixed per category and do not grow with the attempt index. A
provider hint (Retry-After) always wins over the category default.
"""

import structlog

from thinktank.config import Settings
from thinktank.llm.errors import RETRYABLE_CATEGORIES, CategorizedLLMError, ErrorCategory

logger = structlog.get_logger(__name__)

DEFAULT_WAIT_SECONDS: dict[ErrorCategory, float] = {
    ErrorCategory.NETWORK: 30.0,
    ErrorCategory.RATE_LIMIT: 60.0,
    ErrorCategory.SERVER: 15.0,
}

if set(DEFAULT_WAIT_SECONDS) != RETRYABLE_CATEGORIES:
    raise RuntimeError(
        "DEFAULT_WAIT_SECONDS must cover exactly the retryable categories: "
        f"{sorted(c.value for c in RETRYABLE_CATEGORIES)}"
    )


class BackoffPolicy:
    """
    Fixed per-category wait policy.

    Attributes:
        defaults: Wait in seconds for each retryable category
    """

    def __init__(
        self,
        network_wait: float = DEFAULT_WAIT_SECONDS[ErrorCategory.NETWORK],
        rate_limit_wait: float = DEFAULT_WAIT_SECONDS[ErrorCategory.RATE_LIMIT],
        server_wait: float = DEFAULT_WAIT_SECONDS[ErrorCategory.SERVER],
    ):
        self.defaults: dict[ErrorCategory, float] = {
            ErrorCategory.NETWORK: network_wait,
            ErrorCategory.RATE_LIMIT: rate_limit_wait,
            ErrorCategory.SERVER: server_wait,
        }
        for category, seconds in self.defaults.items():
            if seconds <= 0:
                raise ValueError(f"default wait for {category.value} must be > 0")

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackoffPolicy":
        return cls(
            network_wait=settings.NETWORK_RETRY_WAIT_SECONDS,
            rate_limit_wait=settings.RATE_LIMIT_RETRY_WAIT_SECONDS,
            server_wait=settings.SERVER_RETRY_WAIT_SECONDS,
        )

    def default_wait(self, category: ErrorCategory) -> float:
        """
        Category default wait.

        Raises:
            ValueError: category is not retryable
        """
        try:
            return self.defaults[category]
        except KeyError:
            raise ValueError(f"category {category.value} is not retryable") from None

    def next_wait(
        self,
        category: ErrorCategory,
        estimated_wait: float | None,
        attempt: int,
    ) -> float:
        """
        Wait in seconds before the attempt after ``attempt``.

        Args:
            category: Category of the failure that just happened
            estimated_wait: Provider hint; used verbatim when positive
            attempt: 1-based index of the attempt that failed

        Raises:
            ValueError: attempt < 1 or category is not retryable
        """
        if attempt < 1:
            raise ValueError("attempt must be >= 1")

        default = self.default_wait(category)
        if estimated_wait is not None and estimated_wait > 0:
            source = "provider"
            wait = estimated_wait
        else:
            source = "default"
            wait = default

        logger.debug(
            "Computed retry wait",
            category=category.value,
            attempt=attempt,
            wait_seconds=wait,
            source=source,
        )
        return wait

    def wait_for(self, error: CategorizedLLMError, attempt: int) -> float:
        """Shortcut for ``next_wait`` taking a classified error."""
        return self.next_wait(error.category, error.estimated_wait, attempt)
