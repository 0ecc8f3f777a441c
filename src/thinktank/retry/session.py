"""
Retry session tracking.

Attempt and RetrySession record what happened during one ``process`` call.
They are handed to the audit logger at terminal events and discarded when
the call returns.
"""

from dataclasses import dataclass, field

from thinktank.llm.errors import CategorizedLLMError


@dataclass(frozen=True)
class Attempt:
    """
    One invocation of the provider.

    Attributes:
        index: 1-based attempt number
        error: Classified failure, or None if the attempt succeeded
        wait_seconds: Wait scheduled after this attempt (0 if terminal)
        latency_ms: Time spent in generate + response extraction
    """

    index: int
    error: CategorizedLLMError | None = None
    wait_seconds: float = 0.0
    latency_ms: int = 0

    def __post_init__(self) -> None:
        if self.index < 1:
            raise ValueError("index must be >= 1")
        if self.wait_seconds < 0:
            raise ValueError("wait_seconds must be >= 0")

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class RetrySession:
    """
    Bounded sequence of attempts for one logical call.

    Attributes:
        model_name: Model being invoked
        max_attempts: Attempt budget
        attempts: Attempts recorded so far, in order
    """

    model_name: str
    max_attempts: int
    attempts: list[Attempt] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def record(self, attempt: Attempt) -> None:
        if len(self.attempts) >= self.max_attempts:
            raise ValueError(
                f"session for {self.model_name} already has {self.max_attempts} attempts"
            )
        if attempt.index != len(self.attempts) + 1:
            raise ValueError(
                f"expected attempt {len(self.attempts) + 1}, got {attempt.index}"
            )
        self.attempts.append(attempt)

    @property
    def invocation_count(self) -> int:
        return len(self.attempts)

    @property
    def waits(self) -> list[float]:
        return [a.wait_seconds for a in self.attempts if a.wait_seconds > 0]

    @property
    def total_wait_seconds(self) -> float:
        return sum(self.waits)

    @property
    def succeeded(self) -> bool:
        return bool(self.attempts) and self.attempts[-1].succeeded

    @property
    def last_error(self) -> CategorizedLLMError | None:
        return self.attempts[-1].error if self.attempts else None

    def summary(self) -> dict:
        """Flat dict for logs and audit entries."""
        return {
            "model": self.model_name,
            "attempts": self.invocation_count,
            "max_attempts": self.max_attempts,
            "waits_seconds": self.waits,
            "categories": [a.error.category.value for a in self.attempts if a.error],
            "succeeded": self.succeeded,
        }
