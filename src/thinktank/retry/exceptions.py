"""
Retry processor exceptions.

Terminal categorized failures surface as the CategorizedLLMError itself.
The only exception defined here is for sessions that were cancelled while
waiting to retry, which must stay distinguishable from any categorized
failure.
"""

import asyncio


class ProcessCancelledError(Exception):
    """
    Raised when a wait between attempts is interrupted by cancellation.

    The caller's cancellation cause (``asyncio.CancelledError`` for explicit
    cancellation, ``TimeoutError`` for an expired deadline) is kept in
    ``cause`` and chained as ``__cause__``.

    Attributes:
        model_name: Model whose session was cancelled
        cause: The cancellation cause
        attempts: Invocations actually made before cancellation
    """

    def __init__(self, model_name: str, cause: BaseException, attempts: int) -> None:
        self.model_name = model_name
        self.cause = cause
        self.attempts = attempts
        self.__cause__ = cause

        super().__init__(
            f"Processing {model_name} cancelled while waiting to retry "
            f"after {attempts} attempt(s): {str(cause) or type(cause).__name__}"
        )

    @property
    def deadline_exceeded(self) -> bool:
        return isinstance(self.cause, TimeoutError)


def is_cancellation(error: BaseException | None) -> bool:
    """True for ProcessCancelledError and asyncio task cancellation."""
    return isinstance(error, (ProcessCancelledError, asyncio.CancelledError))
