"""
Audit trail sink for model processing.

The processor reports every operation boundary (client init, each
generation attempt, retries, terminal outcome) to an AuditLogger. Sinks are
side-effecting only; they never change what the processor returns.
"""

from enum import Enum
from typing import Any, Protocol

import structlog

from thinktank.llm.errors import is_categorized_error


class AuditStatus(str, Enum):
    IN_PROGRESS = "InProgress"
    SUCCESS = "Success"
    FAILURE = "Failure"
    RETRYING = "Retrying"


class AuditLogger(Protocol):
    """Receives one entry per operation boundary."""

    def log_op(
        self,
        operation: str,
        status: AuditStatus,
        inputs: dict[str, Any] | None = None,
        outputs: dict[str, Any] | None = None,
        error: BaseException | None = None,
    ) -> None:
        ...


class NoOpAuditLogger:
    """Discards all entries."""

    def log_op(
        self,
        operation: str,
        status: AuditStatus,
        inputs: dict[str, Any] | None = None,
        outputs: dict[str, Any] | None = None,
        error: BaseException | None = None,
    ) -> None:
        return None


class StructlogAuditLogger:
    """Emits audit entries as structlog events on the ``thinktank.audit`` logger."""

    def __init__(self, logger_name: str = "thinktank.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log_op(
        self,
        operation: str,
        status: AuditStatus,
        inputs: dict[str, Any] | None = None,
        outputs: dict[str, Any] | None = None,
        error: BaseException | None = None,
    ) -> None:
        entry: dict[str, Any] = {
            "operation": operation,
            "status": AuditStatus(status).value,
            "inputs": inputs or {},
            "outputs": outputs or {},
        }
        if error is not None:
            entry["error_type"] = type(error).__name__
            entry["error_message"] = str(error)
            categorized = is_categorized_error(error)
            if categorized is not None:
                entry["error_category"] = categorized.category.value

        if status == AuditStatus.FAILURE:
            self._logger.warning("audit", **entry)
        else:
            self._logger.info("audit", **entry)
