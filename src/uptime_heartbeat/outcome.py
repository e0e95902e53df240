"""Classification and logging of a single heartbeat tick."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class TickStatus(str, Enum):
    """How a heartbeat request concluded."""

    SUCCESS = "success"
    HTTP_FAILURE = "http_failure"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True)
class TickOutcome:
    """Result of one send. Built, logged, then dropped."""

    status: TickStatus
    elapsed: float
    status_code: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is TickStatus.SUCCESS

    @classmethod
    def from_status_code(cls, status_code: int, elapsed: float) -> TickOutcome:
        if 200 <= status_code < 300:
            return cls(TickStatus.SUCCESS, elapsed, status_code=status_code)
        return cls(TickStatus.HTTP_FAILURE, elapsed, status_code=status_code)

    @classmethod
    def from_error(cls, exc: BaseException, elapsed: float) -> TickOutcome:
        return cls(TickStatus.TRANSPORT_FAILURE, elapsed, error=describe_error(exc, elapsed))


def describe_error(exc: BaseException, elapsed: float) -> str:
    """Human readable description of a transport error.

    asyncio timeouts carry no message, so those get one built from the
    elapsed time.
    """
    message = str(exc)
    if isinstance(exc, TimeoutError) and not message:
        return f"request timed out after {elapsed:.2f}s"
    if not message:
        return type(exc).__name__
    return f"{type(exc).__name__}: {message}"


def log_outcome(outcome: TickOutcome) -> None:
    """Emit the log record for a finished tick."""
    extra: dict[str, object] = {"heartbeat_status": outcome.status.value}

    if outcome.ok:
        logger.debug("Heartbeat sent successfully", extra=extra)
    elif outcome.status is TickStatus.HTTP_FAILURE:
        extra["heartbeat_status_code"] = outcome.status_code
        logger.warning(
            "Heartbeat request returned non-2xx status: %s",
            outcome.status_code,
            extra=extra,
        )
    else:
        extra["heartbeat_error"] = outcome.error
        logger.warning("Heartbeat request failed: %s", outcome.error, extra=extra)
