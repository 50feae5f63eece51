"""
Tracer handles for remote calls.

The tracing backend that records spans is not part of this package. A call
context only carries a tracer and hands it to whoever executes the call.
"""

from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class ApiTracer:
    """
    Receives lifecycle events of one logical operation.

    Every hook is a no-op here; implementations override what they need.
    """

    def operation_succeeded(self) -> None:
        """The operation completed successfully."""
        pass

    def operation_cancelled(self) -> None:
        """The operation was cancelled by the caller."""
        pass

    def operation_failed(self, error: BaseException) -> None:
        """The operation failed with a non-retryable error."""
        pass

    def attempt_started(self, attempt_number: int) -> None:
        """A new attempt is about to be sent."""
        pass

    def attempt_succeeded(self) -> None:
        pass

    def attempt_failed(self, error: BaseException, delay_seconds: float) -> None:
        """An attempt failed and another will follow after ``delay_seconds``."""
        pass

    def attempt_failed_retries_exhausted(self, error: BaseException) -> None:
        pass

    def request_sent(self) -> None:
        pass

    def response_received(self) -> None:
        pass

    def batch_request_sent(self, element_count: int, request_size: int) -> None:
        """A batch carrying ``element_count`` elements was sent."""
        pass


class BaseApiTracer(ApiTracer):
    """No-op tracer shared by every context without an explicit tracer."""

    _instance: Optional["BaseApiTracer"] = None

    @classmethod
    def get_instance(cls) -> "BaseApiTracer":
        """Get the process-wide no-op tracer."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __repr__(self) -> str:
        return "BaseApiTracer()"


class LoggingApiTracer(ApiTracer):
    """
    Tracer that reports every event as a structured log line.

    Useful while developing a client, where no tracing backend is wired.
    """

    def __init__(self, operation: str):
        """
        Initialize the tracer.

        Args:
            operation: Name of the traced operation, bound to every event
        """
        self.operation = operation
        self._log = logger.bind(operation=operation)
        self._attempt = 0

    def operation_succeeded(self) -> None:
        self._log.info("operation_succeeded", attempts=self._attempt)

    def operation_cancelled(self) -> None:
        self._log.info("operation_cancelled", attempts=self._attempt)

    def operation_failed(self, error: BaseException) -> None:
        self._log.warning("operation_failed", attempts=self._attempt, error=str(error))

    def attempt_started(self, attempt_number: int) -> None:
        self._attempt = attempt_number
        self._log.debug("attempt_started", attempt=attempt_number)

    def attempt_succeeded(self) -> None:
        self._log.debug("attempt_succeeded", attempt=self._attempt)

    def attempt_failed(self, error: BaseException, delay_seconds: float) -> None:
        self._log.info(
            "attempt_failed",
            attempt=self._attempt,
            error=str(error),
            delay_seconds=delay_seconds,
        )

    def attempt_failed_retries_exhausted(self, error: BaseException) -> None:
        self._log.warning(
            "attempt_failed_retries_exhausted",
            attempt=self._attempt,
            error=str(error),
        )

    def request_sent(self) -> None:
        self._log.debug("request_sent", attempt=self._attempt)

    def response_received(self) -> None:
        self._log.debug("response_received", attempt=self._attempt)

    def batch_request_sent(self, element_count: int, request_size: int) -> None:
        self._log.debug(
            "batch_request_sent",
            element_count=element_count,
            request_size=request_size,
        )

    def __repr__(self) -> str:
        return f"LoggingApiTracer(operation={self.operation!r})"
