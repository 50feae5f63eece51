"""
Translation of asynchronous call failures.

Blocking on a future loses the synchronous call site: the traceback of the
error ends in the worker that ran the call. The helpers here re-raise the
original error at the call site and record where the caller was waiting.
"""

import traceback
from concurrent.futures import CancelledError, Future
from typing import List, TypeVar

import structlog

logger = structlog.get_logger(__name__)

ResponseT = TypeVar("ResponseT")


class UncheckedExecutionError(Exception):
    """
    Envelope for a failure raised while computing a future's result.

    The original failure is available as ``cause`` and as ``__cause__``.
    """

    def __init__(self, cause: BaseException):
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.cause = cause
        self.__cause__ = cause


class AsyncTaskException(Exception):
    """
    Marker recording the synchronous call site of an asynchronous task.

    It is attached to the propagated error as a suppressed error, never
    raised on its own.
    """

    def __init__(self, message: str = "Asynchronous task failed"):
        super().__init__(message)
        # Drop this frame so the stack ends at the caller of the constructor
        self.call_site = traceback.extract_stack()[:-1]

    def format_call_site(self) -> str:
        """Render the captured call site like a traceback."""
        return "".join(traceback.format_list(self.call_site))


def add_suppressed(error: BaseException, suppressed: BaseException) -> None:
    """
    Attach a secondary error to ``error`` without replacing its cause.

    Args:
        error: Error that will be propagated
        suppressed: Error recorded alongside it
    """
    if error is suppressed:
        raise ValueError("An error cannot suppress itself")
    existing = getattr(error, "suppressed", None)
    if existing is None:
        existing = []
        error.suppressed = existing
    existing.append(suppressed)


def get_suppressed(error: BaseException) -> List[BaseException]:
    """Get the secondary errors attached to ``error``."""
    return list(getattr(error, "suppressed", ()))


def get_unchecked(future: "Future[ResponseT]") -> ResponseT:
    """
    Block until the future resolves and return its result.

    Errors raised in the waiting thread itself (``KeyboardInterrupt`` while
    blocked, for instance) propagate unchanged.

    Raises:
        CancelledError: If the future was cancelled
        UncheckedExecutionError: Wrapping any failure of the computation
    """
    try:
        return future.result()
    except CancelledError:
        raise
    except BaseException as e:
        if not future.done() or future.exception() is not e:
            raise
        raise UncheckedExecutionError(e) from e


def call_and_translate_api_exception(future: "Future[ResponseT]") -> ResponseT:
    """
    Block on the future and re-raise its failure at this call site.

    When the failure is an ``Exception``, that exception itself is raised
    so callers can catch it by type. An ``AsyncTaskException`` is attached
    to it as a suppressed error, and a traceback note points at the waiting
    call site. Any other failure (``KeyboardInterrupt``, ``SystemExit`` and
    the like) propagates inside the ``UncheckedExecutionError`` envelope.

    Args:
        future: Pending result of an asynchronous call

    Returns:
        The future's result
    """
    try:
        return get_unchecked(future)
    except UncheckedExecutionError as exception:
        if not isinstance(exception.cause, Exception):
            raise
        cause = exception.cause

    marker = AsyncTaskException()
    add_suppressed(cause, marker)
    cause.add_note(f"Waited on at:\n{marker.format_call_site()}")
    logger.debug(
        "async_call_failed",
        error_type=type(cause).__name__,
        error=str(cause),
    )
    # Raised outside the except block so the envelope is not chained as context
    raise cause
