"""
Field helpers shared by the call context implementations.
"""

from datetime import timedelta
from typing import AbstractSet, Any, FrozenSet, Optional

from rpccontext.rpc.interface import ApiCallContext, type_name
from rpccontext.rpc.status import StatusCode


def normalize_timeout(timeout: Optional[timedelta]) -> Optional[timedelta]:
    """Map a zero or negative timeout to None (no timeout)."""
    if timeout is not None and timeout <= timedelta(0):
        return None
    return timeout


def check_stream_timeout(timeout: Optional[timedelta]) -> Optional[timedelta]:
    """
    Validate a stream timeout.

    Raises:
        ValueError: If the timeout is negative
    """
    if timeout is not None and timeout < timedelta(0):
        raise ValueError(f"Invalid timeout: < 0 s ({timeout.total_seconds()} s)")
    return timeout


def freeze_codes(
    codes: Optional[AbstractSet[StatusCode]],
) -> Optional[FrozenSet[StatusCode]]:
    """Make an immutable copy of a retryable code set, keeping None."""
    if codes is None or isinstance(codes, frozenset):
        return codes
    return frozenset(codes)


def first_set(preferred: Any, fallback: Any) -> Any:
    """Return ``preferred`` unless it is None."""
    return fallback if preferred is None else preferred


def duration_seconds(duration: Optional[timedelta]) -> Optional[float]:
    return duration.total_seconds() if duration is not None else None


def context_to_dict(context: ApiCallContext, transport: str) -> dict:
    """
    Summarize a call context as a JSON-ready dictionary.

    Channel, credentials and tracer are reported by type name only.

    Args:
        context: Context to summarize
        transport: Transport name to report
    """
    return {
        "transport": transport,
        "channel": type_name(context.channel) if context.channel is not None else None,
        "timeout_seconds": duration_seconds(context.timeout),
        "deadline": context.deadline.isoformat() if context.deadline is not None else None,
        "credentials": (
            type_name(context.credentials) if context.credentials is not None else None
        ),
        "extra_headers": {name: list(values) for name, values in context.extra_headers.items()},
        "tracer": type(context.tracer).__name__,
        "retry_settings": (
            context.retry_settings.to_dict() if context.retry_settings is not None else None
        ),
        "retryable_codes": (
            sorted(code.value for code in context.retryable_codes)
            if context.retryable_codes is not None
            else None
        ),
    }
