"""
Abstract interface for per-call contexts.

Defines the capability contract that every transport-specific call context
must implement, plus the transport channel handle and the errors raised
when a context is combined with a foreign transport.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, AbstractSet, Mapping, Optional, Sequence, Tuple

from rpccontext.rpc.retry import RetrySettings
from rpccontext.rpc.status import StatusCode
from rpccontext.rpc.tracing import ApiTracer


class TransportChannel(ABC):
    """
    Handle to the logical connection a call is sent over.

    Each transport provides its own subtype; a call context only accepts
    the channel type of its own transport.
    """

    @property
    @abstractmethod
    def transport_name(self) -> str:
        """Name of the transport this channel belongs to."""
        pass

    @abstractmethod
    def empty_call_context(self) -> "ApiCallContext":
        """
        Get an empty call context for this transport.

        Returns:
            A context with every field unset, bound to this channel
        """
        pass


class ApiCallContext(ABC):
    """
    Immutable context data for a single remote call.

    Implementations never modify themselves: every ``with_*`` method returns
    a new context (or the receiver, when nothing changes). Two contexts of
    the same transport combine through ``merge``, where the argument wins
    field by field and headers are concatenated.

    Concrete contexts expose ``timeout``, ``deadline``, ``credentials``,
    ``extra_headers``, ``retry_settings`` and ``retryable_codes`` as plain
    read-only attributes.
    """

    timeout: Optional[timedelta]
    deadline: Optional[datetime]
    credentials: Optional[Any]
    extra_headers: Mapping[str, Tuple[str, ...]]
    retry_settings: Optional[RetrySettings]
    retryable_codes: Optional[AbstractSet[StatusCode]]

    @classmethod
    @abstractmethod
    def create_default(cls) -> "ApiCallContext":
        """Create a context with every field unset and no extra headers."""
        pass

    @abstractmethod
    def with_credentials(self, credentials: Any) -> "ApiCallContext":
        """Return a copy using the given credentials."""
        pass

    @abstractmethod
    def with_transport_channel(self, channel: TransportChannel) -> "ApiCallContext":
        """
        Return a copy bound to the channel wrapped by a transport channel.

        Raises:
            ContextTypeMismatchError: If the channel belongs to another transport
        """
        pass

    @abstractmethod
    def with_timeout(self, timeout: Optional[timedelta]) -> "ApiCallContext":
        """
        Return a copy with the given per-call timeout.

        A zero or negative timeout disables the timeout. A timeout that is
        not shorter than the one already set is ignored and the receiver is
        returned, so timeouts only ever shrink along a call chain.
        """
        pass

    @abstractmethod
    def with_deadline(self, deadline: Optional[datetime]) -> "ApiCallContext":
        """Return a copy with the given absolute deadline."""
        pass

    @property
    @abstractmethod
    def stream_wait_timeout(self) -> Optional[timedelta]:
        """
        Maximum time to wait for the next message on a stream.

        Raises:
            UnsupportedCapabilityError: If the transport has no streaming
        """
        pass

    @abstractmethod
    def with_stream_wait_timeout(self, timeout: Optional[timedelta]) -> "ApiCallContext":
        """Return a copy with the given stream wait timeout."""
        pass

    @property
    @abstractmethod
    def stream_idle_timeout(self) -> Optional[timedelta]:
        """
        Maximum time a stream may sit without any activity.

        Raises:
            UnsupportedCapabilityError: If the transport has no streaming
        """
        pass

    @abstractmethod
    def with_stream_idle_timeout(self, timeout: Optional[timedelta]) -> "ApiCallContext":
        """Return a copy with the given stream idle timeout."""
        pass

    @abstractmethod
    def with_extra_headers(
        self,
        extra_headers: Mapping[str, Sequence[str]],
    ) -> "ApiCallContext":
        """
        Return a copy whose headers also carry the given values.

        Values are appended after any values already present for a key.
        """
        pass

    @property
    @abstractmethod
    def tracer(self) -> ApiTracer:
        """The tracer for this call; never None."""
        pass

    @abstractmethod
    def with_tracer(self, tracer: ApiTracer) -> "ApiCallContext":
        """Return a copy reporting to the given tracer."""
        pass

    @abstractmethod
    def with_retry_settings(
        self,
        retry_settings: Optional[RetrySettings],
    ) -> "ApiCallContext":
        """Return a copy with the given retry settings."""
        pass

    @abstractmethod
    def with_retryable_codes(
        self,
        retryable_codes: Optional[AbstractSet[StatusCode]],
    ) -> "ApiCallContext":
        """Return a copy with the given set of retryable status codes."""
        pass

    @abstractmethod
    def null_to_self(self, other: Optional["ApiCallContext"]) -> "ApiCallContext":
        """
        Return ``other``, or the receiver when ``other`` is None.

        Raises:
            ContextTypeMismatchError: If other is a different transport's context
        """
        pass

    @abstractmethod
    def merge(self, other: Optional["ApiCallContext"]) -> "ApiCallContext":
        """
        Combine with another context of the same transport.

        Every field set on ``other`` overrides the receiver's value; extra
        headers are concatenated key by key, receiver's values first.

        Raises:
            ContextTypeMismatchError: If other is a different transport's context
        """
        pass


def type_name(value: Any) -> str:
    """Get the qualified class name of a value for error messages."""
    cls = type(value)
    return f"{cls.__module__}.{cls.__qualname__}"


class ContextTypeMismatchError(TypeError):
    """Raised when a context or channel of another transport is supplied."""

    def __init__(self, expected: str, found: Any, subject: str = "context"):
        super().__init__(
            f"{subject} must be an instance of {expected}, but found {type_name(found)}"
        )
        self.expected = expected
        self.found_type = type(found)


class UnsupportedCapabilityError(NotImplementedError):
    """Raised when a transport does not support a context capability."""
    pass
