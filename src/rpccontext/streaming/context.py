"""
Streaming-capable call context.

Same contract as the HTTP/JSON context, plus the two stream timeouts that
only transports with streaming calls understand.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import AbstractSet, Any, FrozenSet, Mapping, Optional, Sequence

import structlog

from rpccontext.config import CallContextConfig, get_config
from rpccontext.rpc.fields import (
    check_stream_timeout,
    context_to_dict,
    duration_seconds,
    first_set,
    freeze_codes,
    normalize_timeout,
)
from rpccontext.rpc.headers import EMPTY_HEADERS, HeaderMap, freeze_headers, merge_headers
from rpccontext.rpc.interface import ApiCallContext, ContextTypeMismatchError, TransportChannel
from rpccontext.rpc.retry import RetrySettings
from rpccontext.rpc.status import StatusCode
from rpccontext.rpc.tracing import ApiTracer, BaseApiTracer
from rpccontext.streaming.channel import StreamingChannel, StreamingTransportChannel

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StreamingCallContext(ApiCallContext):
    """
    Context data used to make a call on a streaming-capable transport.

    Hashing skips the opaque handles (channel, credentials, tracer).

    Attributes:
        channel: Channel to send the call over (None = client default)
        timeout: Per-call timeout, never zero or negative
        deadline: Absolute point in time the call must finish by
        credentials: Credentials to authenticate the call with
        extra_headers: Header name to values, sent in addition to the defaults
        api_tracer: Tracer set on this context, if any (see ``tracer``)
        retry_settings: Retry policy of the call
        retryable_codes: Status codes that allow a retry
        stream_wait_timeout: Maximum wait for the next message of a stream
        stream_idle_timeout: Maximum time a stream may sit idle
    """

    channel: Optional[StreamingChannel] = field(default=None, hash=False)
    timeout: Optional[timedelta] = None
    deadline: Optional[datetime] = None
    credentials: Optional[Any] = field(default=None, hash=False)
    extra_headers: HeaderMap = EMPTY_HEADERS
    api_tracer: Optional[ApiTracer] = field(default=None, repr=False, hash=False)
    retry_settings: Optional[RetrySettings] = None
    retryable_codes: Optional[FrozenSet[StatusCode]] = None
    stream_wait_timeout: Optional[timedelta] = None
    stream_idle_timeout: Optional[timedelta] = None

    def __post_init__(self):
        if self.extra_headers is None:
            raise ValueError("extra_headers must not be None")
        object.__setattr__(self, "timeout", normalize_timeout(self.timeout))
        object.__setattr__(self, "extra_headers", freeze_headers(self.extra_headers))
        object.__setattr__(self, "retryable_codes", freeze_codes(self.retryable_codes))
        check_stream_timeout(self.stream_wait_timeout)
        check_stream_timeout(self.stream_idle_timeout)

    @classmethod
    def create_default(cls) -> "StreamingCallContext":
        """Returns an empty instance."""
        return cls()

    @classmethod
    def from_config(cls, config: Optional[CallContextConfig] = None) -> "StreamingCallContext":
        """Build the client-wide default context from configuration."""
        config = config or get_config()
        return (
            cls.create_default()
            .with_timeout(config.default_timeout)
            .with_extra_headers(config.default_headers)
            .with_retry_settings(config.retry_settings)
            .with_retryable_codes(set(config.retryable_codes))
        )

    def _check_same_type(self, other: ApiCallContext) -> "StreamingCallContext":
        if not isinstance(other, StreamingCallContext):
            raise ContextTypeMismatchError("StreamingCallContext", other)
        return other

    def null_to_self(self, other: Optional[ApiCallContext]) -> "StreamingCallContext":
        if other is None:
            return self
        return self._check_same_type(other)

    def merge(self, other: Optional[ApiCallContext]) -> "StreamingCallContext":
        """
        Merge another streaming context on top of this one.

        Same rules as the HTTP/JSON context; the stream timeouts are plain
        overrides as well.
        """
        if other is None:
            return self
        other = self._check_same_type(other)

        merged = StreamingCallContext(
            channel=first_set(other.channel, self.channel),
            timeout=first_set(other.timeout, self.timeout),
            deadline=first_set(other.deadline, self.deadline),
            credentials=first_set(other.credentials, self.credentials),
            extra_headers=merge_headers(self.extra_headers, other.extra_headers),
            api_tracer=first_set(other.api_tracer, self.api_tracer),
            retry_settings=first_set(other.retry_settings, self.retry_settings),
            retryable_codes=first_set(other.retryable_codes, self.retryable_codes),
            stream_wait_timeout=first_set(other.stream_wait_timeout, self.stream_wait_timeout),
            stream_idle_timeout=first_set(other.stream_idle_timeout, self.stream_idle_timeout),
        )
        logger.debug(
            "call_context_merged",
            transport="streaming",
            timeout_seconds=duration_seconds(merged.timeout),
            header_names=list(merged.extra_headers),
        )
        return merged

    def with_credentials(self, credentials: Any) -> "StreamingCallContext":
        return replace(self, credentials=credentials)

    def with_transport_channel(self, channel: TransportChannel) -> "StreamingCallContext":
        if channel is None:
            raise ValueError("transport channel must not be None")
        if not isinstance(channel, StreamingTransportChannel):
            raise ContextTypeMismatchError(
                "StreamingTransportChannel", channel, subject="transport channel"
            )
        return self.with_channel(channel.channel)

    def with_channel(self, channel: Optional[StreamingChannel]) -> "StreamingCallContext":
        return replace(self, channel=channel)

    def with_timeout(self, timeout: Optional[timedelta]) -> "StreamingCallContext":
        timeout = normalize_timeout(timeout)

        # Prevent expanding deadlines
        if timeout is not None and self.timeout is not None and self.timeout <= timeout:
            return self

        return replace(self, timeout=timeout)

    def with_deadline(self, deadline: Optional[datetime]) -> "StreamingCallContext":
        return replace(self, deadline=deadline)

    def with_stream_wait_timeout(self, timeout: Optional[timedelta]) -> "StreamingCallContext":
        """
        Returns a copy with the given stream wait timeout (None disables it).

        Raises:
            ValueError: If the timeout is negative
        """
        return replace(self, stream_wait_timeout=check_stream_timeout(timeout))

    def with_stream_idle_timeout(self, timeout: Optional[timedelta]) -> "StreamingCallContext":
        """
        Returns a copy with the given stream idle timeout (None disables it).

        Raises:
            ValueError: If the timeout is negative
        """
        return replace(self, stream_idle_timeout=check_stream_timeout(timeout))

    def with_extra_headers(
        self,
        extra_headers: Mapping[str, Sequence[str]],
    ) -> "StreamingCallContext":
        if extra_headers is None:
            raise ValueError("extra_headers must not be None")
        return replace(self, extra_headers=merge_headers(self.extra_headers, extra_headers))

    @property
    def tracer(self) -> ApiTracer:
        if self.api_tracer is None:
            return BaseApiTracer.get_instance()
        return self.api_tracer

    def with_tracer(self, tracer: ApiTracer) -> "StreamingCallContext":
        if tracer is None:
            raise ValueError("tracer must not be None")
        return replace(self, api_tracer=tracer)

    def with_retry_settings(
        self,
        retry_settings: Optional[RetrySettings],
    ) -> "StreamingCallContext":
        return replace(self, retry_settings=retry_settings)

    def with_retryable_codes(
        self,
        retryable_codes: Optional[AbstractSet[StatusCode]],
    ) -> "StreamingCallContext":
        return replace(self, retryable_codes=retryable_codes)

    def to_dict(self) -> dict:
        """Convert to dictionary for diagnostics."""
        data = context_to_dict(self, transport="streaming")
        data["stream_wait_timeout_seconds"] = duration_seconds(self.stream_wait_timeout)
        data["stream_idle_timeout_seconds"] = duration_seconds(self.stream_idle_timeout)
        return data
