"""
HTTP/JSON call context.

Carries the per-call configuration of an HTTP/JSON call: channel, timeout,
deadline, credentials, extra headers, tracer and retry policy.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import AbstractSet, Any, FrozenSet, Mapping, Optional, Sequence

import structlog

from rpccontext.config import CallContextConfig, get_config
from rpccontext.httpjson.channel import HttpJsonChannel, HttpJsonTransportChannel
from rpccontext.rpc.fields import (
    context_to_dict,
    duration_seconds,
    first_set,
    freeze_codes,
    normalize_timeout,
)
from rpccontext.rpc.headers import EMPTY_HEADERS, HeaderMap, freeze_headers, merge_headers
from rpccontext.rpc.interface import (
    ApiCallContext,
    ContextTypeMismatchError,
    TransportChannel,
    UnsupportedCapabilityError,
)
from rpccontext.rpc.retry import RetrySettings
from rpccontext.rpc.status import StatusCode
from rpccontext.rpc.tracing import ApiTracer, BaseApiTracer

logger = structlog.get_logger(__name__)

_NO_STREAMING = "Http/json transport does not support streaming"


@dataclass(frozen=True)
class HttpJsonCallContext(ApiCallContext):
    """
    Context data used to make an HTTP/JSON call.

    Instances are immutable: ``with_*`` methods return copies with one field
    changed, sharing the header mapping and the retryable code set with the
    original. Thread safety of the stored handles (channel, credentials,
    tracer) is up to those handles.

    When both ``timeout`` and ``deadline`` are set, the transport decides
    which one applies.

    Hashing skips the opaque handles (channel, credentials, tracer), so a
    context is hashable whatever those handles are.

    Attributes:
        channel: Channel to send the call over (None = client default)
        timeout: Per-call timeout, never zero or negative
        deadline: Absolute point in time the call must finish by
        credentials: Credentials to authenticate the call with
        extra_headers: Header name to values, sent in addition to the defaults
        api_tracer: Tracer set on this context, if any (see ``tracer``)
        retry_settings: Retry policy of the call
        retryable_codes: Status codes that allow a retry
    """

    channel: Optional[HttpJsonChannel] = field(default=None, hash=False)
    timeout: Optional[timedelta] = None
    deadline: Optional[datetime] = None
    credentials: Optional[Any] = field(default=None, hash=False)
    extra_headers: HeaderMap = EMPTY_HEADERS
    api_tracer: Optional[ApiTracer] = field(default=None, repr=False, hash=False)
    retry_settings: Optional[RetrySettings] = None
    retryable_codes: Optional[FrozenSet[StatusCode]] = None

    def __post_init__(self):
        """Normalize the timeout and freeze the collections."""
        if self.extra_headers is None:
            raise ValueError("extra_headers must not be None")
        object.__setattr__(self, "timeout", normalize_timeout(self.timeout))
        object.__setattr__(self, "extra_headers", freeze_headers(self.extra_headers))
        object.__setattr__(self, "retryable_codes", freeze_codes(self.retryable_codes))

    @classmethod
    def create_default(cls) -> "HttpJsonCallContext":
        """Returns an empty instance."""
        return cls()

    @classmethod
    def from_config(cls, config: Optional[CallContextConfig] = None) -> "HttpJsonCallContext":
        """
        Build the client-wide default context from configuration.

        Args:
            config: Call defaults. Uses global config if not provided.

        Returns:
            Context carrying the configured timeout, headers and retry policy
        """
        config = config or get_config()
        return (
            cls.create_default()
            .with_timeout(config.default_timeout)
            .with_extra_headers(config.default_headers)
            .with_retry_settings(config.retry_settings)
            .with_retryable_codes(set(config.retryable_codes))
        )

    def _check_same_type(self, other: ApiCallContext) -> "HttpJsonCallContext":
        if not isinstance(other, HttpJsonCallContext):
            raise ContextTypeMismatchError("HttpJsonCallContext", other)
        return other

    def null_to_self(self, other: Optional[ApiCallContext]) -> "HttpJsonCallContext":
        """
        Returns other as an HttpJsonCallContext, or this context if other is None.

        Raises:
            ContextTypeMismatchError: If other is not an HttpJsonCallContext
        """
        if other is None:
            return self
        return self._check_same_type(other)

    def merge(self, other: Optional[ApiCallContext]) -> "HttpJsonCallContext":
        """
        Merge another HTTP/JSON context on top of this one.

        Fields set on ``other`` win; headers are concatenated, this context's
        values first. The shrink-only timeout rule does not apply here.

        Raises:
            ContextTypeMismatchError: If other is not an HttpJsonCallContext
        """
        if other is None:
            return self
        other = self._check_same_type(other)

        merged = HttpJsonCallContext(
            channel=first_set(other.channel, self.channel),
            timeout=first_set(other.timeout, self.timeout),
            deadline=first_set(other.deadline, self.deadline),
            credentials=first_set(other.credentials, self.credentials),
            extra_headers=merge_headers(self.extra_headers, other.extra_headers),
            api_tracer=first_set(other.api_tracer, self.api_tracer),
            retry_settings=first_set(other.retry_settings, self.retry_settings),
            retryable_codes=first_set(other.retryable_codes, self.retryable_codes),
        )
        logger.debug(
            "call_context_merged",
            transport="httpjson",
            timeout_seconds=duration_seconds(merged.timeout),
            header_names=list(merged.extra_headers),
        )
        return merged

    def with_credentials(self, credentials: Any) -> "HttpJsonCallContext":
        return replace(self, credentials=credentials)

    def with_transport_channel(self, channel: TransportChannel) -> "HttpJsonCallContext":
        """
        Returns a copy bound to the HTTP/JSON channel of a transport channel.

        Raises:
            ValueError: If channel is None
            ContextTypeMismatchError: If channel is not an HttpJsonTransportChannel
        """
        if channel is None:
            raise ValueError("transport channel must not be None")
        if not isinstance(channel, HttpJsonTransportChannel):
            raise ContextTypeMismatchError(
                "HttpJsonTransportChannel", channel, subject="transport channel"
            )
        return self.with_channel(channel.channel)

    def with_channel(self, channel: Optional[HttpJsonChannel]) -> "HttpJsonCallContext":
        return replace(self, channel=channel)

    def with_timeout(self, timeout: Optional[timedelta]) -> "HttpJsonCallContext":
        # Retry settings use 0 for "no RPC timeout"; treat it as disabled
        timeout = normalize_timeout(timeout)

        # Prevent expanding deadlines
        if timeout is not None and self.timeout is not None and self.timeout <= timeout:
            return self

        return replace(self, timeout=timeout)

    def with_deadline(self, deadline: Optional[datetime]) -> "HttpJsonCallContext":
        return replace(self, deadline=deadline)

    @property
    def stream_wait_timeout(self) -> Optional[timedelta]:
        raise UnsupportedCapabilityError(_NO_STREAMING)

    def with_stream_wait_timeout(self, timeout: Optional[timedelta]) -> "HttpJsonCallContext":
        raise UnsupportedCapabilityError(_NO_STREAMING)

    @property
    def stream_idle_timeout(self) -> Optional[timedelta]:
        raise UnsupportedCapabilityError(_NO_STREAMING)

    def with_stream_idle_timeout(self, timeout: Optional[timedelta]) -> "HttpJsonCallContext":
        raise UnsupportedCapabilityError(_NO_STREAMING)

    def with_extra_headers(
        self,
        extra_headers: Mapping[str, Sequence[str]],
    ) -> "HttpJsonCallContext":
        """Returns a copy with the given header values appended."""
        if extra_headers is None:
            raise ValueError("extra_headers must not be None")
        return replace(self, extra_headers=merge_headers(self.extra_headers, extra_headers))

    @property
    def tracer(self) -> ApiTracer:
        if self.api_tracer is None:
            return BaseApiTracer.get_instance()
        return self.api_tracer

    def with_tracer(self, tracer: ApiTracer) -> "HttpJsonCallContext":
        if tracer is None:
            raise ValueError("tracer must not be None")
        return replace(self, api_tracer=tracer)

    def with_retry_settings(
        self,
        retry_settings: Optional[RetrySettings],
    ) -> "HttpJsonCallContext":
        return replace(self, retry_settings=retry_settings)

    def with_retryable_codes(
        self,
        retryable_codes: Optional[AbstractSet[StatusCode]],
    ) -> "HttpJsonCallContext":
        return replace(self, retryable_codes=retryable_codes)

    def to_dict(self) -> dict:
        """Convert to dictionary for diagnostics."""
        return context_to_dict(self, transport="httpjson")
