"""
Test suite for the streaming-capable call context.

Focuses on what differs from the HTTP/JSON context: the stream timeouts and
the refusal to mix transports.
"""

from datetime import timedelta

import pytest

from rpccontext.httpjson.context import HttpJsonCallContext
from rpccontext.rpc.interface import ContextTypeMismatchError
from rpccontext.rpc.status import StatusCode
from rpccontext.rpc.tracing import BaseApiTracer
from rpccontext.streaming.context import StreamingCallContext

from tests.conftest import FakeCredentials, FakeStreamingChannel, RecordingTracer


class TestStreamTimeouts:
    """Tests for the stream wait and idle timeouts."""

    def test_unset_by_default(self):
        context = StreamingCallContext.create_default()

        assert context.stream_wait_timeout is None
        assert context.stream_idle_timeout is None

    def test_with_stream_wait_timeout(self):
        context = StreamingCallContext.create_default().with_stream_wait_timeout(
            timedelta(seconds=2)
        )

        assert context.stream_wait_timeout == timedelta(seconds=2)
        assert context.with_stream_wait_timeout(None).stream_wait_timeout is None

    def test_with_stream_idle_timeout(self):
        context = StreamingCallContext.create_default().with_stream_idle_timeout(
            timedelta(minutes=1)
        )

        assert context.stream_idle_timeout == timedelta(minutes=1)

    def test_stream_timeouts_may_grow(self):
        """Test that the shrink-only rule only covers the call timeout."""
        context = StreamingCallContext.create_default().with_stream_wait_timeout(
            timedelta(seconds=2)
        )

        assert context.with_stream_wait_timeout(
            timedelta(seconds=20)
        ).stream_wait_timeout == timedelta(seconds=20)

    @pytest.mark.parametrize("method", ["with_stream_wait_timeout", "with_stream_idle_timeout"])
    def test_negative_stream_timeout_rejected(self, method):
        context = StreamingCallContext.create_default()

        with pytest.raises(ValueError, match="Invalid timeout"):
            getattr(context, method)(timedelta(seconds=-1))

    def test_zero_stream_timeout_allowed(self):
        context = StreamingCallContext.create_default().with_stream_idle_timeout(timedelta(0))

        assert context.stream_idle_timeout == timedelta(0)


class TestCallTimeout:
    """Tests that the shrink-only rule holds for this transport too."""

    def test_shrink_only(self):
        context = StreamingCallContext.create_default().with_timeout(timedelta(seconds=10))

        assert context.with_timeout(timedelta(seconds=30)) is context
        assert context.with_timeout(timedelta(seconds=3)).timeout == timedelta(seconds=3)
        assert context.with_timeout(timedelta(seconds=-1)).timeout is None


class TestStreamingMerge:
    """Tests for merge and null_to_self on streaming contexts."""

    def test_merge_none_is_identity(self, full_streaming_context):
        assert full_streaming_context.merge(None) is full_streaming_context

    def test_merge_keeps_receiver_values(self, full_streaming_context):
        merged = full_streaming_context.merge(StreamingCallContext.create_default())

        assert merged == full_streaming_context

    def test_hashable_with_unhashable_credentials(self, full_streaming_context):
        context = full_streaming_context.with_credentials({"token": "abc"})

        assert hash(context) == hash(context.with_credentials({"token": "abc"}))

    def test_override_wins(self, full_streaming_context):
        override = (
            StreamingCallContext.create_default()
            .with_channel(FakeStreamingChannel("override.test:443"))
            .with_credentials(FakeCredentials("override"))
            .with_tracer(RecordingTracer())
            .with_retryable_codes({StatusCode.ABORTED})
            .with_stream_wait_timeout(timedelta(seconds=9))
            .with_stream_idle_timeout(timedelta(seconds=90))
        )

        merged = full_streaming_context.merge(override)

        assert merged.channel is override.channel
        assert merged.credentials is override.credentials
        assert merged.tracer is override.tracer
        assert merged.retryable_codes == frozenset({StatusCode.ABORTED})
        assert merged.stream_wait_timeout == timedelta(seconds=9)
        assert merged.stream_idle_timeout == timedelta(seconds=90)
        assert merged.timeout == full_streaming_context.timeout
        assert merged.deadline == full_streaming_context.deadline

    def test_headers_concatenate(self, full_streaming_context):
        override = StreamingCallContext.create_default().with_extra_headers(
            {"x-base": ["2"], "x-new": ["n"]}
        )

        merged = full_streaming_context.merge(override)

        assert merged.extra_headers == {"x-base": ("1", "2"), "x-new": ("n",)}

    def test_cross_transport_merge_rejected(self, full_streaming_context, full_http_context):
        """Test that neither transport accepts the other's context."""
        with pytest.raises(ContextTypeMismatchError):
            full_streaming_context.merge(full_http_context)
        with pytest.raises(ContextTypeMismatchError):
            full_http_context.merge(full_streaming_context)
        with pytest.raises(ContextTypeMismatchError):
            full_streaming_context.null_to_self(HttpJsonCallContext.create_default())

    def test_null_to_self(self, full_streaming_context):
        other = StreamingCallContext.create_default()

        assert full_streaming_context.null_to_self(None) is full_streaming_context
        assert full_streaming_context.null_to_self(other) is other


class TestStreamingChannel:
    """Tests for the streaming transport channel."""

    def test_with_transport_channel(self, streaming_channel, streaming_transport_channel):
        context = StreamingCallContext.create_default().with_transport_channel(
            streaming_transport_channel
        )

        assert context.channel is streaming_channel
        assert streaming_transport_channel.transport_name == "streaming"

    def test_foreign_transport_channel_rejected(self, http_transport_channel):
        with pytest.raises(ContextTypeMismatchError, match="HttpJsonTransportChannel"):
            StreamingCallContext.create_default().with_transport_channel(http_transport_channel)

    def test_empty_call_context(self, streaming_channel, streaming_transport_channel):
        context = streaming_transport_channel.empty_call_context()

        assert context.channel is streaming_channel
        assert context.tracer is BaseApiTracer.get_instance()


class TestStreamingFromConfig:

    def test_from_config(self, test_config):
        context = StreamingCallContext.from_config(test_config)

        assert context.timeout == timedelta(seconds=30)
        assert context.stream_wait_timeout is None
        assert context.retry_settings.max_attempts == 5

    def test_to_dict_includes_stream_timeouts(self, full_streaming_context):
        data = full_streaming_context.to_dict()

        assert data["transport"] == "streaming"
        assert data["stream_wait_timeout_seconds"] == 3.0
        assert data["stream_idle_timeout_seconds"] == 30.0
