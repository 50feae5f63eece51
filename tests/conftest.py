"""
Pytest configuration and shared fixtures for the test suite.
"""

from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from rpccontext.config import CallContextConfig, set_config
from rpccontext.httpjson.channel import HttpJsonChannel, HttpJsonTransportChannel
from rpccontext.httpjson.context import HttpJsonCallContext
from rpccontext.rpc.retry import RetrySettings
from rpccontext.rpc.status import StatusCode
from rpccontext.rpc.tracing import ApiTracer
from rpccontext.streaming.channel import StreamingChannel, StreamingTransportChannel
from rpccontext.streaming.context import StreamingCallContext


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_global_config():
    """Make sure no test sees another test's global configuration."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def test_config() -> CallContextConfig:
    """Create a test configuration."""
    return CallContextConfig(
        default_timeout_seconds=30,
        default_headers={"x-api-client": ["rpc-context/0.1.0"]},
        retry_total_timeout_seconds=120,
        retry_initial_delay_seconds=0.5,
        retry_delay_multiplier=2.0,
        retry_max_delay_seconds=10,
        retry_max_attempts=5,
        retry_initial_rpc_timeout_seconds=20,
        retry_max_rpc_timeout_seconds=30,
        retryable_codes=[StatusCode.UNAVAILABLE],
        log_level="DEBUG",
    )


# ============================================================================
# Fake Transport Handles
# ============================================================================

class FakeHttpJsonChannel(HttpJsonChannel):
    """HTTP/JSON channel that never sends anything."""

    def __init__(self, endpoint: str = "https://example.test"):
        self._endpoint = endpoint

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def __repr__(self) -> str:
        return f"FakeHttpJsonChannel({self._endpoint!r})"


class FakeStreamingChannel(StreamingChannel):
    """Streaming channel that never sends anything."""

    def __init__(self, target: str = "example.test:443"):
        self._target = target

    @property
    def target(self) -> str:
        return self._target


class FakeCredentials:
    """Opaque credentials handle."""

    def __init__(self, token: str):
        self.token = token

    def __repr__(self) -> str:
        return f"FakeCredentials({self.token!r})"


class RecordingTracer(ApiTracer):
    """Tracer that records the names of the hooks called."""

    def __init__(self):
        self.events: List[str] = []

    def attempt_started(self, attempt_number: int) -> None:
        self.events.append(f"attempt_started:{attempt_number}")

    def operation_succeeded(self) -> None:
        self.events.append("operation_succeeded")


@pytest.fixture
def http_channel() -> FakeHttpJsonChannel:
    return FakeHttpJsonChannel()


@pytest.fixture
def http_transport_channel(http_channel) -> HttpJsonTransportChannel:
    return HttpJsonTransportChannel(http_channel)


@pytest.fixture
def streaming_channel() -> FakeStreamingChannel:
    return FakeStreamingChannel()


@pytest.fixture
def streaming_transport_channel(streaming_channel) -> StreamingTransportChannel:
    return StreamingTransportChannel(streaming_channel)


@pytest.fixture
def retry_settings() -> RetrySettings:
    return RetrySettings(
        total_timeout=timedelta(seconds=60),
        initial_retry_delay=timedelta(milliseconds=100),
        retry_delay_multiplier=1.5,
        max_retry_delay=timedelta(seconds=5),
        max_attempts=4,
        initial_rpc_timeout=timedelta(seconds=10),
        max_rpc_timeout=timedelta(seconds=10),
    )


# ============================================================================
# Sample Contexts
# ============================================================================

@pytest.fixture
def deadline() -> datetime:
    return datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def full_http_context(http_channel, retry_settings, deadline) -> HttpJsonCallContext:
    """Create an HTTP/JSON context with every field set."""
    return (
        HttpJsonCallContext.create_default()
        .with_channel(http_channel)
        .with_timeout(timedelta(seconds=20))
        .with_deadline(deadline)
        .with_credentials(FakeCredentials("base"))
        .with_extra_headers({"x-goog-request-params": ["name=a"], "x-base": ["1"]})
        .with_tracer(RecordingTracer())
        .with_retry_settings(retry_settings)
        .with_retryable_codes({StatusCode.UNAVAILABLE, StatusCode.DEADLINE_EXCEEDED})
    )


@pytest.fixture
def full_streaming_context(streaming_channel, retry_settings, deadline) -> StreamingCallContext:
    """Create a streaming context with every field set."""
    return (
        StreamingCallContext.create_default()
        .with_channel(streaming_channel)
        .with_timeout(timedelta(seconds=20))
        .with_deadline(deadline)
        .with_credentials(FakeCredentials("base"))
        .with_extra_headers({"x-base": ["1"]})
        .with_tracer(RecordingTracer())
        .with_retry_settings(retry_settings)
        .with_retryable_codes({StatusCode.UNAVAILABLE})
        .with_stream_wait_timeout(timedelta(seconds=3))
        .with_stream_idle_timeout(timedelta(seconds=30))
    )
