"""
Transport-independent call abstractions.

Provides the call context contract, the handle types a context carries
(status codes, retry settings, tracers, headers) and the translation of
asynchronous call failures.
"""

from rpccontext.rpc.exceptions import (
    AsyncTaskException,
    UncheckedExecutionError,
    call_and_translate_api_exception,
)
from rpccontext.rpc.headers import merge_headers
from rpccontext.rpc.interface import (
    ApiCallContext,
    ContextTypeMismatchError,
    TransportChannel,
    UnsupportedCapabilityError,
)
from rpccontext.rpc.retry import RetrySettings
from rpccontext.rpc.status import StatusCode
from rpccontext.rpc.tracing import ApiTracer, BaseApiTracer, LoggingApiTracer

__all__ = [
    "ApiCallContext",
    "TransportChannel",
    "ContextTypeMismatchError",
    "UnsupportedCapabilityError",
    "StatusCode",
    "RetrySettings",
    "ApiTracer",
    "BaseApiTracer",
    "LoggingApiTracer",
    "merge_headers",
    "AsyncTaskException",
    "UncheckedExecutionError",
    "call_and_translate_api_exception",
]
