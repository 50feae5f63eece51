"""
RPC Call Context

Per-invocation configuration for generated RPC clients. A call context
carries the channel, timeout, deadline, credentials, headers, tracer and
retry policy of one remote call, and merges call-site overrides on top of
client-wide defaults.
"""

__version__ = "0.1.0"

from rpccontext.batching.context import BatchedCallContext, MissingFieldError
from rpccontext.httpjson.context import HttpJsonCallContext
from rpccontext.rpc.exceptions import AsyncTaskException, call_and_translate_api_exception
from rpccontext.rpc.interface import (
    ApiCallContext,
    ContextTypeMismatchError,
    UnsupportedCapabilityError,
)
from rpccontext.streaming.context import StreamingCallContext

__all__ = [
    "ApiCallContext",
    "HttpJsonCallContext",
    "StreamingCallContext",
    "BatchedCallContext",
    "ContextTypeMismatchError",
    "UnsupportedCapabilityError",
    "MissingFieldError",
    "AsyncTaskException",
    "call_and_translate_api_exception",
]
