"""
HTTP/JSON transport context.

Call context and channel handles for calls made over HTTP with JSON
payloads. This transport has no streaming support.
"""

from rpccontext.httpjson.channel import HttpJsonChannel, HttpJsonTransportChannel
from rpccontext.httpjson.context import HttpJsonCallContext

__all__ = [
    "HttpJsonChannel",
    "HttpJsonTransportChannel",
    "HttpJsonCallContext",
]
