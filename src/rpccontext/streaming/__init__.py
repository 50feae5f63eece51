"""
Streaming transport context.

Call context and channel handles for transports that support streaming
calls, adding stream wait and idle timeouts to the common context fields.
"""

from rpccontext.streaming.channel import StreamingChannel, StreamingTransportChannel
from rpccontext.streaming.context import StreamingCallContext

__all__ = [
    "StreamingChannel",
    "StreamingTransportChannel",
    "StreamingCallContext",
]
