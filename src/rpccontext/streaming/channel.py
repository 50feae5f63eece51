"""
Streaming channel handles.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from rpccontext.rpc.interface import TransportChannel


class StreamingChannel(ABC):
    """Opaque handle to a connection that supports streaming calls."""

    @property
    @abstractmethod
    def target(self) -> str:
        """Address the channel is connected to."""
        pass


@dataclass(frozen=True)
class StreamingTransportChannel(TransportChannel):
    """Transport channel wrapping a streaming channel."""

    channel: StreamingChannel

    @property
    def transport_name(self) -> str:
        return "streaming"

    def empty_call_context(self) -> "StreamingCallContext":
        from rpccontext.streaming.context import StreamingCallContext

        return StreamingCallContext.create_default().with_channel(self.channel)
