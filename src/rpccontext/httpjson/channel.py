"""
HTTP/JSON channel handles.

The channel that actually performs HTTP requests belongs to the transport
layer; here it is only an opaque handle a call context can point at.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from rpccontext.rpc.interface import TransportChannel


class HttpJsonChannel(ABC):
    """Opaque handle to an HTTP/JSON connection."""

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Base URL the channel sends requests to."""
        pass


@dataclass(frozen=True)
class HttpJsonTransportChannel(TransportChannel):
    """Transport channel wrapping an HTTP/JSON channel."""

    channel: HttpJsonChannel

    @property
    def transport_name(self) -> str:
        return "httpjson"

    def empty_call_context(self) -> "HttpJsonCallContext":
        from rpccontext.httpjson.context import HttpJsonCallContext

        return HttpJsonCallContext.create_default().with_channel(self.channel)
