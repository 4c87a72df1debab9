# =============================================================================
# File: chainzmq/infra/transport/transport_adapter.py
# Description: Abstract adapter interface for pub/sub publishing sockets
# =============================================================================
"""
Abstract transport adapter for the endpoint registry.

The registry only needs four things from a transport:
- create a publishing socket
- bind / unbind that socket to an address
- send one multi-frame message atomically

Everything else (framing, socket options, wire protocol) stays inside the
concrete adapter (see zmq_adapter.py).
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, NamedTuple, Optional, Sequence


class HealthCheck(NamedTuple):
    """Health check information for transport adapters"""
    is_healthy: bool
    details: Dict[str, Any]


class PubSocket(ABC):
    """
    A single publishing socket owned by one registry endpoint.

    Implementations raise TransportBindError / TransportUnbindError /
    TransportSendError from chainzmq.common.exceptions.exceptions.
    """

    @abstractmethod
    def bind(self, address: str) -> str:
        """
        Bind synchronously to ``address``.

        Returns the concrete endpoint actually bound (wildcards resolved).
        """

    @abstractmethod
    def unbind(self) -> None:
        """Unbind from the endpoint returned by the last bind()."""

    @abstractmethod
    def send_multipart(self, frames: Sequence[bytes]) -> None:
        """
        Send all frames as a single message.
        Subscribers must see either every frame or none of them.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the socket. It cannot be used afterwards."""


class TransportAdapter(ABC):
    """
    Abstract base transport adapter: a factory and owner of PubSockets.
    """

    @abstractmethod
    def create_pub_socket(self) -> PubSocket:
        """Create a new, unbound publishing socket."""

    @abstractmethod
    def close(self) -> None:
        """
        Close every socket created by this adapter and release the
        underlying transport resources.
        """

    def health_check(self) -> HealthCheck:
        """
        Check the health of the underlying transport.
        Default implementation assumes health if no override.
        """
        return HealthCheck(is_healthy=True, details={"status": "default implementation"})

    @staticmethod
    def describe(address: Optional[str]) -> str:
        """Short printable form of an address for logs."""
        return address or "<unbound>"
