# =============================================================================
# File: chainzmq/infra/transport/zmq_adapter.py
# Description: pyzmq PUB socket transport
# =============================================================================
"""
ZeroMQ transport adapter.

One zmq.Context per adapter, one PUB socket per registry endpoint.
All calls are synchronous; a PUB socket never blocks on send (messages
past the high water mark are dropped by libzmq).
"""

import logging
from typing import List, Optional, Sequence

import zmq

from chainzmq.common.exceptions.exceptions import (
    TransportBindError,
    TransportSendError,
    TransportUnbindError,
)
from chainzmq.config.zmq_config import ZmqConfig, get_zmq_config
from chainzmq.infra.transport.transport_adapter import HealthCheck, PubSocket, TransportAdapter

log = logging.getLogger("chainzmq.transport.zmq")


class ZmqPubSocket(PubSocket):
    """PubSocket backed by a zmq.PUB socket"""

    def __init__(self, socket: zmq.Socket):
        self._socket = socket
        self._address: Optional[str] = None
        self._bound_endpoint: Optional[str] = None

    @property
    def bound_endpoint(self) -> Optional[str]:
        return self._bound_endpoint

    @property
    def closed(self) -> bool:
        return self._socket.closed

    def bind(self, address: str) -> str:
        try:
            self._socket.bind(address)
        except zmq.ZMQError as e:
            raise TransportBindError(address, str(e)) from e

        # tcp://*:28332 binds as tcp://0.0.0.0:28332; unbind needs the latter
        self._address = address
        self._bound_endpoint = self._socket.getsockopt_string(zmq.LAST_ENDPOINT) or address
        log.debug(f"PUB socket bound to {self._bound_endpoint} (requested {address})")
        return self._bound_endpoint

    def unbind(self) -> None:
        if self._bound_endpoint is None:
            return

        try:
            self._socket.unbind(self._bound_endpoint)
        except zmq.ZMQError as e:
            raise TransportUnbindError(self._address or self._bound_endpoint, str(e)) from e

        log.debug(f"PUB socket unbound from {self._bound_endpoint}")
        self._bound_endpoint = None

    def send_multipart(self, frames: Sequence[bytes]) -> None:
        try:
            self._socket.send_multipart(frames, copy=False)
        except zmq.ZMQError as e:
            raise TransportSendError(TransportAdapter.describe(self._address), str(e)) from e

    def close(self, linger: Optional[int] = None) -> None:
        if not self._socket.closed:
            self._socket.close(linger=linger)


class ZmqTransport(TransportAdapter):
    """
    ZeroMQ transport adapter.

    Example Usage:
        ```python
        transport = ZmqTransport()
        socket = transport.create_pub_socket()
        socket.bind("tcp://127.0.0.1:28332")
        socket.send_multipart([b"hashtx", tx_hash])
        transport.close()
        ```
    """

    def __init__(
            self,
            config: Optional[ZmqConfig] = None,
            context: Optional[zmq.Context] = None,
    ):
        self._config = config or get_zmq_config()
        self._owns_context = context is None
        self._context = context or zmq.Context()
        self._sockets: List[ZmqPubSocket] = []
        self._closed = False

    @property
    def context(self) -> zmq.Context:
        return self._context

    def create_pub_socket(self) -> ZmqPubSocket:
        socket = self._context.socket(zmq.PUB)
        socket.setsockopt(zmq.SNDHWM, self._config.send_hwm)
        socket.setsockopt(zmq.LINGER, self._config.linger_ms)
        if self._config.ipv6:
            socket.setsockopt(zmq.IPV6, 1)

        pub_socket = ZmqPubSocket(socket)
        self._sockets.append(pub_socket)
        return pub_socket

    def close(self) -> None:
        if self._closed:
            return

        for pub_socket in self._sockets:
            pub_socket.close(linger=self._config.linger_ms)
        self._sockets.clear()

        if self._owns_context:
            self._context.term()
        self._closed = True
        log.info("ZeroMQ transport closed")

    def health_check(self) -> HealthCheck:
        bound = [s.bound_endpoint for s in self._sockets if s.bound_endpoint]
        return HealthCheck(
            is_healthy=not self._closed and not self._context.closed,
            details={
                "zmq_version": zmq.zmq_version(),
                "sockets": len(self._sockets),
                "bound_endpoints": bound,
            },
        )
