# =============================================================================
# File: chainzmq/infra/transport/endpoint_registry.py
# Description: Topic -> endpoint multiplexer with bind/unbind lifecycle
# =============================================================================
"""
EndpointRegistry - maps topic names onto publishing endpoints.

Architecture:
    register("hashblock", "tcp://*:28332") ─┐
    register("rawblock",  "tcp://*:28332") ─┼─> Endpoint(tcp://*:28332) -> PUB socket
    register("hashtx",    "tcp://*:28333") ───> Endpoint(tcp://*:28333) -> PUB socket

Topics sharing an address share one socket; the topic frame tells
subscribers apart. The registry knows nothing about blocks or transactions.

Lifecycle policy:
- open() is all-or-nothing: if any bind fails, endpoints bound by that call
  are unbound again before the bind error is re-raised.
- close() is best-effort: every bound endpoint is attempted, the first
  unbind error is raised after the loop.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from chainzmq.common.exceptions.exceptions import (
    ConfigurationError,
    DuplicateTopicError,
    TransportError,
    TransportSendError,
    TransportUnbindError,
)
from chainzmq.infra.metrics.publisher_metrics import (
    bytes_published_total,
    endpoints_bound,
    messages_published_total,
    transport_errors_total,
)
from chainzmq.infra.transport.transport_adapter import PubSocket, TransportAdapter

log = logging.getLogger("chainzmq.registry")


@dataclass
class Endpoint:
    """One address and the socket that serves it"""
    address: str
    socket: PubSocket
    bound: bool = False
    bound_address: Optional[str] = None
    topics: List[str] = field(default_factory=list)


class EndpointRegistry:
    """
    Owns endpoint creation, deduplication by address, the bind/unbind
    lifecycle and send routing.

    Example Usage:
        ```python
        registry = EndpointRegistry(ZmqTransport())
        registry.register("hashtx", "tcp://127.0.0.1:28332")
        registry.register("rawtx", "tcp://127.0.0.1:28332")   # same socket

        registry.open()
        registry.send("hashtx", tx_hash)
        registry.close()
        ```
    """

    def __init__(self, transport: TransportAdapter):
        if not isinstance(transport, TransportAdapter):
            raise TypeError("EndpointRegistry requires a valid TransportAdapter instance.")

        self._transport = transport
        self._endpoints: Dict[str, Endpoint] = {}  # address -> Endpoint
        self._topics: Dict[str, Endpoint] = {}  # topic -> Endpoint

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, topic: str, address: str) -> Endpoint:
        """
        Route ``topic`` to the endpoint for ``address``, creating it if needed.

        Raises:
            ConfigurationError: topic or address is not a non-empty string
            DuplicateTopicError: topic is already registered
        """
        if not isinstance(topic, str) or not topic:
            raise ConfigurationError(f"Topic must be a non-empty string, got {topic!r}")
        if not isinstance(address, str) or not address:
            raise ConfigurationError(f"Address for topic '{topic}' must be a non-empty string")

        if topic in self._topics:
            raise DuplicateTopicError(topic)

        endpoint = self._endpoints.get(address)
        if endpoint is None:
            endpoint = Endpoint(address=address, socket=self._transport.create_pub_socket())
            self._endpoints[address] = endpoint
            log.debug(f"Created endpoint for {address}")

        endpoint.topics.append(topic)
        self._topics[topic] = endpoint
        log.debug(f"Topic '{topic}' -> {address}")
        return endpoint

    def has(self, topic: str) -> bool:
        return topic in self._topics

    def get(self, address: str) -> Optional[Endpoint]:
        return self._endpoints.get(address)

    @property
    def topics(self) -> Dict[str, str]:
        """Registered topics mapped to their addresses."""
        return {topic: endpoint.address for topic, endpoint in self._topics.items()}

    @property
    def endpoints(self) -> Tuple[Endpoint, ...]:
        return tuple(self._endpoints.values())

    @property
    def is_open(self) -> bool:
        """True when every endpoint is bound (vacuously true with none)."""
        return all(endpoint.bound for endpoint in self._endpoints.values())

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def open(self) -> None:
        """
        Bind every endpoint. On return all endpoints are live.

        Raises:
            TransportBindError: a bind failed; endpoints bound by this call
                have been unbound again
        """
        newly_bound: List[Endpoint] = []

        for endpoint in self._endpoints.values():
            if endpoint.bound:
                continue

            try:
                endpoint.bound_address = endpoint.socket.bind(endpoint.address)
            except TransportError:
                transport_errors_total.labels(operation="bind").inc()
                log.error(
                    f"Bind failed for {endpoint.address}, rolling back {len(newly_bound)} endpoint(s)",
                    extra={"address": endpoint.address},
                )
                self._rollback(newly_bound)
                raise

            endpoint.bound = True
            newly_bound.append(endpoint)
            endpoints_bound.inc()
            log.info(f"Bound {endpoint.bound_address} for topics {endpoint.topics}")

    def _rollback(self, endpoints: List[Endpoint]) -> None:
        for endpoint in reversed(endpoints):
            try:
                endpoint.socket.unbind()
            except TransportError as e:
                transport_errors_total.labels(operation="unbind").inc()
                log.warning(f"Rollback unbind failed for {endpoint.address}: {e}")
                continue
            endpoint.bound = False
            endpoint.bound_address = None
            endpoints_bound.dec()

    def close(self) -> None:
        """
        Unbind every bound endpoint.

        Raises:
            TransportUnbindError: the first unbind failure, after all
                endpoints were attempted
        """
        first_error: Optional[TransportUnbindError] = None

        for endpoint in self._endpoints.values():
            if not endpoint.bound:
                continue

            try:
                endpoint.socket.unbind()
            except TransportUnbindError as e:
                transport_errors_total.labels(operation="unbind").inc()
                log.error(f"Unbind failed for {endpoint.address}: {e}", extra={"address": endpoint.address})
                if first_error is None:
                    first_error = e
                continue

            endpoint.bound = False
            endpoint.bound_address = None
            endpoints_bound.dec()
            log.info(f"Unbound {endpoint.address}")

        if first_error is not None:
            raise first_error

    # =========================================================================
    # Sending
    # =========================================================================

    def send(self, topic: str, payload: bytes) -> None:
        """
        Send ``[topic, payload]`` as one message.

        Unregistered topics are disabled features: nothing happens.
        """
        endpoint = self._topics.get(topic)
        if endpoint is None:
            return

        try:
            endpoint.socket.send_multipart([topic.encode("ascii"), payload])
        except TransportSendError:
            transport_errors_total.labels(operation="send").inc()
            raise

        messages_published_total.labels(topic=topic).inc()
        bytes_published_total.labels(topic=topic).inc(len(payload))
        log.debug(f"Sent {len(payload)} bytes on '{topic}'")
