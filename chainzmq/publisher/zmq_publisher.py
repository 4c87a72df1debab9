# =============================================================================
# File: chainzmq/publisher/zmq_publisher.py
# Description: Bridges node tx/block events onto ZeroMQ topics
# =============================================================================
"""
ZmqPublisher - republishes node events as two-frame ZeroMQ messages.

Architecture:
    node "tx"    -> hashtx    [b"hashtx",    reversed tx hash]
                 -> rawtx     [b"rawtx",     raw tx bytes]
    node "block" -> hashblock [b"hashblock", reversed block hash]
                 -> rawblock  [b"rawblock",  raw block bytes]

Only topics with a configured address get an endpoint; sends on the others
are no-ops. Events that arrive while the publisher is closed are dropped
before anything is computed.

Threading: event handlers, open() and close() must run on the same thread
of control (the node's event loop). The closed flag is not locked.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from chainzmq.common.exceptions.exceptions import ConfigurationError
from chainzmq.config.zmq_config import (
    TOPIC_HASHBLOCK,
    TOPIC_HASHTX,
    TOPIC_RAWBLOCK,
    TOPIC_RAWTX,
    ZmqConfig,
    get_zmq_config,
)
from chainzmq.infra.metrics.publisher_metrics import events_dropped_total
from chainzmq.infra.transport.endpoint_registry import EndpointRegistry
from chainzmq.infra.transport.transport_adapter import TransportAdapter
from chainzmq.infra.transport.zmq_adapter import ZmqTransport
from chainzmq.node.types import NODE_EVENT_BLOCK, NODE_EVENT_TX, ChainObject, NodeEventSource
from chainzmq.utils.hash_utils import reverse_hash

log = logging.getLogger("chainzmq.publisher")


class ZmqPublisher:
    """
    Node plugin publishing tx/block notifications over ZeroMQ.

    Example Usage:
        ```python
        publisher = ZmqPublisher.from_node(node)
        await publisher.open()
        ...
        await publisher.shutdown()
        ```
    """

    PLUGIN_ID = "zmq"

    def __init__(
            self,
            node: NodeEventSource,
            config: Optional[ZmqConfig] = None,
            transport: Optional[TransportAdapter] = None,
    ):
        if node is None:
            raise ConfigurationError("ZmqPublisher requires a node.")

        self._node = node
        self._config = config or get_zmq_config()

        owns_transport = transport is None
        self._transport = transport or ZmqTransport(config=self._config)
        self._registry = EndpointRegistry(self._transport)
        self._closed = True

        try:
            self._init()
        except Exception:
            if owns_transport:
                self._transport.close()
            raise

    @classmethod
    def from_node(cls, node: Any, transport: Optional[TransportAdapter] = None) -> "ZmqPublisher":
        """
        Build a publisher from the node's own options (``node.config``).

        ``node.config`` may be a mapping or an option store with a
        ``get(name)`` / ``str(name)`` lookup. Options absent from the node
        fall back to ZMQ_* environment settings.
        """
        if node is None:
            raise ConfigurationError("ZmqPublisher requires a node.")

        config = ZmqConfig.from_options(getattr(node, "config", None))
        return cls(node, config=config, transport=transport)

    def _init(self) -> None:
        for topic, address in self._config.endpoints().items():
            self._registry.register(topic, address)

        self._node.on(NODE_EVENT_TX, self._handle_tx)
        self._node.on(NODE_EVENT_BLOCK, self._handle_block)

        log.debug(f"ZmqPublisher initialized with topics {list(self._registry.topics)}")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def registry(self) -> EndpointRegistry:
        return self._registry

    @property
    def config(self) -> ZmqConfig:
        return self._config

    # =========================================================================
    # Node Event Handlers
    # =========================================================================

    def _handle_tx(self, tx: ChainObject) -> None:
        if self._closed:
            events_dropped_total.labels(event=NODE_EVENT_TX).inc()
            return

        tx_hash = reverse_hash(tx.hash())
        self._registry.send(TOPIC_HASHTX, tx_hash)
        self._registry.send(TOPIC_RAWTX, tx.to_raw())
        log.debug(f"Published tx {tx_hash.hex()}")

    def _handle_block(self, block: ChainObject) -> None:
        if self._closed:
            events_dropped_total.labels(event=NODE_EVENT_BLOCK).inc()
            return

        block_hash = reverse_hash(block.hash())
        self._registry.send(TOPIC_HASHBLOCK, block_hash)
        self._registry.send(TOPIC_RAWBLOCK, block.to_raw())
        log.debug(f"Published block {block_hash.hex()}")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def open(self) -> None:
        """Bind all endpoints and start forwarding events."""
        self._registry.open()
        self._closed = False
        log.info(f"ZeroMQ loaded ({len(self._registry.endpoints)} endpoint(s)).")

    async def close(self) -> None:
        """
        Stop forwarding events and unbind all endpoints.

        Forwarding stops even if an unbind fails; the error still propagates.
        """
        try:
            self._registry.close()
        finally:
            self._closed = True
        log.info("ZeroMQ publisher closed.")

    async def shutdown(self) -> None:
        """close() and then release the transport, even if close() failed."""
        try:
            await self.close()
        finally:
            self._transport.close()
