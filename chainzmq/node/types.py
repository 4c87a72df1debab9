# =============================================================================
# File: chainzmq/node/types.py
# Description: What the publisher needs from a blockchain node
# =============================================================================

from typing import Any, Callable, Protocol, runtime_checkable

# Node event names
NODE_EVENT_TX = "tx"
NODE_EVENT_BLOCK = "block"


@runtime_checkable
class ChainObject(Protocol):
    """A transaction or block as handed over by the node."""

    def hash(self) -> bytes:
        """32-byte identifying hash, internal byte order."""
        ...

    def to_raw(self) -> bytes:
        """Canonical raw serialization."""
        ...


@runtime_checkable
class NodeEventSource(Protocol):
    """
    Node-side event emitter.

    Handlers are called one at a time, in emission order, on the node's
    thread of control.
    """

    def on(self, event: str, handler: Callable[[ChainObject], Any]) -> Any:
        ...
