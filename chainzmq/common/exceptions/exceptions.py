# chainzmq/common/exceptions/exceptions.py
# =============================================================================
# Custom exceptions for chainzmq
# =============================================================================

from typing import Optional


class ChainZmqException(Exception):
    """Base exception for chainzmq"""
    pass


class ConfigurationError(ChainZmqException):
    """Raised when required setup arguments are missing or invalid"""
    pass


class DuplicateTopicError(ChainZmqException):
    """Raised when a topic name is registered more than once"""

    def __init__(self, topic: str):
        self.topic = topic
        super().__init__(f"Topic '{topic}' is already registered")


class PreconditionError(ChainZmqException, ValueError):
    """Raised when a helper is called with input outside its contract"""
    pass


class TransportError(ChainZmqException):
    """Base class for pub/sub transport failures"""

    operation = "transport"

    def __init__(self, address: str, message: Optional[str] = None):
        self.address = address
        detail = f": {message}" if message else ""
        super().__init__(f"Failed to {self.operation} '{address}'{detail}")


class TransportBindError(TransportError):
    """Raised when an endpoint cannot be bound to its address"""
    operation = "bind"


class TransportUnbindError(TransportError):
    """Raised when an endpoint cannot be unbound from its address"""
    operation = "unbind"


class TransportSendError(TransportError):
    """Raised when a message cannot be handed to the transport"""
    operation = "send on"
