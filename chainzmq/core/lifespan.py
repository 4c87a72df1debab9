# =============================================================================
# File: chainzmq/core/lifespan.py
# Description: Publisher startup/shutdown for the hosting process
# =============================================================================

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from chainzmq import __version__
from chainzmq.common.exceptions.exceptions import TransportError
from chainzmq.config.logging_config import log_endpoint_table
from chainzmq.publisher.zmq_publisher import ZmqPublisher

logger = logging.getLogger("chainzmq.lifespan")

DEFAULT_SHUTDOWN_TIMEOUT = 10.0


@asynccontextmanager
async def publisher_lifespan(
        publisher: ZmqPublisher,
        shutdown_timeout: Optional[float] = DEFAULT_SHUTDOWN_TIMEOUT,
) -> AsyncIterator[ZmqPublisher]:
    """
    Open the publisher for the duration of the block.

    A bind failure is logged and re-raised so the host can abort startup.
    Shutdown problems are logged and never raised.
    """
    logger.info(f"chainzmq {__version__} starting up...")

    try:
        await publisher.open()
    except TransportError as e:
        logger.error(f"ZeroMQ publisher failed to start: {e}")
        # Nothing is bound after a failed open(); only the transport is left
        await shutdown_publisher(publisher, shutdown_timeout)
        raise

    log_endpoint_table(logger, "ZeroMQ Endpoints", publisher.registry.topics)

    try:
        yield publisher
    finally:
        await shutdown_publisher(publisher, shutdown_timeout)


async def shutdown_publisher(
        publisher: ZmqPublisher,
        timeout: Optional[float] = DEFAULT_SHUTDOWN_TIMEOUT,
) -> bool:
    """
    Shut the publisher down without letting failures escape.

    Returns:
        True if shutdown completed cleanly, False otherwise
    """
    try:
        async with asyncio.timeout(timeout):
            await publisher.shutdown()
        logger.info("ZeroMQ publisher shut down")
        return True
    except TimeoutError:
        logger.error(f"ZeroMQ publisher shutdown timed out after {timeout}s, continuing...")
    except TransportError as e:
        logger.error(f"Error shutting down ZeroMQ publisher: {e}")
    return False
