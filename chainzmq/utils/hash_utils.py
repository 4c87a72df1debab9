# =============================================================================
# File: chainzmq/utils/hash_utils.py
# Description: Hash byte-order helpers
# =============================================================================

from chainzmq.common.exceptions.exceptions import PreconditionError

HASH_SIZE = 32


def reverse_hash(data: bytes) -> bytes:
    """
    Convert a 32-byte hash from internal byte order to display order.

    Nodes store hashes little-endian; explorers and RPC show them reversed.
    Output byte ``i`` is input byte ``31 - i``.

    Raises:
        PreconditionError: if ``data`` is not bytes-like of exactly 32 bytes
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise PreconditionError(f"Hash must be bytes, got {type(data).__name__}")

    data = bytes(data)
    if len(data) != HASH_SIZE:
        raise PreconditionError(f"Hash must be {HASH_SIZE} bytes, got {len(data)}")

    return data[::-1]

