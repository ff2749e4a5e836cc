"""Provides the CRC-32 based running checksum sent with every commit."""

import zlib

from common.constants import CHECKSUM_MODULUS, CHUNK_SIZE_BYTES
from common.types import Chunk


def update_checksum(checksum: int, data: bytes) -> int:
    """
    Fold one chunk into a running checksum.

    Args:
        checksum: Current checksum value (0 for the first chunk)
        data: Raw chunk bytes

    Returns:
        (checksum + unsigned CRC-32 of data) modulo CHECKSUM_MODULUS
    """
    crc = zlib.crc32(data, 0) & 0xFFFFFFFF
    return (checksum + crc) % CHECKSUM_MODULUS


def compute_checksum(file, chunk_size: int = CHUNK_SIZE_BYTES) -> int:
    """
    Compute the checksum of a whole buffer chunked at chunk_size.

    Args:
        file: Bytes-like buffer
        chunk_size: Chunk boundary used when the buffer is uploaded

    Returns:
        Checksum in [0, CHECKSUM_MODULUS)
    """
    view = memoryview(file).cast("B")
    checksum = 0
    for start in range(0, len(view), chunk_size):
        checksum = update_checksum(checksum, view[start:start + chunk_size])
    return checksum


class ChecksumAccumulator:
    """
    Accumulate the checksum chunk by chunk while a buffer is split.

    Usage:
        accumulator = ChecksumAccumulator()
        accumulator.update(chunk0)
        accumulator.update(chunk1)
        checksum = accumulator.finalize()
    """

    def __init__(self):
        self._checksum = 0
        self._next_order = 0
        self._finalized = False

    @property
    def value(self) -> int:
        return self._checksum

    def update(self, chunk: Chunk) -> int:
        """
        Fold the next chunk into the checksum.

        Args:
            chunk: Chunk whose order must follow the previous one

        Returns:
            Updated checksum

        Raises:
            ValueError: If called after finalize() or with an out-of-order chunk
        """
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        if chunk.order != self._next_order:
            raise ValueError(
                f"Chunk {chunk.order} out of order, expected {self._next_order}"
            )
        self._checksum = update_checksum(self._checksum, chunk.data)
        self._next_order += 1
        return self._checksum

    def finalize(self) -> int:
        self._finalized = True
        return self._checksum

