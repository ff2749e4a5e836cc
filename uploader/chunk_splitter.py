"""Partitions an upload buffer into fixed-size, order-tagged chunks."""

from typing import Iterator

from common.constants import CHUNK_SIZE_BYTES
from common.types import Chunk
from uploader.exceptions import ValidationError


def validate_file(file) -> None:
    """
    Check that the upload input is a bytes-like buffer.

    Raises:
        ValidationError: If file is None or not bytes/bytearray/memoryview,
            or is a non-contiguous memoryview
    """
    if file is None:
        raise ValidationError("file is required")

    if not isinstance(file, (bytes, bytearray, memoryview)):
        raise ValidationError(
            f"file must be a bytes-like buffer, got {type(file).__name__}"
        )

    if isinstance(file, memoryview) and not file.c_contiguous:
        raise ValidationError("file must be a contiguous bytes-like buffer")


class ChunkSplitter:
    """Splits a buffer into consecutive chunks of at most chunk_size bytes."""

    def __init__(self, chunk_size: int = CHUNK_SIZE_BYTES):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size

    def count(self, length: int) -> int:
        """Number of chunks a buffer of the given length is split into."""
        return -(-length // self.chunk_size)

    def split(self, file, batch_id: str) -> Iterator[Chunk]:
        """
        Lazily yield chunks covering the buffer exactly once, in order.

        Args:
            file: Bytes-like buffer to split
            batch_id: Batch reference stamped onto each chunk

        Yields:
            Chunk objects with order 0, 1, 2, ...
        """
        view = memoryview(file).cast("B")
        for order, start in enumerate(range(0, len(view), self.chunk_size)):
            yield Chunk(
                order=order,
                data=bytes(view[start:start + self.chunk_size]),
                batch_id=batch_id,
            )
