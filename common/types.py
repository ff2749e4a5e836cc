"""Shared data type definitions (Chunk, AssetMetadata)."""

from dataclasses import dataclass

from common.constants import DEFAULT_CONTENT_TYPE, DEFAULT_FILENAME


@dataclass(frozen=True)
class Chunk:
    """
    A contiguous slice of an upload, tagged with its position.
    """
    order: int
    data: bytes
    batch_id: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class AssetMetadata:
    """
    Metadata registered with an asset at commit time.
    """
    checksum: int
    filename: str = DEFAULT_FILENAME
    content_type: str = DEFAULT_CONTENT_TYPE
