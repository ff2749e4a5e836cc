"""Public store pipeline: split, checksum, upload, commit."""

import uuid
from typing import Iterator, List, Optional, Union

from common.constants import (
    CHUNK_SIZE_BYTES,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_FILENAME,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY_SECONDS,
)
from common.logging_config import get_logger
from common.types import AssetMetadata, Chunk
from uploader.batch_committer import BatchCommitter
from uploader.checksum import ChecksumAccumulator
from uploader.chunk_splitter import ChunkSplitter, validate_file
from uploader.progress import ProgressCallback, ProgressReporter
from uploader.result import Result
from uploader.schemas import ActorConfig, Asset
from uploader.storage_actor import FileStorageActor, get_actor
from uploader.upload_scheduler import UploadScheduler

logger = get_logger(__name__)


class AssetManager:
    """
    Uploads byte buffers to the remote asset store in chunks.

    The storage actor is injected, so any FileStorageActor implementation
    (including in-memory fakes) can back it.
    """

    def __init__(
        self,
        actor: FileStorageActor,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        chunk_size: int = CHUNK_SIZE_BYTES
    ):
        """
        Initialize asset manager.

        Args:
            actor: Remote store client
            max_retries: Retries per chunk after the first attempt
            retry_delay: Seconds between chunk upload attempts
            chunk_size: Chunk boundary; must match the store's protocol constant
        """
        self.actor = actor
        self.splitter = ChunkSplitter(chunk_size)
        self.scheduler = UploadScheduler(actor, max_retries=max_retries, retry_delay=retry_delay)
        self.committer = BatchCommitter(actor)

    @classmethod
    def from_config(
        cls,
        config: Union[ActorConfig, dict],
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS
    ) -> "AssetManager":
        """
        Build an AssetManager backed by the HTTP storage actor.

        Raises:
            ConfigurationError: If canister_id or identity is missing
        """
        return cls(get_actor(config), max_retries=max_retries, retry_delay=retry_delay)

    @property
    def chunk_size(self) -> int:
        return self.splitter.chunk_size

    async def store(
        self,
        file,
        content_type: Optional[str] = None,
        filename: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None
    ) -> Result[str]:
        """
        Upload a buffer and register it as an asset.

        Args:
            file: Bytes-like buffer to upload
            content_type: MIME type (defaults to application/octet-stream)
            filename: Asset filename (defaults to "file")
            on_progress: Optional callback receiving progress in [0, 1]

        Returns:
            Result with the new asset id as ``ok``, or the store's rejection as ``err``

        Raises:
            ValidationError: If file is not a buffer or is empty
            FatalUploadError: If a chunk could not be uploaded within its retry budget
        """
        validate_file(file)

        batch_id = uuid.uuid4().hex
        total_size = memoryview(file).nbytes
        progress = ProgressReporter(total_size, self.chunk_size, on_progress)
        accumulator = ChecksumAccumulator()

        logger.info(
            f"Storing {filename or DEFAULT_FILENAME}: {total_size} bytes in "
            f"{self.splitter.count(total_size)} chunk(s) [batch_id={batch_id}]"
        )
        progress.start()

        def checksummed_chunks() -> Iterator[Chunk]:
            for chunk in self.splitter.split(file, batch_id):
                accumulator.update(chunk)
                yield chunk

        batch = await self.scheduler.schedule(
            batch_id,
            checksummed_chunks(),
            on_chunk_done=lambda chunk: progress.chunk_completed()
        )

        metadata = AssetMetadata(
            checksum=accumulator.finalize(),
            filename=filename or DEFAULT_FILENAME,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
        )
        return await self.committer.commit(batch, metadata)

    async def get_asset(self, asset_id: str) -> Result[Asset]:
        return await self.actor.get(asset_id)

    async def list_assets(self) -> Result[List[Asset]]:
        return await self.actor.assets_list()

    async def delete_asset(self, asset_id: str) -> Result[str]:
        logger.info(f"Deleting asset {asset_id}")
        return await self.actor.delete_asset(asset_id)

    async def chunks_size(self) -> int:
        """Number of uncommitted chunks currently held by the store."""
        return await self.actor.chunks_size()

    async def version(self) -> int:
        return await self.actor.version()

    async def is_full(self) -> bool:
        return await self.actor.is_full()

    async def close(self) -> None:
        await self.actor.close()

    async def __aenter__(self) -> "AssetManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
