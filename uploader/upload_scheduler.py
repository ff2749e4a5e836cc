"""Concurrent per-chunk upload with bounded, fixed-delay retry."""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from common.constants import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY_SECONDS
from common.logging_config import get_logger
from common.types import Chunk
from uploader.exceptions import FatalUploadError
from uploader.storage_actor import FileStorageActor

logger = get_logger(__name__)


@dataclass
class Batch:
    """
    Chunk ids collected for one upload, indexed by chunk order.

    Each upload task writes only its own slot; the list is read once, after
    every task has finished.
    """
    batch_id: str
    chunk_ids: List[Optional[int]] = field(default_factory=list)

    def record(self, order: int, chunk_id: Optional[int]) -> None:
        if order >= len(self.chunk_ids):
            self.chunk_ids.extend([None] * (order + 1 - len(self.chunk_ids)))
        self.chunk_ids[order] = chunk_id

    @property
    def complete(self) -> bool:
        return all(chunk_id is not None for chunk_id in self.chunk_ids)


class UploadScheduler:
    """
    Dispatches every chunk of a batch to the remote store at once.

    Each chunk is retried independently up to max_retries times with a fixed
    delay. The first chunk that exhausts its retries fails the whole schedule;
    sibling uploads already in flight are left to finish on their own.
    """

    def __init__(
        self,
        actor: FileStorageActor,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS
    ):
        """
        Initialize scheduler.

        Args:
            actor: Remote store client
            max_retries: Retries per chunk after the first attempt
            retry_delay: Seconds to wait between attempts
        """
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        if retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {retry_delay}")
        self.actor = actor
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    async def upload_chunk(self, chunk: Chunk) -> int:
        """Single create_chunk call, no retry."""
        return await self.actor.create_chunk(chunk.batch_id, chunk.data, chunk.order)

    async def upload_chunk_with_retry(self, chunk: Chunk) -> int:
        """
        Upload a chunk, retrying on any failure.

        Args:
            chunk: Chunk to upload; the same bytes and order are resent on retry

        Returns:
            Chunk id assigned by the remote store

        Raises:
            FatalUploadError: If all 1 + max_retries attempts failed
        """
        attempts = self.max_retries + 1

        for attempt in range(1, attempts + 1):
            try:
                return await self.upload_chunk(chunk)
            except Exception as e:
                if attempt == attempts:
                    logger.error(
                        f"Failed to upload chunk {chunk.order} after {attempts} attempt(s): {e} "
                        f"[batch_id={chunk.batch_id}]"
                    )
                    raise FatalUploadError(chunk.order, attempts, e) from e

                logger.warning(
                    f"Chunk {chunk.order} upload failed (attempt {attempt}/{attempts}), "
                    f"retrying in {self.retry_delay}s: {e} [batch_id={chunk.batch_id}]"
                )
                await asyncio.sleep(self.retry_delay)

    async def _upload_into(
        self,
        batch: Batch,
        chunk: Chunk,
        on_chunk_done: Optional[Callable[[Chunk], None]]
    ) -> None:
        chunk_id = await self.upload_chunk_with_retry(chunk)
        batch.record(chunk.order, chunk_id)
        logger.debug(f"Uploaded chunk {chunk.order} as {chunk_id} [batch_id={chunk.batch_id}]")
        if on_chunk_done is not None:
            on_chunk_done(chunk)

    async def schedule(
        self,
        batch_id: str,
        chunks: Iterable[Chunk],
        on_chunk_done: Optional[Callable[[Chunk], None]] = None
    ) -> Batch:
        """
        Upload all chunks concurrently and collect their ids.

        Args:
            batch_id: Batch reference shared by all chunks
            chunks: Chunks in ascending order; consumed once
            on_chunk_done: Called after each successful chunk upload

        Returns:
            Batch with one chunk id per chunk, in order

        Raises:
            FatalUploadError: From the first chunk that exhausted its retries
        """
        batch = Batch(batch_id=batch_id)
        tasks = []
        for chunk in chunks:
            batch.record(chunk.order, None)
            tasks.append(asyncio.ensure_future(self._upload_into(batch, chunk, on_chunk_done)))

        logger.info(f"Dispatched {len(tasks)} chunk upload(s) [batch_id={batch_id}]")
        await asyncio.gather(*tasks)
        return batch
