"""Finalizes an uploaded batch into a registered asset."""

from common.logging_config import get_logger
from common.types import AssetMetadata
from uploader.exceptions import ValidationError
from uploader.result import Result
from uploader.schemas import AssetProperties
from uploader.storage_actor import FileStorageActor
from uploader.upload_scheduler import Batch

logger = get_logger(__name__)


class BatchCommitter:
    """Issues the single commit_batch call that turns a batch into an asset."""

    def __init__(self, actor: FileStorageActor):
        self.actor = actor

    async def commit(self, batch: Batch, metadata: AssetMetadata) -> Result[str]:
        """
        Commit a fully uploaded batch.

        Args:
            batch: Batch whose chunk ids are all present
            metadata: Filename, content type and checksum for the asset

        Returns:
            Result with the asset id as ``ok``, or the store's rejection as ``err``

        Raises:
            ValidationError: If the batch has no chunk ids
        """
        if not batch.chunk_ids:
            raise ValidationError("chunk_ids is required")

        if not batch.complete:
            missing = [order for order, chunk_id in enumerate(batch.chunk_ids) if chunk_id is None]
            raise ValidationError(f"batch is missing chunk ids for orders {missing}")

        properties = AssetProperties(
            filename=metadata.filename,
            content_type=metadata.content_type,
            checksum=metadata.checksum,
        )

        logger.info(
            f"Committing batch: {len(batch.chunk_ids)} chunk(s), filename={metadata.filename}, "
            f"checksum={metadata.checksum} [batch_id={batch.batch_id}]"
        )
        result = await self.actor.commit_batch(batch.batch_id, batch.chunk_ids, properties)

        if result.is_err:
            logger.warning(f"Commit rejected by store: {result.err} [batch_id={batch.batch_id}]")
        else:
            logger.info(f"Committed asset {result.ok} [batch_id={batch.batch_id}]")

        return result
