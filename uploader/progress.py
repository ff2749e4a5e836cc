"""Turns chunk completions into a fractional progress signal."""

from typing import Callable, Optional

from common.constants import CHUNK_SIZE_BYTES
from common.logging_config import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[float], None]


class ProgressReporter:
    """
    Reports upload progress in [0, 1] after every completed chunk.

    Progress counts a nominal chunk_size per completion (capped at the total),
    so it tracks chunk completion rather than exact bytes on the wire.
    """

    def __init__(
        self,
        total_size: int,
        chunk_size: int = CHUNK_SIZE_BYTES,
        callback: Optional[ProgressCallback] = None
    ):
        self.total_size = total_size
        self.chunk_size = chunk_size
        self.callback = callback
        self.stored = 0

    def start(self) -> None:
        """Emit the initial 0 notification."""
        self._emit(0.0)

    def chunk_completed(self) -> None:
        """Account for one more uploaded chunk and emit the new fraction."""
        if self.callback is None:
            return
        self.stored = min(self.stored + self.chunk_size, self.total_size)
        if self.total_size > 0:
            self._emit(self.stored / self.total_size)

    def _emit(self, progress: float) -> None:
        if self.callback is None:
            return
        try:
            self.callback(progress)
        except Exception as e:
            logger.warning(f"Progress callback raised, ignoring: {e}", exc_info=True)
