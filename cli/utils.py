"""Utility functions for CLI operations."""

import sys

from cli.constants import GREEN, RESET


class ProgressPrinter:
    """Progress callback that renders upload progress to stdout."""

    def __init__(self, filename: str, file_size: int):
        """
        Initialize the progress printer.

        Args:
            filename: Display name for the file
            file_size: Total size of the file in bytes
        """
        self.filename = filename
        self.file_size = file_size
        self._finished = False

    def __call__(self, progress: float) -> None:
        uploaded = int(self.file_size * progress)
        sys.stdout.write(
            f"\rUploading {self.filename}: {format_file_size(uploaded)} / "
            f"{format_file_size(self.file_size)} ({GREEN}{progress * 100:.1f}%{RESET})"
        )
        sys.stdout.flush()
        if progress >= 1.0:
            self.finish()

    def finish(self) -> None:
        """Terminate the progress line, once."""
        if self._finished:
            return
        self._finished = True
        sys.stdout.write('\n')
        sys.stdout.flush()


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
