"""Command handler functions for CLI operations."""

import mimetypes
from pathlib import Path
from typing import Optional

from common.constants import DEFAULT_CONTENT_TYPE
from common.logging_config import get_logger
from cli.config import Config
from cli.models import (
    ChunksSizeCommand,
    CommandRequest,
    DeleteCommand,
    GetCommand,
    ListCommand,
    SetIdentityCommand,
    StoreCommand,
    VersionCommand,
)
from cli.utils import ProgressPrinter, format_file_size
from uploader.asset_manager import AssetManager
from uploader.exceptions import UploaderException
from uploader.schemas import Asset

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.assetvault' / 'config.json'


class CommandError(Exception):
    """A command ran but did not succeed; the message is shown to the user."""


_config: Optional[Config] = None
_manager: Optional[AssetManager] = None


def get_config() -> Config:
    """
    Get or create global Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config(DEFAULT_CONFIG_PATH)
    return _config


def get_manager() -> AssetManager:
    """
    Get or create global AssetManager instance.

    Returns:
        AssetManager instance

    Raises:
        ConfigurationError: If canister id or identity is not configured
    """
    global _manager
    if _manager is None:
        logger.debug("Creating new AssetManager instance")
        config = get_config()
        _manager = AssetManager.from_config(config.get_actor_config(), **config.get_retry_config())
    return _manager


async def close_manager() -> None:
    """Close the global AssetManager, if one was created."""
    global _manager
    if _manager is not None:
        await _manager.close()
        _manager = None


def format_asset(asset: Asset) -> str:
    return (
        f"  - {asset.filename} (ID: {asset.id})\n"
        f"    Size: {format_file_size(asset.content_size)}\n"
        f"    Type: {asset.content_type}\n"
        f"    URL: {asset.url}"
    )


async def handle_store(cmd: StoreCommand, manager: Optional[AssetManager] = None) -> str:
    """
    Handle 'store' command.

    Args:
        cmd: StoreCommand with path and optional content type / filename
        manager: Optional AssetManager for dependency injection (testing)

    Returns:
        Success message

    Raises:
        CommandError: If the file cannot be read, uploaded or committed
    """
    path = Path(cmd.path).expanduser()
    if not path.is_file():
        raise CommandError(f"Error: File not found: {cmd.path}")

    filename = cmd.filename or path.name
    content_type = cmd.content_type or mimetypes.guess_type(path.name)[0] or DEFAULT_CONTENT_TYPE

    try:
        data = path.read_bytes()
    except IOError as e:
        raise CommandError(f"Error reading file: {e}") from e

    logger.info(f"Executing store command: {filename} ({len(data)} bytes, {content_type})")
    progress = ProgressPrinter(filename, len(data))

    try:
        if manager is None:
            manager = get_manager()
        result = await manager.store(data, content_type=content_type, filename=filename, on_progress=progress)
    except UploaderException as e:
        progress.finish()
        logger.error(f"Store failed for {filename}: {e}")
        raise CommandError(f"Error storing {cmd.path}: {e}") from e

    if result.is_err:
        raise CommandError(f"Store rejected: {result.err}")
    return f"Stored: {filename} (ID: {result.ok}, Size: {format_file_size(len(data))})"


async def handle_get(cmd: GetCommand, manager: Optional[AssetManager] = None) -> str:
    """Handle 'get' command."""
    try:
        if manager is None:
            manager = get_manager()
        result = await manager.get_asset(cmd.asset_id)
    except UploaderException as e:
        raise CommandError(f"Error: {e}") from e

    if result.is_err:
        raise CommandError(f"Error: {result.err}")
    return format_asset(result.ok)


async def handle_list(cmd: ListCommand, manager: Optional[AssetManager] = None) -> str:
    """Handle 'list' command."""
    try:
        if manager is None:
            manager = get_manager()
        result = await manager.list_assets()
    except UploaderException as e:
        raise CommandError(f"Error: {e}") from e

    if result.is_err:
        raise CommandError(f"Error: {result.err}")
    if not result.ok:
        return "No assets stored."

    output = [f"Found {len(result.ok)} asset(s):\n"]
    output.extend(format_asset(asset) for asset in result.ok)
    return '\n'.join(output)


async def handle_delete(cmd: DeleteCommand, manager: Optional[AssetManager] = None) -> str:
    """Handle 'delete' command."""
    try:
        if manager is None:
            manager = get_manager()
        result = await manager.delete_asset(cmd.asset_id)
    except UploaderException as e:
        raise CommandError(f"Error: {e}") from e

    if result.is_err:
        raise CommandError(f"Error: {result.err}")
    return f"Deleted: {cmd.asset_id} ({result.ok})"


async def handle_version(cmd: VersionCommand, manager: Optional[AssetManager] = None) -> str:
    """Handle 'version' command."""
    try:
        if manager is None:
            manager = get_manager()
        return f"Store version: {await manager.version()}"
    except UploaderException as e:
        raise CommandError(f"Error: {e}") from e


async def handle_chunks_size(cmd: ChunksSizeCommand, manager: Optional[AssetManager] = None) -> str:
    """Handle 'chunks-size' command."""
    try:
        if manager is None:
            manager = get_manager()
        return f"Uncommitted chunks: {await manager.chunks_size()}"
    except UploaderException as e:
        raise CommandError(f"Error: {e}") from e


async def handle_set_identity(cmd: SetIdentityCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'set-identity' command.

    Args:
        cmd: SetIdentityCommand with the identity to save
        config: Optional Config for dependency injection (testing)

    Returns:
        Confirmation message
    """
    if config is None:
        config = get_config()
    config.set_identity(cmd.identity)
    await close_manager()
    return "Identity saved to config."


async def dispatch_command(cmd: CommandRequest) -> str:
    """Dispatch parsed command to appropriate handler."""
    if isinstance(cmd, StoreCommand):
        return await handle_store(cmd)
    elif isinstance(cmd, GetCommand):
        return await handle_get(cmd)
    elif isinstance(cmd, ListCommand):
        return await handle_list(cmd)
    elif isinstance(cmd, DeleteCommand):
        return await handle_delete(cmd)
    elif isinstance(cmd, VersionCommand):
        return await handle_version(cmd)
    elif isinstance(cmd, ChunksSizeCommand):
        return await handle_chunks_size(cmd)
    elif isinstance(cmd, SetIdentityCommand):
        return await handle_set_identity(cmd)
    else:
        raise CommandError(f"Unknown command type: {type(cmd)}")
