"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class StoreCommand:
    """Upload a file as a new asset."""

    path: str
    content_type: str | None = None
    filename: str | None = None
    command: Literal["store"] = "store"


@dataclass(frozen=True)
class GetCommand:
    """Show one asset."""

    asset_id: str
    command: Literal["get"] = "get"


@dataclass(frozen=True)
class ListCommand:
    """List all assets."""

    command: Literal["list"] = "list"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete an asset."""

    asset_id: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class VersionCommand:
    """Show the store version."""

    command: Literal["version"] = "version"


@dataclass(frozen=True)
class ChunksSizeCommand:
    """Show the number of uncommitted chunks on the store."""

    command: Literal["chunks-size"] = "chunks-size"


@dataclass(frozen=True)
class SetIdentityCommand:
    """Save the identity used for store calls."""

    identity: str
    command: Literal["set-identity"] = "set-identity"


CommandRequest = (
    StoreCommand
    | GetCommand
    | ListCommand
    | DeleteCommand
    | VersionCommand
    | ChunksSizeCommand
    | SetIdentityCommand
)
