"""Pydantic models for the asset store wire format."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from common.constants import (
    CONTENT_ENCODING_IDENTITY,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_STORE_HOST,
)


ContentEncoding = Literal["Identity", "GZIP"]


class AssetProperties(BaseModel):
    """Metadata sent with commit_batch."""
    filename: str
    content_type: str
    checksum: int = Field(ge=0)
    content_encoding: ContentEncoding = CONTENT_ENCODING_IDENTITY


class Asset(BaseModel):
    """An asset registered by the remote store."""
    id: str
    url: str = ""
    created: int = 0
    owner: str = ""
    chunks_size: int = 0
    canister_id: str = ""
    content_size: int
    content_type: str
    filename: str
    content_encoding: ContentEncoding = CONTENT_ENCODING_IDENTITY
    content: Optional[List[str]] = None


class ActorConfig(BaseModel):
    """Construction-time configuration for a remote storage actor."""
    canister_id: Optional[str] = None
    identity: Optional[str] = None
    host: str = DEFAULT_STORE_HOST
    is_production: bool = False
    timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
