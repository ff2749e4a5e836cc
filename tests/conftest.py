"""Shared pytest fixtures for all tests."""

import base64
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi import FastAPI, HTTPException

from cli.config import Config
from uploader.checksum import update_checksum
from uploader.exceptions import TransientUploadError
from uploader.result import Result
from uploader.schemas import ActorConfig, Asset, AssetProperties
from uploader.storage_actor import HttpFileStorageActor


class InMemoryStorageActor:
    """
    In-memory stand-in for the remote asset store.

    ``failures`` maps a chunk order to the number of create_chunk calls that
    should fail for it (-1 fails forever).
    """

    def __init__(self, store_version: int = 4):
        self.store_version = store_version
        self.chunks: Dict[int, Tuple[str, int, bytes]] = {}
        self.assets: Dict[str, Asset] = {}
        self.contents: Dict[str, bytes] = {}
        self.next_chunk_id = 1
        self.failures: Dict[int, int] = {}
        self.reject_commit: Optional[str] = None
        self.create_calls: List[int] = []
        self.commit_calls: List[Tuple[str, List[int], AssetProperties]] = []
        self.full = False
        self.closed = False

    async def create_chunk(self, batch_id: str, data: bytes, order: int) -> int:
        self.create_calls.append(order)
        remaining = self.failures.get(order, 0)
        if remaining != 0:
            if remaining > 0:
                self.failures[order] = remaining - 1
            raise TransientUploadError("Simulated upload failure")

        chunk_id = self.next_chunk_id
        self.next_chunk_id += 1
        self.chunks[chunk_id] = (batch_id, order, bytes(data))
        return chunk_id

    async def commit_batch(
        self,
        batch_id: str,
        chunk_ids: List[int],
        properties: AssetProperties
    ) -> Result[str]:
        self.commit_calls.append((batch_id, list(chunk_ids), properties))
        if self.reject_commit:
            return Result.failure(self.reject_commit)

        checksum = 0
        content = b""
        for expected_order, chunk_id in enumerate(chunk_ids):
            if chunk_id not in self.chunks:
                return Result.failure(f"Chunk {chunk_id} not found")
            chunk_batch, order, data = self.chunks[chunk_id]
            if chunk_batch != batch_id or order != expected_order:
                return Result.failure(f"Chunk {chunk_id} does not belong to batch")
            checksum = update_checksum(checksum, data)
            content += data

        if checksum != properties.checksum:
            return Result.failure("Checksum mismatch")

        for chunk_id in chunk_ids:
            del self.chunks[chunk_id]

        asset_id = uuid.uuid4().hex
        self.contents[asset_id] = content
        self.assets[asset_id] = Asset(
            id=asset_id,
            url=f"https://store.test/asset/{asset_id}",
            created=1,
            owner="tester",
            chunks_size=len(chunk_ids),
            canister_id="test-canister",
            content_size=len(content),
            content_type=properties.content_type,
            filename=properties.filename,
            content_encoding=properties.content_encoding,
        )
        return Result.success(asset_id)

    async def get(self, asset_id: str) -> Result[Asset]:
        if asset_id not in self.assets:
            return Result.failure("Asset not found")
        return Result.success(self.assets[asset_id])

    async def delete_asset(self, asset_id: str) -> Result[str]:
        if asset_id not in self.assets:
            return Result.failure("Asset not found")
        del self.assets[asset_id]
        del self.contents[asset_id]
        return Result.success("Asset deleted")

    async def assets_list(self) -> Result[List[Asset]]:
        return Result.success(list(self.assets.values()))

    async def chunks_size(self) -> int:
        return len(self.chunks)

    async def version(self) -> int:
        return self.store_version

    async def is_full(self) -> bool:
        return self.full

    async def close(self) -> None:
        self.closed = True


def _wire(result: Result) -> dict:
    if result.is_err:
        return {"err": result.err}
    value = result.ok
    if isinstance(value, Asset):
        value = value.model_dump()
    elif isinstance(value, list):
        value = [item.model_dump() for item in value]
    return {"ok": value}


def build_store_app(backend: InMemoryStorageActor, canister_id: str = "test-canister") -> FastAPI:
    """FastAPI app exposing an InMemoryStorageActor over the HTTP actor's wire format."""
    app = FastAPI()
    app.state.requests = []

    @app.get("/api/status")
    async def status():
        return {"root_key": "test-root-key"}

    @app.post("/api/canister/{target}/{method}")
    async def call(target: str, method: str, body: dict):
        app.state.requests.append(method)
        if target != canister_id:
            raise HTTPException(status_code=404, detail=f"Canister {target} not found")

        try:
            if method == "create_chunk":
                data = base64.b64decode(body["content"])
                return {"result": await backend.create_chunk(body["batch_id"], data, body["order"])}
        except TransientUploadError as e:
            raise HTTPException(status_code=503, detail=str(e))

        if method == "commit_batch":
            properties = AssetProperties.model_validate(body["properties"])
            result = await backend.commit_batch(body["batch_id"], body["chunk_ids"], properties)
            return {"result": _wire(result)}
        if method == "get":
            return {"result": _wire(await backend.get(body["asset_id"]))}
        if method == "delete_asset":
            return {"result": _wire(await backend.delete_asset(body["asset_id"]))}
        if method == "assets_list":
            return {"result": _wire(await backend.assets_list())}
        if method == "chunks_size":
            return {"result": await backend.chunks_size()}
        if method == "version":
            return {"result": await backend.version()}
        if method == "is_full":
            return {"result": await backend.is_full()}
        raise HTTPException(status_code=404, detail=f"Unknown method {method}")

    return app


@pytest.fixture
def storage_actor():
    """In-memory storage actor."""
    return InMemoryStorageActor()


@pytest.fixture
def actor_config():
    return ActorConfig(
        canister_id="test-canister",
        identity="test-identity",
        host="http://store.test",
        is_production=False,
    )


@pytest.fixture
def store_app(storage_actor):
    """FastAPI fake store backed by the storage_actor fixture."""
    return build_store_app(storage_actor)


@pytest.fixture
def http_actor(actor_config, store_app):
    """HttpFileStorageActor talking to the fake store app in-process."""
    session = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=store_app),
        base_url=actor_config.host
    )
    return HttpFileStorageActor(actor_config, session=session)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .assetvault directory
    """
    config_dir = tmp_path / '.assetvault'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir, monkeypatch):
    """
    Create temporary config instance.

    Returns:
        Config instance with temp config file
    """
    monkeypatch.delenv('ASSET_STORE_HOST', raising=False)
    monkeypatch.delenv('ASSET_STORE_CANISTER_ID', raising=False)
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path) -> Path:
    """
    Create a sample binary file for upload tests.

    Returns:
        Path to sample file
    """
    file_path = tmp_path / 'pixels.jpeg'
    file_path.write_bytes(bytes(range(256)) * 40)
    return file_path
