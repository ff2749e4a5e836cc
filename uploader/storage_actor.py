"""Client abstraction for calls to the remote asset store."""

import base64
import uuid
from typing import Any, Callable, List, Optional, Protocol, TypeVar, Union

import httpx
import pydantic

from common.logging_config import get_logger
from uploader.exceptions import (
    ConfigurationError,
    StorageRequestError,
    TransientUploadError,
)
from uploader.result import Result
from uploader.schemas import ActorConfig, Asset, AssetProperties

logger = get_logger(__name__)

T = TypeVar("T")


class FileStorageActor(Protocol):
    """The remote store operations the uploader depends on."""

    async def create_chunk(self, batch_id: str, data: bytes, order: int) -> int: ...

    async def commit_batch(
        self,
        batch_id: str,
        chunk_ids: List[int],
        properties: AssetProperties
    ) -> Result[str]: ...

    async def get(self, asset_id: str) -> Result[Asset]: ...

    async def delete_asset(self, asset_id: str) -> Result[str]: ...

    async def assets_list(self) -> Result[List[Asset]]: ...

    async def chunks_size(self) -> int: ...

    async def version(self) -> int: ...

    async def is_full(self) -> bool: ...

    async def close(self) -> None: ...


class HttpFileStorageActor:
    """
    JSON-over-HTTP implementation of FileStorageActor.

    Every method maps to ``POST /api/canister/{canister_id}/{method}`` with a JSON
    body of named arguments; the store answers ``{"result": ...}``.
    """

    def __init__(self, config: ActorConfig, session: Optional[httpx.AsyncClient] = None):
        """
        Initialize the actor.

        Args:
            config: Actor configuration with canister id, identity and host
            session: Optional pre-built AsyncClient (used by tests)
        """
        self.config = config
        self.session = session or httpx.AsyncClient(
            base_url=config.host,
            timeout=config.timeout
        )
        self.root_key: Optional[str] = None
        self._root_key_checked = config.is_production
        logger.info(
            f"Initialized HttpFileStorageActor [host={config.host}, canister_id={config.canister_id}]"
        )

    async def fetch_root_key(self) -> Optional[str]:
        """
        Fetch the store's root key, needed only by non-production deployments.

        Returns:
            Root key string reported by the store
        """
        response = await self.session.get('/api/status')
        response.raise_for_status()
        self.root_key = response.json().get('root_key')
        logger.debug(f"Fetched root key from {self.config.host}")
        return self.root_key

    async def _ensure_root_key(self) -> None:
        if self._root_key_checked:
            return
        self._root_key_checked = True
        try:
            await self.fetch_root_key()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch root key from {self.config.host}: {e}")

    async def _call(self, method: str, **arguments) -> Any:
        """
        Invoke a remote store method.

        Args:
            method: Remote method name
            **arguments: JSON-serializable named arguments

        Returns:
            The ``result`` field of the response body

        Raises:
            TransientUploadError: On network failure, timeout or 5xx response
            StorageRequestError: On 4xx response or malformed body
        """
        await self._ensure_root_key()

        request_id = str(uuid.uuid4())
        endpoint = f"/api/canister/{self.config.canister_id}/{method}"
        headers = {
            'Authorization': f'Bearer {self.config.identity}',
            'X-Request-ID': request_id,
        }

        logger.debug(f"Calling {method} [request_id={request_id}]")
        try:
            response = await self.session.post(endpoint, json=arguments, headers=headers)
        except httpx.TransportError as e:
            logger.warning(f"Network error calling {method}: {type(e).__name__} [request_id={request_id}]")
            raise TransientUploadError(f"{method} failed: {type(e).__name__}: {e}") from e

        if response.status_code >= 500:
            logger.warning(f"Server error calling {method}: status={response.status_code} [request_id={request_id}]")
            raise TransientUploadError(
                f"{method} failed: server error {response.status_code}: {self._format_error(response)}"
            )
        if response.status_code >= 400:
            logger.warning(f"Client error calling {method}: status={response.status_code} [request_id={request_id}]")
            raise StorageRequestError(
                f"{method} rejected: {self._format_error(response)}",
                status_code=response.status_code
            )

        try:
            return response.json()['result']
        except (ValueError, KeyError, TypeError) as e:
            raise StorageRequestError(f"{method} returned a malformed body: {e}") from e

    def _format_error(self, response: httpx.Response) -> str:
        try:
            return str(response.json().get('detail', response.reason_phrase))
        except ValueError:
            return response.text or response.reason_phrase

    def _decode(self, method: str, decode: Callable[[Any], T], payload: Any) -> T:
        """Apply decode to a call's result, mapping a badly shaped payload to StorageRequestError."""
        try:
            return decode(payload)
        except (ValueError, TypeError, pydantic.ValidationError) as e:
            logger.warning(f"Malformed result from {method}: {type(e).__name__}")
            raise StorageRequestError(f"{method} returned a malformed result: {e}") from e

    async def create_chunk(self, batch_id: str, data: bytes, order: int) -> int:
        result = await self._call(
            'create_chunk',
            batch_id=batch_id,
            content=base64.b64encode(data).decode('ascii'),
            order=order
        )
        return self._decode('create_chunk', int, result)

    async def commit_batch(
        self,
        batch_id: str,
        chunk_ids: List[int],
        properties: AssetProperties
    ) -> Result[str]:
        result = await self._call(
            'commit_batch',
            batch_id=batch_id,
            chunk_ids=list(chunk_ids),
            properties=properties.model_dump()
        )
        return self._decode('commit_batch', Result.from_wire, result)

    async def get(self, asset_id: str) -> Result[Asset]:
        result = self._decode('get', Result.from_wire, await self._call('get', asset_id=asset_id))
        if result.is_ok:
            return Result.success(self._decode('get', Asset.model_validate, result.ok))
        return result

    async def delete_asset(self, asset_id: str) -> Result[str]:
        return self._decode('delete_asset', Result.from_wire, await self._call('delete_asset', asset_id=asset_id))

    async def assets_list(self) -> Result[List[Asset]]:
        result = self._decode('assets_list', Result.from_wire, await self._call('assets_list'))
        if result.is_ok:
            return Result.success(self._decode('assets_list', _asset_list, result.ok))
        return result

    async def chunks_size(self) -> int:
        return self._decode('chunks_size', int, await self._call('chunks_size'))

    async def version(self) -> int:
        return self._decode('version', int, await self._call('version'))

    async def is_full(self) -> bool:
        return bool(await self._call('is_full'))

    async def close(self) -> None:
        await self.session.aclose()


def _asset_list(payload: Any) -> List[Asset]:
    if not isinstance(payload, list):
        raise TypeError(f"Expected a list of assets, got {type(payload).__name__}")
    return [Asset.model_validate(item) for item in payload]


def get_actor(
    config: Union[ActorConfig, dict],
    session: Optional[httpx.AsyncClient] = None
) -> HttpFileStorageActor:
    """
    Create a storage actor from configuration.

    Args:
        config: ActorConfig or equivalent dict
        session: Optional pre-built AsyncClient

    Returns:
        HttpFileStorageActor bound to the configured canister

    Raises:
        ConfigurationError: If canister_id or identity is missing
    """
    if isinstance(config, dict):
        config = ActorConfig.model_validate(config)

    if not config.canister_id:
        logger.error("Cannot create storage actor: canister_id is missing")
        raise ConfigurationError("canister_id is required")

    if not config.identity:
        logger.error("Cannot create storage actor: identity is missing")
        raise ConfigurationError("identity is required")

    return HttpFileStorageActor(config, session=session)
