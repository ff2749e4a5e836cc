"""Unit tests for HttpFileStorageActor and get_actor."""

import base64
import json

import httpx
import pytest

from uploader.exceptions import ConfigurationError, StorageRequestError, TransientUploadError
from uploader.schemas import ActorConfig, AssetProperties
from uploader.storage_actor import HttpFileStorageActor, get_actor


def make_actor(handler, **config_overrides) -> HttpFileStorageActor:
    config = ActorConfig(
        canister_id="abc-cai",
        identity="secret-identity",
        host="http://test",
        **config_overrides
    )
    session = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=config.host)
    return HttpFileStorageActor(config, session=session)


@pytest.fixture
def recorded_requests():
    return []


@pytest.fixture
def echo_handler(recorded_requests):
    """Mock transport handler answering every call with a canned result."""
    results = {
        'create_chunk': 7,
        'commit_batch': {'ok': 'asset-1'},
        'get': {'ok': {
            'id': 'asset-1',
            'content_size': 10,
            'content_type': 'image/jpeg',
            'filename': 'pixels.jpeg',
        }},
        'delete_asset': {'ok': 'Asset deleted'},
        'assets_list': {'ok': []},
        'chunks_size': 3,
        'version': 4,
        'is_full': False,
    }

    def handler(request: httpx.Request) -> httpx.Response:
        recorded_requests.append(request)
        if request.url.path == '/api/status':
            return httpx.Response(200, json={'root_key': 'root-key'})
        method = request.url.path.rsplit('/', 1)[-1]
        return httpx.Response(200, json={'result': results[method]})

    return handler


class TestCalls:

    @pytest.mark.asyncio
    async def test_create_chunk_wire_format(self, echo_handler, recorded_requests):
        actor = make_actor(echo_handler, is_production=True)

        chunk_id = await actor.create_chunk('batch-1', b'\x00\x01data', 2)

        assert chunk_id == 7
        request = recorded_requests[0]
        assert request.method == 'POST'
        assert request.url.path == '/api/canister/abc-cai/create_chunk'
        assert request.headers['Authorization'] == 'Bearer secret-identity'
        assert 'X-Request-ID' in request.headers
        body = json.loads(request.content)
        assert body == {
            'batch_id': 'batch-1',
            'content': base64.b64encode(b'\x00\x01data').decode('ascii'),
            'order': 2,
        }

    @pytest.mark.asyncio
    async def test_commit_batch_wire_format(self, echo_handler, recorded_requests):
        actor = make_actor(echo_handler, is_production=True)
        properties = AssetProperties(filename='a.bin', content_type='application/octet-stream', checksum=5)

        result = await actor.commit_batch('batch-1', [1, 2], properties)

        assert result.ok == 'asset-1'
        body = json.loads(recorded_requests[0].content)
        assert body['chunk_ids'] == [1, 2]
        assert body['properties'] == {
            'filename': 'a.bin',
            'content_type': 'application/octet-stream',
            'checksum': 5,
            'content_encoding': 'Identity',
        }

    @pytest.mark.asyncio
    async def test_pass_through_calls(self, echo_handler):
        actor = make_actor(echo_handler, is_production=True)

        asset = (await actor.get('asset-1')).ok
        assert asset.filename == 'pixels.jpeg'
        assert asset.content_size == 10
        assert (await actor.delete_asset('asset-1')).ok == 'Asset deleted'
        assert (await actor.assets_list()).ok == []
        assert await actor.chunks_size() == 3
        assert await actor.version() == 4
        assert await actor.is_full() is False

    @pytest.mark.asyncio
    async def test_err_result_is_passed_through(self):
        def handler(request):
            return httpx.Response(200, json={'result': {'err': 'Asset not found'}})

        actor = make_actor(handler, is_production=True)

        result = await actor.get('missing')

        assert result.err == 'Asset not found'


class TestRootKey:

    @pytest.mark.asyncio
    async def test_non_production_fetches_root_key_once(self, echo_handler, recorded_requests):
        actor = make_actor(echo_handler, is_production=False)

        await actor.version()
        await actor.version()

        paths = [request.url.path for request in recorded_requests]
        assert paths.count('/api/status') == 1
        assert paths[0] == '/api/status'
        assert actor.root_key == 'root-key'

    @pytest.mark.asyncio
    async def test_production_skips_root_key(self, echo_handler, recorded_requests):
        actor = make_actor(echo_handler, is_production=True)

        await actor.version()

        assert [request.url.path for request in recorded_requests] == ['/api/canister/abc-cai/version']
        assert actor.root_key is None

    @pytest.mark.asyncio
    async def test_root_key_failure_does_not_block_calls(self):
        def handler(request):
            if request.url.path == '/api/status':
                return httpx.Response(500)
            return httpx.Response(200, json={'result': 4})

        actor = make_actor(handler, is_production=False)

        assert await actor.version() == 4
        assert actor.root_key is None


class TestErrors:

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        def handler(request):
            return httpx.Response(503, json={'detail': 'overloaded'})

        actor = make_actor(handler, is_production=True)

        with pytest.raises(TransientUploadError, match='overloaded'):
            await actor.create_chunk('b', b'x', 0)

    @pytest.mark.asyncio
    async def test_network_error_is_transient(self):
        def handler(request):
            raise httpx.ConnectError('connection refused', request=request)

        actor = make_actor(handler, is_production=True)

        with pytest.raises(TransientUploadError, match='ConnectError'):
            await actor.create_chunk('b', b'x', 0)

    @pytest.mark.asyncio
    async def test_client_error_is_request_error(self):
        def handler(request):
            return httpx.Response(403, json={'detail': 'caller not authorized'})

        actor = make_actor(handler, is_production=True)

        with pytest.raises(StorageRequestError, match='caller not authorized') as exc_info:
            await actor.version()

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        def handler(request):
            return httpx.Response(200, json={'unexpected': True})

        actor = make_actor(handler, is_production=True)

        with pytest.raises(StorageRequestError, match='malformed'):
            await actor.version()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, result", [
        ('get', 7),
        ('get', {'ok': {'id': 'asset-1'}}),
        ('commit_batch', 'asset-1'),
        ('delete_asset', {}),
        ('assets_list', {'ok': 'not-a-list'}),
        ('version', 'four'),
    ])
    async def test_badly_shaped_result_is_request_error(self, method, result):
        def handler(request):
            return httpx.Response(200, json={'result': result})

        actor = make_actor(handler, is_production=True)
        calls = {
            'get': lambda: actor.get('asset-1'),
            'commit_batch': lambda: actor.commit_batch(
                'batch', [1], AssetProperties(checksum=1, filename='f', content_type='t')
            ),
            'delete_asset': lambda: actor.delete_asset('asset-1'),
            'assets_list': actor.assets_list,
            'version': actor.version,
        }

        with pytest.raises(StorageRequestError, match=f'{method} returned a malformed result'):
            await calls[method]()


class TestGetActor:

    def test_requires_canister_id(self):
        with pytest.raises(ConfigurationError, match='canister_id is required'):
            get_actor(ActorConfig(identity='me'))

    def test_requires_identity(self):
        with pytest.raises(ConfigurationError, match='identity is required'):
            get_actor({'canister_id': 'abc-cai'})

    def test_accepts_dict(self):
        actor = get_actor({'canister_id': 'abc-cai', 'identity': 'me', 'host': 'http://localhost:4943'})

        assert isinstance(actor, HttpFileStorageActor)
        assert actor.config.host == 'http://localhost:4943'
