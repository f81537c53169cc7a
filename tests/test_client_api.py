import httpx
import pytest

from screencast.client.api import ScreencastClient
from screencast.client.publisher import publish_asset, publish_recording
from screencast.core.errors import NotFoundError, TransportError, ValidationError
from screencast.features.capture.cache import LATEST_RECORDING_KEY, TRIMMED_RECORDING_KEY, LocalCache
from screencast.features.capture.models import Asset, AssetStage

from conftest import connection_error

WEBM = bytes.fromhex("1a45dfa3") + b"\x00" * 32


@pytest.fixture
def client(api_client):
    return ScreencastClient(http=api_client)


@pytest.mark.asyncio
async def test_client_round_trip(client, fake_s3):
    uploaded = await client.upload(WEBM, name="demo")
    video_id = uploaded["id"]

    delivery = await client.resolve(video_id)
    assert delivery["shareUrl"].endswith(f"/videos/{video_id}")

    assert (await client.track_view(video_id))["views"] == 1
    watch = await client.track_watch(video_id, 6, 12)
    assert watch["averageCompletion"] == 50

    stats = await client.get_analytics(video_id)
    assert stats["views"] == 1
    assert stats["watchSessions"] == 1

    listing = await client.list_videos()
    assert listing[0]["id"] == video_id


@pytest.mark.asyncio
async def test_client_maps_error_responses(client, fake_s3):
    with pytest.raises(NotFoundError, match="Video not found"):
        await client.resolve("missing")

    with pytest.raises(ValidationError, match="Invalid action"):
        await client.track_watch("v", -1, 10)

    with pytest.raises(ValidationError, match="No file"):
        await client.upload(b"")

    fake_s3.put_error = connection_error()
    with pytest.raises(TransportError) as exc:
        await client.upload(WEBM)
    assert exc.value.stage == "transport"


@pytest.mark.asyncio
async def test_client_network_failure_is_transport_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://offline")
    async with ScreencastClient(http=http) as client:
        with pytest.raises(TransportError):
            await client.get_analytics("v")
    await http.aclose()


@pytest.mark.asyncio
async def test_publish_prefers_trimmed_recording(client, fake_s3, tmp_path):
    cache = LocalCache(str(tmp_path / "client-cache.db"))
    await cache.put(LATEST_RECORDING_KEY, WEBM + b"full")
    await cache.put(TRIMMED_RECORDING_KEY, WEBM + b"cut")

    published = await publish_recording(cache, client, name="clip")

    assert published["page"] == f"/videos/{published['id']}"
    assert published["asset"].stage is AssetStage.UPLOADED
    assert fake_s3.objects[f"recordings/videos/{published['id']}.webm"] == WEBM + b"cut"

    raw = await publish_recording(cache, client, prefer_trimmed=False)
    assert fake_s3.objects[f"recordings/videos/{raw['id']}.webm"] == WEBM + b"full"
    cache.close()


@pytest.mark.asyncio
async def test_publish_without_recording(client, tmp_path):
    cache = LocalCache(str(tmp_path / "empty.db"))
    with pytest.raises(ValidationError, match="No recording to publish"):
        await publish_recording(cache, client)
    cache.close()


@pytest.mark.asyncio
async def test_publish_moves_asset_to_uploaded(client, fake_s3):
    trimmed = Asset(data=WEBM + b"clip").trimmed(WEBM + b"cut")
    assert trimmed.stage is AssetStage.TRIMMED

    published = await publish_asset(trimmed, client)

    uploaded = published["asset"]
    assert uploaded.stage is AssetStage.UPLOADED
    assert uploaded.remote_id == published["id"]
    assert uploaded.data == trimmed.data
    assert trimmed.stage is AssetStage.TRIMMED

    with pytest.raises(ValidationError, match="Asset already uploaded"):
        await publish_asset(uploaded, client)
    assert len(fake_s3.objects) == 1
