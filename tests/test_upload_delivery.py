from unittest.mock import MagicMock

import pytest
from botocore.exceptions import NoCredentialsError
from sqlmodel import select

from screencast.core.config import Settings
from screencast.core.errors import (
    ConfigurationError,
    NotFoundError,
    SigningError,
    TransportError,
    ValidationError,
)
from screencast.db.models.videos import VideoMetadata
from screencast.db.repositories.videos import VideoMetadataRepository
from screencast.features.media.services import DeliveryService, UploadService

from conftest import client_error, connection_error

PAYLOAD = b"\x1a\x45\xdf\xa3" + b"recording-bytes" * 10


def _upload_service(session, cfg, s3, repo=None) -> UploadService:
    return UploadService(
        repo=repo or VideoMetadataRepository(session),
        cfg=cfg,
        s3_client_internal_factory=lambda: s3,
        s3_client_public_factory=lambda: s3,
    )


def _delivery_service(cfg, s3) -> DeliveryService:
    return DeliveryService(cfg=cfg, s3_client_internal_factory=lambda: s3, s3_client_public_factory=lambda: s3)


# -------- Upload --------

def test_store_puts_bytes_under_id_key_and_records_metadata(session, test_settings, fake_s3):
    result = _upload_service(session, test_settings, fake_s3).store(PAYLOAD, name="My demo")

    key = f"recordings/videos/{result['id']}.webm"
    assert fake_s3.objects[key] == PAYLOAD
    assert fake_s3.signed == [(f"videos/{result['id']}.webm", 604800)]
    meta = session.get(VideoMetadata, result["id"])
    assert meta.file_name == "My demo"
    assert meta.size == len(PAYLOAD)


def test_identical_bytes_get_distinct_ids(session, test_settings, fake_s3):
    svc = _upload_service(session, test_settings, fake_s3)
    a = svc.store(PAYLOAD)
    b = svc.store(PAYLOAD)
    assert a["id"] != b["id"]
    assert len(session.exec(select(VideoMetadata)).all()) == 2


@pytest.mark.asyncio
async def test_upload_without_file_is_validation_error(session, test_settings, fake_s3):
    with pytest.raises(ValidationError, match="No file"):
        await _upload_service(session, test_settings, fake_s3).upload(None)


def test_empty_payload_is_validation_error(session, test_settings, fake_s3):
    with pytest.raises(ValidationError):
        _upload_service(session, test_settings, fake_s3).store(b"")
    assert fake_s3.objects == {}


def test_missing_storage_settings_fail_loudly(session, fake_s3):
    cfg = Settings(_env_file=None, S3_KEY="k", S3_SECRET=None, S3_BUCKET=None)
    with pytest.raises(ConfigurationError) as exc:
        _upload_service(session, cfg, fake_s3).store(PAYLOAD)
    assert exc.value.stage == "config"
    assert "S3_SECRET" in exc.value.details and "S3_BUCKET" in exc.value.details
    assert fake_s3.objects == {}


def test_put_failure_is_transport_error(session, test_settings, fake_s3):
    fake_s3.put_error = connection_error()
    with pytest.raises(TransportError) as exc:
        _upload_service(session, test_settings, fake_s3).store(PAYLOAD)
    assert exc.value.stage == "transport"
    assert "s3.test" in exc.value.details
    assert session.exec(select(VideoMetadata)).all() == []


def test_rejected_credentials_are_configuration_error(session, test_settings, fake_s3):
    fake_s3.put_error = NoCredentialsError()
    with pytest.raises(ConfigurationError):
        _upload_service(session, test_settings, fake_s3).store(PAYLOAD)


def test_signing_failure_is_signing_error(session, test_settings, fake_s3):
    fake_s3.sign_error = client_error("AccessDenied", 403, "GeneratePresignedUrl")
    with pytest.raises(SigningError) as exc:
        _upload_service(session, test_settings, fake_s3).store(PAYLOAD)
    assert exc.value.stage == "signing"


def test_metadata_failure_does_not_fail_upload(session, test_settings, fake_s3):
    repo = MagicMock(spec=VideoMetadataRepository)
    repo.session = MagicMock()
    repo.add.side_effect = RuntimeError("disk full")

    result = _upload_service(session, test_settings, fake_s3, repo=repo).store(PAYLOAD)

    assert result["id"]
    assert result["url"]
    assert f"recordings/videos/{result['id']}.webm" in fake_s3.objects
    repo.session.rollback.assert_called_once()


@pytest.mark.asyncio
async def test_upload_error_responses_name_the_stage(api_client, fake_s3):
    fake_s3.put_error = connection_error()
    response = await api_client.post(
        "/api/v1/videos/upload", files={"file": ("r.webm", PAYLOAD, "video/webm")}
    )
    assert response.status_code == 502
    assert response.json()["stage"] == "transport"

    missing = await api_client.post("/api/v1/videos/upload")
    assert missing.status_code == 400
    assert missing.json()["error"] == "No file"


# -------- Delivery --------

def test_resolve_existing_video(test_settings, fake_s3):
    fake_s3.objects["recordings/videos/abc.webm"] = b"x"
    out = _delivery_service(test_settings, fake_s3).resolve("abc")
    assert out["share_url"] == "https://rec.example.com/videos/abc"
    assert out["url"] == "https://s3.test/recordings/videos/abc.webm?X-Amz-Expires=3600"


@pytest.mark.parametrize("code", ["404", "NotFound", "NoSuchKey"])
def test_resolve_missing_video(test_settings, fake_s3, code):
    fake_s3.head_error = client_error(code, 404)
    with pytest.raises(NotFoundError, match="Video not found"):
        _delivery_service(test_settings, fake_s3).resolve("abc")


@pytest.mark.parametrize("error", [client_error("InternalError", 500), client_error("AccessDenied", 403), connection_error()])
def test_resolve_degrades_when_probe_is_inconclusive(test_settings, fake_s3, error):
    fake_s3.head_error = error
    out = _delivery_service(test_settings, fake_s3).resolve("abc")
    assert out["url"].startswith("https://s3.test/recordings/videos/abc.webm")


def test_resolve_signing_failure(test_settings, fake_s3):
    fake_s3.objects["recordings/videos/abc.webm"] = b"x"
    fake_s3.sign_error = connection_error()
    with pytest.raises(SigningError):
        _delivery_service(test_settings, fake_s3).resolve("abc")


def test_resolve_requires_bucket(fake_s3):
    cfg = Settings(_env_file=None, S3_KEY="k", S3_SECRET="s", S3_BUCKET=None)
    with pytest.raises(ConfigurationError):
        _delivery_service(cfg, fake_s3).resolve("abc")


def test_share_url_ignores_storage_location(fake_s3):
    cfg = Settings(_env_file=None, S3_KEY="k", S3_SECRET="s", S3_BUCKET="other",
                   S3_REGION="us-east-1", APP_BASE_URL="https://share.example")
    fake_s3.objects["other/videos/abc.webm"] = b"x"
    assert _delivery_service(cfg, fake_s3).resolve("abc")["share_url"] == "https://share.example/videos/abc"
