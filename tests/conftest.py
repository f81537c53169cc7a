from typing import Dict, Optional

import pytest
import pytest_asyncio
from botocore.exceptions import ClientError, EndpointConnectionError
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlmodel import Session

from screencast.api.v1.dependencies import (
    get_delivery_service,
    get_settings,
    get_upload_service,
    get_video_repository,
)
from screencast.core.config import Settings
from screencast.db.repositories.videos import VideoMetadataRepository
from screencast.db.session import build_engine, get_session, init_db
from screencast.features.media.services import DeliveryService, UploadService
from screencast.main import app


class FakeS3:
    """Client S3 en mémoire : put/head/presign, avec pannes injectables."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.put_error: Optional[Exception] = None
        self.head_error: Optional[Exception] = None
        self.sign_error: Optional[Exception] = None
        self.signed = []

    def put_object(self, *, Bucket, Key, Body, ContentType):
        if self.put_error:
            raise self.put_error
        self.objects[f"{Bucket}/{Key}"] = bytes(Body)
        self.content_types[f"{Bucket}/{Key}"] = ContentType
        return {"ETag": '"etag"'}

    def head_object(self, *, Bucket, Key):
        if self.head_error:
            raise self.head_error
        if f"{Bucket}/{Key}" not in self.objects:
            raise ClientError(
                {"Error": {"Code": "404", "Message": "Not Found"}, "ResponseMetadata": {"HTTPStatusCode": 404}},
                "HeadObject",
            )
        return {"ContentLength": len(self.objects[f"{Bucket}/{Key}"])}

    def generate_presigned_url(self, ClientMethod, Params, ExpiresIn):
        if self.sign_error:
            raise self.sign_error
        self.signed.append((Params["Key"], ExpiresIn))
        return f"https://s3.test/{Params['Bucket']}/{Params['Key']}?X-Amz-Expires={ExpiresIn}"


def client_error(code: str, status: int, op: str = "HeadObject") -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": code}, "ResponseMetadata": {"HTTPStatusCode": status}},
        op,
    )


def connection_error() -> EndpointConnectionError:
    return EndpointConnectionError(endpoint_url="https://s3.test")


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        ENV="test",
        SQLITE_PATH=str(tmp_path / "api.db"),
        APP_BASE_URL="https://rec.example.com/",
        S3_KEY="test-key",
        S3_SECRET="test-secret",
        S3_BUCKET="recordings",
        LOCAL_CACHE_PATH=str(tmp_path / "cache.db"),
    )


@pytest.fixture
def engine(test_settings):
    engine = build_engine(test_settings.DATABASE_URL)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def fake_s3() -> FakeS3:
    return FakeS3()


@pytest_asyncio.fixture
async def api_client(engine, test_settings, fake_s3):
    def override_get_session():
        with Session(engine) as session:
            yield session

    def override_upload(repo: VideoMetadataRepository = Depends(get_video_repository)):
        return UploadService(
            repo=repo,
            cfg=test_settings,
            s3_client_internal_factory=lambda: fake_s3,
            s3_client_public_factory=lambda: fake_s3,
        )

    def override_delivery():
        return DeliveryService(
            cfg=test_settings,
            s3_client_internal_factory=lambda: fake_s3,
            s3_client_public_factory=lambda: fake_s3,
        )

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_upload_service] = override_upload
    app.dependency_overrides[get_delivery_service] = override_delivery

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
