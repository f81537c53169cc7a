import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from screencast.core.errors import DecodeError, NotFoundError, TransportError, register_exception_handlers


def _app_raising(exc):
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise exc

    return app


@pytest.mark.parametrize(
    "exc,status,body",
    [
        (DecodeError("Trimmed video is empty"), 422, {"error": "Trimmed video is empty", "stage": "decode"}),
        (NotFoundError("Video not found"), 404, {"error": "Video not found"}),
        (TransportError("Failed to upload video", details="timeout"), 502,
         {"error": "Failed to upload video", "stage": "transport", "details": "timeout"}),
    ],
)
def test_errors_map_to_status_and_body(exc, status, body):
    response = TestClient(_app_raising(exc)).get("/boom")
    assert response.status_code == status
    assert response.json() == body
