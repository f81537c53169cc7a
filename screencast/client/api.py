"""
➡️ But : Client HTTP asynchrone de l'API (upload, lecture, statistiques).

Traduit les réponses d'erreur en exceptions de screencast.core.errors :
400 -> ValidationError, 404 -> NotFoundError, 5xx -> selon le champ "stage",
échec réseau -> TransportError.
Toute requête est annulable (annulation de la tâche asyncio).
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from screencast.core.errors import (
    ConfigurationError,
    DecodeError,
    NotFoundError,
    ScreencastError,
    SigningError,
    TransportError,
    ValidationError,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

_STAGE_ERRORS = {
    "config": ConfigurationError,
    "transport": TransportError,
    "signing": SigningError,
    "decode": DecodeError,
}


def _raise_for_response(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = body.get("error") or body.get("detail") or f"HTTP {response.status_code}"
    if not isinstance(message, str):
        message = str(message)
    details = body.get("details")

    if response.status_code == 404:
        raise NotFoundError(message)
    if response.status_code in (400, 422) and body.get("stage") != "decode":
        raise ValidationError(message, details=details)
    error_cls = _STAGE_ERRORS.get(body.get("stage"), ScreencastError)
    raise error_cls(message, details=details or f"HTTP {response.status_code}")


class ScreencastClient:
    def __init__(self, base_url: str = "http://localhost:8080", *, http: Optional[httpx.AsyncClient] = None,
                 timeout: float = 30.0):
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "ScreencastClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self.http.request(method, f"{API_PREFIX}{path}", **kwargs)
        except httpx.TransportError as e:
            raise TransportError(f"{method} {path} failed", details=str(e)) from e
        _raise_for_response(response)
        return response

    # -------- Vidéos --------

    async def upload(self, data: bytes, *, file_name: str = "recording.webm",
                     name: Optional[str] = None, content_type: str = "video/webm") -> Dict[str, str]:
        if not data:
            raise ValidationError("No file")
        form = {"name": name} if name else None
        response = await self._request(
            "POST", "/videos/upload",
            files={"file": (file_name, data, content_type)},
            data=form,
        )
        return response.json()

    async def resolve(self, video_id: str) -> Dict[str, str]:
        return (await self._request("GET", f"/videos/{video_id}")).json()

    async def list_videos(self) -> List[Dict[str, Any]]:
        return (await self._request("GET", "/videos")).json()

    # -------- Statistiques --------

    async def track_view(self, video_id: str) -> Dict[str, Any]:
        return (await self._request("POST", "/analytics", json={"id": video_id, "action": "view"})).json()

    async def track_watch(self, video_id: str, watched: float, duration: float) -> Dict[str, Any]:
        payload = {"id": video_id, "action": "watch", "watched": watched, "duration": duration}
        return (await self._request("POST", "/analytics", json=payload)).json()

    async def get_analytics(self, video_id: str) -> Dict[str, Any]:
        return (await self._request("GET", "/analytics", params={"id": video_id})).json()
