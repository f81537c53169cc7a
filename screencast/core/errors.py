"""
➡️ But : Taxonomie d'erreurs métier, indépendante du web.

Les services lèvent ces exceptions ; main.py les traduit en réponses JSON
{"error", "stage", "details"} avec le bon code HTTP.
Le client HTTP (screencast.client.api) fait le chemin inverse.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class ScreencastError(Exception):
    """Erreur de base : message lisible + étape en échec + détail de diagnostic."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    stage: str = "internal"

    def __init__(self, message: str, *, details: Optional[str] = None, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if stage is not None:
            self.stage = stage

    def to_dict(self) -> dict:
        body = {"error": self.message, "stage": self.stage}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ScreencastError):
    status_code = status.HTTP_400_BAD_REQUEST
    stage = "input"


class NotFoundError(ScreencastError):
    status_code = status.HTTP_404_NOT_FOUND
    stage = "lookup"

    def to_dict(self) -> dict:
        return {"error": self.message}


class ConfigurationError(ScreencastError):
    stage = "config"


class TransportError(ScreencastError):
    """Échec réseau / stockage. Le client peut réessayer."""
    status_code = status.HTTP_502_BAD_GATEWAY
    stage = "transport"


class SigningError(ScreencastError):
    stage = "signing"


class DecodeError(ScreencastError):
    """Le transcodeur a produit une sortie vide ou illisible. Jamais réessayé automatiquement."""
    status_code = 422
    stage = "decode"


class TranscoderNotReadyError(ScreencastError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    stage = "transcoder"


class CaptureError(ScreencastError):
    """Flux vidéo ou audio refusé / indisponible."""
    stage = "capture"


class CaptureStateError(ScreencastError):
    status_code = status.HTTP_409_CONFLICT
    stage = "capture"


# -----------------------------
# FastAPI wiring
# -----------------------------
async def _handle_screencast_error(request: Request, exc: ScreencastError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ScreencastError, _handle_screencast_error)
