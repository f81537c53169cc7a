"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_analytics_service() : crée un AnalyticsService à partir d’une session DB.

get_upload_service() : UploadService avec ses clients S3.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Facile à remplacer dans les tests (app.dependency_overrides).
"""

from fastapi import Depends
from sqlmodel import Session

from screencast.core.config import Settings, settings
from screencast.db.session import get_session

from screencast.db.repositories.analytics import AnalyticsRepository
from screencast.db.repositories.videos import VideoMetadataRepository
from screencast.features.analytics.services import AnalyticsService
from screencast.features.media.services import DeliveryService, UploadService, VideoCatalogService


def get_settings() -> Settings:
    return settings


# -----------------------------
# Repositories
# -----------------------------
def get_video_repository(session: Session = Depends(get_session)) -> VideoMetadataRepository:
    return VideoMetadataRepository(session)

def get_analytics_repository(session: Session = Depends(get_session)) -> AnalyticsRepository:
    return AnalyticsRepository(session)


# -----------------------------
# Analytics
# -----------------------------
def get_analytics_service(
    repo: AnalyticsRepository = Depends(get_analytics_repository),
) -> AnalyticsService:
    return AnalyticsService(repo)


# -----------------------------
# Media services
# -----------------------------
def get_upload_service(
    repo: VideoMetadataRepository = Depends(get_video_repository),
    cfg: Settings = Depends(get_settings),
) -> UploadService:
    return UploadService(repo=repo, cfg=cfg)

def get_delivery_service(cfg: Settings = Depends(get_settings)) -> DeliveryService:
    return DeliveryService(cfg=cfg)

def get_catalog_service(
    repo: VideoMetadataRepository = Depends(get_video_repository),
    analytics_repo: AnalyticsRepository = Depends(get_analytics_repository),
) -> VideoCatalogService:
    return VideoCatalogService(repo=repo, analytics_repo=analytics_repo)
