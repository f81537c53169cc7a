import logging
from typing import Callable, List, Optional

from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from screencast.core.config import Settings, settings as default_settings
from screencast.core.errors import (
    ConfigurationError,
    NotFoundError,
    SigningError,
    TransportError,
    ValidationError,
)
from screencast.db.repositories.analytics import AnalyticsRepository
from screencast.db.repositories.videos import VideoMetadataRepository
from screencast.features.analytics.services import average_completion
from screencast.utils.media_files import build_object_key, check_size, looks_like_video, new_video_id
from screencast.utils.s3 import is_not_found, make_s3_internal, make_s3_public, presign_get_url

logger = logging.getLogger(__name__)

S3Factory = Callable[[], object]

VIDEO_NOT_FOUND = "Video not found"
DEFAULT_FILE_NAME = "recording.webm"


class _StorageMixin:
    """Accès S3 partagé : clés dérivées de l'id, clients interne/public injectables."""

    def _init_storage(
        self,
        cfg: Settings,
        s3_client_internal_factory: Optional[S3Factory],
        s3_client_public_factory: Optional[S3Factory],
    ) -> None:
        self.settings = cfg
        self._s3_internal_factory = s3_client_internal_factory or (lambda: make_s3_internal(cfg))
        self._s3_public_factory = s3_client_public_factory or (lambda: make_s3_public(cfg))

    def _key_for(self, video_id: str) -> str:
        return build_object_key(
            prefix=self.settings.VIDEO_KEY_PREFIX,
            video_id=video_id,
            ext_with_dot=self.settings.VIDEO_EXTENSION,
        )

    def _sign(self, key: str, *, ttl: int) -> str:
        try:
            s3 = self._s3_public_factory()
            return presign_get_url(
                s3,
                bucket=self.settings.S3_BUCKET,
                key=key,
                content_type=self.settings.VIDEO_CONTENT_TYPE,
                ttl=ttl,
            )
        except (BotoCoreError, ClientError, ValueError) as e:
            raise SigningError("Failed to generate video URL", details=str(e))


class UploadService(_StorageMixin):
    """
    Orchestration de l'upload : id neuf -> PUT S3 -> URL signée 7 jours -> ligne de métadonnées.
    La ligne de métadonnées est best-effort : l'id et les octets sont la source de vérité.
    Pas de déduplication par hash : réuploader les mêmes octets crée un nouvel id.
    """

    def __init__(
        self,
        *,
        repo: VideoMetadataRepository,
        cfg: Settings = default_settings,
        s3_client_internal_factory: Optional[S3Factory] = None,
        s3_client_public_factory: Optional[S3Factory] = None,
    ):
        self.repo = repo
        self._init_storage(cfg, s3_client_internal_factory, s3_client_public_factory)

    async def upload(self, file: Optional[UploadFile], *, name: Optional[str] = None) -> dict:
        if file is None:
            raise ValidationError("No file")
        raw = await file.read()
        return await run_in_threadpool(self.store, raw, name=name or file.filename)

    def store(self, raw: bytes, *, name: Optional[str] = None) -> dict:
        try:
            size = check_size(raw, max_mb=self.settings.MAX_UPLOAD_MB)
        except ValueError as e:
            raise ValidationError(str(e))

        self.settings.require_storage()

        is_video, mime = looks_like_video(raw)
        if not is_video:
            logger.warning("upload payload not recognised as video (detected %s), storing as %s",
                           mime or "unknown", self.settings.VIDEO_CONTENT_TYPE)

        video_id = new_video_id()
        key = self._key_for(video_id)

        try:
            s3 = self._s3_internal_factory()
            s3.put_object(
                Bucket=self.settings.S3_BUCKET,
                Key=key,
                Body=raw,
                ContentType=self.settings.VIDEO_CONTENT_TYPE,
            )
        except NoCredentialsError as e:
            raise ConfigurationError("Object storage credentials rejected", details=str(e))
        except (BotoCoreError, ClientError) as e:
            raise TransportError("Failed to upload video", details=str(e))

        url = self._sign(key, ttl=self.settings.UPLOAD_URL_TTL_SECONDS)
        logger.info("stored video %s (%d bytes) at %s", video_id, size, key)

        try:
            self.repo.add(id=video_id, file_name=name or DEFAULT_FILE_NAME, size=size)
        except Exception:
            self.repo.session.rollback()
            logger.warning("metadata write failed for video %s, upload kept", video_id, exc_info=True)

        return {"id": video_id, "url": url}


class DeliveryService(_StorageMixin):
    """
    Résout un id en URL de lecture (1h) + lien de partage.
    Une sonde d'existence non concluante n'empêche pas de signer l'URL.
    """

    def __init__(
        self,
        *,
        cfg: Settings = default_settings,
        s3_client_internal_factory: Optional[S3Factory] = None,
        s3_client_public_factory: Optional[S3Factory] = None,
    ):
        self._init_storage(cfg, s3_client_internal_factory, s3_client_public_factory)

    def share_url(self, video_id: str) -> str:
        return f"{self.settings.APP_BASE_URL}/videos/{video_id}"

    def _probe(self, key: str) -> None:
        try:
            s3 = self._s3_internal_factory()
            s3.head_object(Bucket=self.settings.S3_BUCKET, Key=key)
        except ClientError as e:
            if is_not_found(e):
                raise NotFoundError(VIDEO_NOT_FOUND)
            logger.warning("could not verify existence of %s: %s", key, e)
        except BotoCoreError as e:
            logger.warning("could not verify existence of %s: %s", key, e)

    def resolve(self, video_id: str) -> dict:
        self.settings.require_storage()
        key = self._key_for(video_id)
        self._probe(key)
        url = self._sign(key, ttl=self.settings.DELIVERY_URL_TTL_SECONDS)
        return {"url": url, "share_url": self.share_url(video_id)}


class VideoCatalogService:
    """Liste des vidéos (plus récentes d'abord) enrichie des statistiques."""

    def __init__(self, *, repo: VideoMetadataRepository, analytics_repo: AnalyticsRepository):
        self.repo = repo
        self.analytics_repo = analytics_repo

    def list(self) -> List[dict]:
        videos = self.repo.list_newest_first()
        stats = self.analytics_repo.read_many(v.id for v in videos)
        items = []
        for v in videos:
            record = stats[v.id]
            items.append({
                "id": v.id,
                "created_at": v.created_at,
                "file_name": v.file_name,
                "size": v.size,
                "views": record.views or 0,
                "average_completion": average_completion(record.watch_sessions),
                "duration": record.duration or 0.0,
            })
        return items

    def delete(self, video_id: str) -> None:
        """Supprime la ligne de métadonnées seulement ; l'objet S3 et les stats restent."""
        video = self.repo.get(video_id)
        if not video:
            raise NotFoundError(VIDEO_NOT_FOUND)
        self.repo.delete(video)
