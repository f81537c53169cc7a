from typing import Optional
from sqlmodel import Field

from .base import TimestampedDB


class VideoMetadata(TimestampedDB, table=True):
    """Vidéos stockées dans S3, référencées en DB. Ligne créée une fois à l'upload, jamais modifiée."""

    __tablename__ = "video_metadata"

    id: str = Field(primary_key=True, description="UUID de la vidéo (clé de l'objet S3)")
    file_name: str = Field(description="Nom affiché")
    size: Optional[int] = Field(default=None, description="Taille en octets")
