from typing import Optional, Sequence
from sqlmodel import select

from screencast.db.repositories.base import BaseRepository
from screencast.db.models.videos import VideoMetadata


class VideoMetadataRepository(BaseRepository[VideoMetadata]):
    """Métadonnées des vidéos uploadées + requêtes spécifiques."""
    model = VideoMetadata

    def add(self, *, id: str, file_name: str, size: Optional[int]) -> VideoMetadata:
        """Insère la ligne si l'id est absent ; sinon renvoie l'existante telle quelle."""
        existing = self.get(id)
        if existing is not None:
            return existing
        return self.create(id=id, file_name=file_name, size=size)

    def list_newest_first(self) -> Sequence[VideoMetadata]:
        return self.session.exec(
            select(self.model).order_by(self.model.created_at.desc())
        ).all()
