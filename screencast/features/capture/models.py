from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional
from uuid import uuid4


class AssetStage(str, Enum):
    CAPTURED = "captured"
    TRIMMED = "trimmed"
    UPLOADED = "uploaded"


@dataclass(frozen=True)
class Asset:
    """Contenu vidéo binaire immuable + identité opaque côté client."""

    data: bytes
    stage: AssetStage = AssetStage.CAPTURED
    content_type: str = "video/webm"
    id: str = field(default_factory=lambda: uuid4().hex)
    # id serveur, connu une fois uploadé
    remote_id: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

    def trimmed(self, data: bytes) -> "Asset":
        """Nouvel asset (nouvelle identité) issu d'une découpe."""
        return Asset(data=data, stage=AssetStage.TRIMMED, content_type=self.content_type)

    def uploaded(self, remote_id: str) -> "Asset":
        return replace(self, stage=AssetStage.UPLOADED, remote_id=remote_id)
