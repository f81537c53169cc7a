from datetime import datetime
from typing import Optional

from screencast.features.analytics.schemas import CamelModel


class UploadOut(CamelModel):
    id: str
    url: str


class DeliveryOut(CamelModel):
    url: str
    share_url: str


class VideoListItem(CamelModel):
    id: str
    created_at: datetime
    file_name: str
    size: Optional[int] = None
    views: int = 0
    average_completion: int = 0
    duration: float = 0.0
