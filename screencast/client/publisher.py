import logging
from typing import Any, Dict, Optional

from screencast.client.api import ScreencastClient
from screencast.core.errors import ValidationError
from screencast.features.capture.cache import LATEST_RECORDING_KEY, TRIMMED_RECORDING_KEY, LocalCache
from screencast.features.capture.models import Asset, AssetStage

logger = logging.getLogger(__name__)


async def publish_asset(asset: Asset, api: ScreencastClient, *, name: Optional[str] = None) -> Dict[str, Any]:
    """Upload & partage : renvoie {id, url, page, asset}, `asset` passant à l'étape UPLOADED."""
    if asset.stage is AssetStage.UPLOADED:
        raise ValidationError("Asset already uploaded", details=f"remote id {asset.remote_id}")
    file_name = "trimmed.webm" if asset.stage is AssetStage.TRIMMED else "recording.webm"
    result = await api.upload(asset.data, file_name=file_name, name=name, content_type=asset.content_type)
    logger.info("published %s as %s", asset.id, result["id"])
    return {**result, "page": f"/videos/{result['id']}", "asset": asset.uploaded(result["id"])}


async def publish_recording(cache: LocalCache, api: ScreencastClient, *, name: Optional[str] = None,
                            prefer_trimmed: bool = True) -> Dict[str, Any]:
    """Publie l'asset du cache local : la découpe si elle existe, sinon l'enregistrement brut."""
    keys = (TRIMMED_RECORDING_KEY, LATEST_RECORDING_KEY) if prefer_trimmed else (LATEST_RECORDING_KEY,)
    for key in keys:
        data = await cache.get(key)
        if data:
            stage = AssetStage.TRIMMED if key == TRIMMED_RECORDING_KEY else AssetStage.CAPTURED
            return await publish_asset(Asset(data=data, stage=stage), api, name=name)
    raise ValidationError("No recording to publish")
