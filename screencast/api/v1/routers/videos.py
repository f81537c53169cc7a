import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from screencast.api.v1.dependencies import (
    get_catalog_service,
    get_delivery_service,
    get_upload_service,
)
from screencast.core.errors import ScreencastError
from screencast.features.media.schemas import DeliveryOut, UploadOut, VideoListItem
from screencast.features.media.services import DeliveryService, UploadService, VideoCatalogService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/videos",
    tags=["videos"],
    responses={404: {"description": "Not Found"}},
)

@router.post(
    "/upload",
    summary="Uploader un enregistrement (Client → Back → S3)",
    description="Reçoit un fichier vidéo, le charge dans S3 et enregistre ses métadonnées.",
    status_code=status.HTTP_201_CREATED,
    response_model=UploadOut,
    responses={
        400: {"description": "Fichier manquant ou vide"},
        500: {"description": "Stockage non configuré / signature impossible"},
        502: {"description": "Échec du transfert vers S3"},
    },
)
async def upload_video(
    file: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    upload_svc: UploadService = Depends(get_upload_service),
):
    data = await upload_svc.upload(file, name=name)
    return UploadOut(**data)

@router.get(
    "",
    summary="Lister les vidéos (plus récentes d'abord) avec leurs statistiques",
    response_model=List[VideoListItem],
)
def list_videos(catalog: VideoCatalogService = Depends(get_catalog_service)):
    try:
        return [VideoListItem(**item) for item in catalog.list()]
    except ScreencastError:
        raise
    except Exception as e:
        logger.exception("error fetching videos")
        raise ScreencastError("Failed to fetch videos", details=str(e))

@router.get(
    "/{video_id}",
    summary="Obtenir une URL de lecture signée (1h) et le lien de partage",
    response_model=DeliveryOut,
)
def get_video(
    video_id: str,
    delivery: DeliveryService = Depends(get_delivery_service),
):
    try:
        data = delivery.resolve(video_id)
    except ScreencastError:
        raise
    except Exception as e:
        logger.exception("error generating video URL for %s", video_id)
        raise ScreencastError("Failed to generate video URL", details=str(e))
    return DeliveryOut(**data)

@router.delete(
    "/{video_id}",
    summary="Supprimer les métadonnées d'une vidéo",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        204: {"description": "Supprimée"},
        404: {"description": "Introuvable"},
    },
)
def delete_video(
    video_id: str,
    catalog: VideoCatalogService = Depends(get_catalog_service),
):
    catalog.delete(video_id)
    return None
