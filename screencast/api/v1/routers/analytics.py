import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query

from screencast.api.v1.dependencies import get_analytics_service
from screencast.core.errors import ScreencastError
from screencast.features.analytics.schemas import (
    AnalyticsEventIn,
    AnalyticsOut,
    ViewTrackedOut,
    WatchTrackedOut,
)
from screencast.features.analytics.services import AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/analytics",
    tags=["analytics"],
)

@router.post(
    "",
    summary="Enregistrer une vue ou un échantillon de visionnage",
    description=(
        "`action=view` : +1 vue. "
        "`action=watch` : `watched` (position courante) et `duration` requis, tous deux >= 0."
    ),
    response_model=Union[ViewTrackedOut, WatchTrackedOut],
    responses={400: {"description": "Id manquant ou combinaison invalide"}},
)
def track_event(
    payload: AnalyticsEventIn,
    svc: AnalyticsService = Depends(get_analytics_service),
):
    logger.debug("analytics event received: %s", payload.model_dump())
    try:
        data = svc.track(
            video_id=payload.id,
            action=payload.action,
            watched=payload.watched,
            duration=payload.duration,
        )
    except ScreencastError:
        raise
    except Exception as e:
        logger.exception("error recording analytics")
        raise ScreencastError("Failed to record analytics", details=str(e))

    if "views" in data:
        return ViewTrackedOut(**data)
    return WatchTrackedOut(**data)

@router.get(
    "",
    summary="Lire les statistiques d'une vidéo",
    response_model=AnalyticsOut,
    responses={400: {"description": "Id manquant"}},
)
def read_analytics(
    id: Optional[str] = Query(None, description="Id de la vidéo"),
    svc: AnalyticsService = Depends(get_analytics_service),
):
    try:
        return AnalyticsOut(**svc.read(id))
    except ScreencastError:
        raise
    except Exception as e:
        logger.exception("error fetching analytics")
        raise ScreencastError("Failed to fetch analytics", details=str(e))
