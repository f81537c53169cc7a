"""
➡️ But : Moteur de statistiques de visionnage.

- incrementView : +1 vue (atomique par id).
- recordWatchSession : ajoute un échantillon de complétion (0-100), cumule le temps vu.
- averageCompletion : dérivé à la lecture, jamais stocké.

Chaque échantillon "watch" est complet (position courante + durée), jamais un delta.
"""

import logging
import math
from typing import Optional, Sequence

from screencast.core.errors import ValidationError
from screencast.db.models.analytics import AnalyticsRecord
from screencast.db.repositories.analytics import AnalyticsRepository

logger = logging.getLogger(__name__)

ACTION_VIEW = "view"
ACTION_WATCH = "watch"


def round_half_up(value: float) -> int:
    """Arrondi à l'entier le plus proche, .5 vers le haut (valeurs positives)."""
    return int(math.floor(value + 0.5))


def completion_percentage(watched: float, duration: float) -> int:
    if duration <= 0:
        return 0
    return round_half_up(min(100.0, 100.0 * watched / duration))


def average_completion(watch_sessions: Optional[Sequence[int]]) -> int:
    if not watch_sessions:
        return 0
    return round_half_up(sum(watch_sessions) / len(watch_sessions))


class AnalyticsService:
    def __init__(self, repo: AnalyticsRepository):
        self.repo = repo

    # -------- Helpers --------

    @staticmethod
    def _require_id(video_id: Optional[str]) -> str:
        if not video_id or not str(video_id).strip():
            raise ValidationError("Video ID is required")
        return str(video_id).strip()

    # -------- Writes --------

    def increment_view(self, video_id: str) -> int:
        video_id = self._require_id(video_id)
        views = self.repo.increment_views(video_id)
        logger.debug("view recorded for %s (views=%d)", video_id, views)
        return views

    def record_watch_session(self, video_id: str, watched: float, duration: float) -> AnalyticsRecord:
        video_id = self._require_id(video_id)
        if watched is None or duration is None:
            raise ValidationError("Invalid action", details="watch requires 'watched' and 'duration'")
        if not (math.isfinite(watched) and math.isfinite(duration)):
            raise ValidationError("Invalid action", details="'watched' and 'duration' must be finite numbers")
        if watched < 0 or duration < 0:
            raise ValidationError("Invalid action", details="'watched' and 'duration' must be >= 0")

        pct = completion_percentage(watched, duration)

        def apply(record: AnalyticsRecord) -> None:
            record.watch_sessions = [*(record.watch_sessions or []), pct]
            record.total_watch_time = (record.total_watch_time or 0.0) + watched
            # une durée absente (0) ne remplace jamais une durée connue
            if duration:
                record.duration = duration

        record = self.repo.write_atomic(video_id, apply)
        logger.debug(
            "watch session for %s: watched=%.2f duration=%.2f completion=%d%%",
            video_id, watched, duration, pct,
        )
        return record

    def track(self, *, video_id: Optional[str], action: Optional[str],
              watched: Optional[float] = None, duration: Optional[float] = None) -> dict:
        """Point d'entrée unique de l'API d'écriture : dispatch selon `action`."""
        video_id = self._require_id(video_id)

        if action == ACTION_VIEW:
            return {"success": True, "views": self.increment_view(video_id)}

        if action == ACTION_WATCH and watched is not None and duration is not None:
            record = self.record_watch_session(video_id, watched, duration)
            return {
                "success": True,
                "average_completion": average_completion(record.watch_sessions),
                "total_watch_time": record.total_watch_time,
            }

        raise ValidationError("Invalid action")

    # -------- Reads --------

    def get_average_completion(self, video_id: str) -> int:
        return average_completion(self.repo.read(self._require_id(video_id)).watch_sessions)

    def read(self, video_id: Optional[str]) -> dict:
        record = self.repo.read(self._require_id(video_id))
        return {
            "views": record.views,
            "total_watch_time": record.total_watch_time,
            "duration": record.duration,
            "average_completion": average_completion(record.watch_sessions),
            "watch_sessions": len(record.watch_sessions or []),
        }
