"""
➡️ But : Persistance des statistiques, clé par clé.

Interface : read(id) et write_atomic(id, mutation).
Chaque lecture-modification-écriture d'un même id est sérialisée :
- verrou par id dans le process (KeyedLocks),
- SELECT ... FOR UPDATE quand le moteur le supporte (Postgres),
- incrément des vues via un UPDATE atomique (views = views + 1).
"""

import logging
from typing import Callable, Dict, Iterable, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.attributes import flag_modified
from sqlmodel import Session, select

from screencast.db.models.analytics import AnalyticsRecord
from screencast.utils.locks import KeyedLocks

logger = logging.getLogger(__name__)

Mutation = Callable[[AnalyticsRecord], None]

# Partagé entre toutes les sessions du process
_locks = KeyedLocks()

# Une insertion concurrente (autre process) peut gagner la course : on réessaie une fois.
_MAX_ATTEMPTS = 2


def empty_record(video_id: str) -> AnalyticsRecord:
    return AnalyticsRecord(video_id=video_id, views=0, total_watch_time=0.0, duration=0.0, watch_sessions=[])


class AnalyticsRepository:
    def __init__(self, session: Session, locks: KeyedLocks = _locks):
        self.session = session
        self.locks = locks

    # ---------- READ ----------

    def read(self, video_id: str) -> AnalyticsRecord:
        """
        Retourne l'enregistrement, ou des valeurs à zéro pour un id jamais vu.
        Ne crée rien : la lecture est sans effet de bord.
        """
        record = self.session.get(AnalyticsRecord, video_id)
        if record is None:
            return empty_record(video_id)
        return record

    def read_many(self, video_ids: Iterable[str]) -> Dict[str, AnalyticsRecord]:
        ids = list(video_ids)
        if not ids:
            return {}
        rows = self.session.exec(
            select(AnalyticsRecord).where(AnalyticsRecord.video_id.in_(ids))
        ).all()
        found = {r.video_id: r for r in rows}
        return {i: found.get(i) or empty_record(i) for i in ids}

    # ---------- WRITE ----------

    def write_atomic(self, video_id: str, mutation: Mutation) -> AnalyticsRecord:
        """
        Applique `mutation` à l'enregistrement courant (créé à zéro si absent)
        et commit, sans qu'un autre écrivain du même id puisse s'intercaler.
        """
        with self.locks.hold(video_id):
            for attempt in range(1, _MAX_ATTEMPTS + 1):
                record = self._get_for_update(video_id)
                if record is None:
                    record = empty_record(video_id)
                    self.session.add(record)
                mutation(record)
                flag_modified(record, "watch_sessions")
                try:
                    self.session.commit()
                except IntegrityError:
                    self.session.rollback()
                    if attempt == _MAX_ATTEMPTS:
                        raise
                    logger.debug("analytics insert race on %s, retrying", video_id)
                    continue
                except Exception:
                    self.session.rollback()
                    raise
                self.session.refresh(record)
                return record
        raise AssertionError("unreachable")

    def increment_views(self, video_id: str) -> int:
        """views += 1 via un UPDATE atomique ; insère la ligne au premier passage."""
        with self.locks.hold(video_id):
            for attempt in range(1, _MAX_ATTEMPTS + 1):
                try:
                    result = self.session.connection().execute(
                        update(AnalyticsRecord)
                        .where(AnalyticsRecord.video_id == video_id)
                        .values(views=AnalyticsRecord.views + 1)
                    )
                    if result.rowcount == 0:
                        record = empty_record(video_id)
                        record.views = 1
                        self.session.add(record)
                    self.session.commit()
                except IntegrityError:
                    self.session.rollback()
                    if attempt == _MAX_ATTEMPTS:
                        raise
                    logger.debug("analytics insert race on %s, retrying", video_id)
                    continue
                except Exception:
                    self.session.rollback()
                    raise
                return self._fresh(video_id).views
        raise AssertionError("unreachable")

    # ---------- Helpers ----------

    def _get_for_update(self, video_id: str) -> Optional[AnalyticsRecord]:
        statement = (
            select(AnalyticsRecord)
            .where(AnalyticsRecord.video_id == video_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.session.exec(statement).first()

    def _fresh(self, video_id: str) -> AnalyticsRecord:
        record = self.session.get(AnalyticsRecord, video_id, populate_existing=True)
        return record if record is not None else empty_record(video_id)
