"""
➡️ But : Cache local persistant côté client (clé -> blob binaire), qui survit aux redémarrages.

Chaque appel est une transaction : tout ou rien, aucune écriture partielle visible.
Les appels sont asynchrones (exécutés dans un thread) pour ne pas bloquer la boucle.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime, LargeBinary, MetaData, String, Table, create_engine, delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine

from screencast.core.config import settings

# Clé fixe de l'enregistrement courant (écrasée à chaque arrêt)
LATEST_RECORDING_KEY = "latest-recording"
TRIMMED_RECORDING_KEY = "latest-trim"

_metadata = MetaData()

blobs = Table(
    "blobs",
    _metadata,
    Column("key", String, primary_key=True),
    Column("data", LargeBinary, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


class LocalCache:
    def __init__(self, path: Optional[str] = None, *, engine: Optional[Engine] = None):
        if engine is None:
            engine = create_engine(
                f"sqlite:///{path or settings.LOCAL_CACHE_PATH}",
                connect_args={"check_same_thread": False},
            )
        self.engine = engine
        _metadata.create_all(self.engine)

    # ---------- sync ----------

    def _put(self, key: str, data: bytes) -> None:
        stmt = sqlite_insert(blobs).values(key=key, data=data, updated_at=datetime.now(timezone.utc))
        stmt = stmt.on_conflict_do_update(
            index_elements=[blobs.c.key],
            set_={"data": stmt.excluded.data, "updated_at": stmt.excluded.updated_at},
        )
        with self.engine.begin() as conn:
            conn.execute(stmt)

    def _get(self, key: str) -> Optional[bytes]:
        with self.engine.connect() as conn:
            row = conn.execute(select(blobs.c.data).where(blobs.c.key == key)).first()
        return bytes(row[0]) if row else None

    def _delete(self, key: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(blobs).where(blobs.c.key == key))

    # ---------- async ----------

    async def put(self, key: str, data: bytes) -> None:
        await asyncio.to_thread(self._put, key, data)

    async def get(self, key: str) -> Optional[bytes]:
        return await asyncio.to_thread(self._get, key)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)

    def close(self) -> None:
        self.engine.dispose()
