"""
➡️ But : Politique d'émission des événements de visionnage côté client.

ViewTracker : une seule "view" par session de navigation et par vidéo.
  - le drapeau de session n'est posé qu'après la réponse positive du serveur
    (un échec ne le pose pas : on pourra réessayer) ;
  - un nouveau montage annule le précédent ; la requête "view" en vol est
    partagée entre montages, donc plusieurs montages ne comptent qu'une vue.

WatchTracker : pilote la machine à états du lecteur et envoie les échantillons.
  Le curseur "dernier point suivi" n'avance qu'une fois la requête partie.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol, Set

from screencast.features.tracking.machine import (
    ActiveClock,
    End,
    Pause,
    Play,
    PlaybackEvent,
    Progress,
    WatchSession,
    transition,
)

logger = logging.getLogger(__name__)


class AnalyticsSink(Protocol):
    async def track_view(self, video_id: str) -> Dict[str, Any]: ...

    async def track_watch(self, video_id: str, watched: float, duration: float) -> Dict[str, Any]: ...

    async def get_analytics(self, video_id: str) -> Dict[str, Any]: ...


def view_flag_key(video_id: str) -> str:
    return f"view_tracked_{video_id}"


class SessionFlags:
    """Drapeaux limités à une session de navigation (équivalent sessionStorage)."""

    def __init__(self) -> None:
        self._flags: Set[str] = set()

    def is_set(self, key: str) -> bool:
        return key in self._flags

    def set(self, key: str) -> None:
        self._flags.add(key)

    def clear(self) -> None:
        self._flags.clear()


def _consume_result(task: asyncio.Task) -> None:
    # les échecs sont relus par les montages qui attendent ; sinon on les journalise
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("tracking request failed: %s", exc)


class ViewTracker:
    def __init__(self, client: AnalyticsSink, flags: Optional[SessionFlags] = None):
        self.client = client
        self.flags = flags if flags is not None else SessionFlags()
        self._inflight: Dict[str, asyncio.Task] = {}
        self._mounts: Dict[str, asyncio.Task] = {}

    def has_tracked(self, video_id: str) -> bool:
        return self.flags.is_set(view_flag_key(video_id))

    def mount(self, video_id: str) -> asyncio.Task:
        """
        Page vidéo affichée : compte la vue si besoin, puis recharge les statistiques.
        Le montage précédent pour cet id est annulé ; sa réponse ne pourra plus rien écraser.
        """
        prior = self._mounts.get(video_id)
        if prior is not None and not prior.done():
            prior.cancel()
        task = asyncio.ensure_future(self._mount(video_id))
        self._mounts[video_id] = task
        return task

    def unmount(self, video_id: str) -> None:
        task = self._mounts.pop(video_id, None)
        if task is not None and not task.done():
            task.cancel()

    async def _mount(self, video_id: str) -> Dict[str, Any]:
        if not self.has_tracked(video_id):
            # shield : annuler ce montage ne doit pas annuler la requête partagée
            await asyncio.shield(self._post_view_once(video_id))
        return await self.client.get_analytics(video_id)

    def _post_view_once(self, video_id: str) -> asyncio.Task:
        task = self._inflight.get(video_id)
        if task is None:
            task = asyncio.ensure_future(self._post_view(video_id))
            self._inflight[video_id] = task

            def _forget(t: asyncio.Task) -> None:
                if self._inflight.get(video_id) is t:
                    del self._inflight[video_id]
                _consume_result(t)

            task.add_done_callback(_forget)
        return task

    async def _post_view(self, video_id: str) -> None:
        await self.client.track_view(video_id)
        self.flags.set(view_flag_key(video_id))
        logger.debug("view tracked for %s", video_id)

    async def close(self) -> None:
        """Navigation : annule tout ce qui est encore en vol."""
        tasks = [*self._mounts.values(), *self._inflight.values()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._mounts.clear()
        self._inflight.clear()


class WatchTracker:
    def __init__(self, video_id: str, client: AnalyticsSink):
        self.client = client
        self.session = WatchSession(video_id=video_id)
        self.clock = ActiveClock()
        self._pending: Set[asyncio.Task] = set()

    @property
    def video_id(self) -> str:
        return self.session.video_id

    def handle(self, event: PlaybackEvent) -> Optional[asyncio.Task]:
        """Applique l'événement ; renvoie la requête lancée, s'il y en a une."""
        new_session, sample = transition(self.session, event)
        if sample is None:
            self.session = new_session
            return None
        task = asyncio.ensure_future(self.client.track_watch(self.video_id, sample.watched, sample.duration))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        task.add_done_callback(_consume_result)
        # la requête est partie : le curseur peut avancer
        self.session = new_session
        return task

    # -------- Raccourcis branchés sur les événements du lecteur --------

    def on_play(self, position: float) -> Optional[asyncio.Task]:
        return self.handle(Play(position))

    def on_pause(self, position: float, duration: Optional[float]) -> Optional[asyncio.Task]:
        return self.handle(Pause(position, duration))

    def on_ended(self, duration: Optional[float]) -> Optional[asyncio.Task]:
        return self.handle(End(duration))

    def on_tick(self, now: float, *, position: float, duration: Optional[float], playing: bool) -> Optional[asyncio.Task]:
        """Tick d'horloge (ex: toutes les secondes) ; seul le temps de lecture active compte."""
        elapsed = self.clock.tick(now, playing)
        if elapsed <= 0:
            return None
        return self.handle(Progress(position, duration, elapsed))

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        for task in list(self._pending):
            task.cancel()
        await self.drain()
