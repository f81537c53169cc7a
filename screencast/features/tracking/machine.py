"""
➡️ But : Machine à états du lecteur, sans dépendance au lecteur réel.

États : Idle, Playing, Paused, Ended.
Une seule fonction `transition(session, event)` consomme un événement discret
et produit zéro ou un échantillon "watch" à envoyer.

Chaque échantillon porte la position courante et la durée totale (jamais un delta).
Une progression nulle ou négative depuis le dernier point suivi n'émet rien.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

SAMPLE_INTERVAL_SECONDS = 5.0


class PlaybackState(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


# -------- Événements --------

@dataclass(frozen=True)
class Play:
    position: float


@dataclass(frozen=True)
class Pause:
    position: float
    duration: Optional[float]


@dataclass(frozen=True)
class Progress:
    """Lecture active : `elapsed` secondes jouées depuis le Progress précédent."""
    position: float
    duration: Optional[float]
    elapsed: float


@dataclass(frozen=True)
class End:
    duration: Optional[float]


PlaybackEvent = Union[Play, Pause, Progress, End]


@dataclass(frozen=True)
class WatchSample:
    watched: float
    duration: float


@dataclass(frozen=True)
class WatchSession:
    video_id: str
    state: PlaybackState = PlaybackState.IDLE
    last_tracked: float = 0.0
    # temps de lecture active accumulé depuis le dernier échantillon périodique
    active_elapsed: float = 0.0
    interval: float = SAMPLE_INTERVAL_SECONDS


def _sample(session: WatchSession, position: float, duration: Optional[float]) -> Optional[WatchSample]:
    if not duration or duration <= 0:
        return None
    if position - session.last_tracked <= 0:
        return None
    return WatchSample(watched=position, duration=duration)


def transition(session: WatchSession, event: PlaybackEvent) -> Tuple[WatchSession, Optional[WatchSample]]:
    if isinstance(event, Play):
        return replace(session, state=PlaybackState.PLAYING, last_tracked=event.position, active_elapsed=0.0), None

    if isinstance(event, Progress):
        if session.state is not PlaybackState.PLAYING or event.elapsed <= 0:
            return session, None
        active = session.active_elapsed + event.elapsed
        if active < session.interval:
            return replace(session, active_elapsed=active), None
        sample = _sample(session, event.position, event.duration)
        tracked = event.position if sample else session.last_tracked
        return replace(session, active_elapsed=0.0, last_tracked=tracked), sample

    if isinstance(event, Pause):
        if session.state is not PlaybackState.PLAYING:
            return session, None
        sample = _sample(session, event.position, event.duration)
        return replace(session, state=PlaybackState.PAUSED, last_tracked=event.position, active_elapsed=0.0), sample

    if isinstance(event, End):
        if session.state is PlaybackState.ENDED:
            return session, None
        final = event.duration or 0.0
        sample = _sample(session, final, event.duration)
        tracked = final if sample else session.last_tracked
        return replace(session, state=PlaybackState.ENDED, last_tracked=tracked, active_elapsed=0.0), sample

    raise TypeError(f"unknown playback event: {event!r}")


class ActiveClock:
    """Convertit des ticks d'horloge en temps de lecture active (ignore les pauses)."""

    def __init__(self) -> None:
        self._last: Optional[float] = None

    def tick(self, now: float, playing: bool) -> float:
        if not playing:
            self._last = None
            return 0.0
        if self._last is None:
            self._last = now
            return 0.0
        elapsed, self._last = now - self._last, now
        return max(0.0, elapsed)
