"""
➡️ But : Machine à états de l'enregistrement côté client.

Idle -> Recording -> Stopped(asset) -> (nouveau start) -> Recording ...

- start : acquiert l'écran (vidéo) puis le micro (audio), combine leurs pistes.
  Un refus ou une indisponibilité ramène à Idle avec une CaptureError, sans nouvel essai.
- pendant l'enregistrement, les morceaux arrivent dans l'ordre (séquence finie).
- stop : concatène les morceaux en un seul Asset, l'écrit dans le cache local
  sous une clé fixe (écrase la précédente), et libère TOUTES les pistes, même en cas d'erreur.
"""

import asyncio
import logging
from enum import Enum
from typing import AsyncIterator, Callable, List, Optional, Protocol, Sequence

from screencast.core.config import settings
from screencast.core.errors import CaptureError, CaptureStateError
from screencast.features.capture.cache import LATEST_RECORDING_KEY, TRIMMED_RECORDING_KEY, LocalCache
from screencast.features.capture.models import Asset

logger = logging.getLogger(__name__)


class MediaTrack(Protocol):
    kind: str  # "video" | "audio"

    def stop(self) -> None: ...


class MediaDevices(Protocol):
    async def get_display_media(self) -> Sequence[MediaTrack]: ...

    async def get_user_media(self) -> Sequence[MediaTrack]: ...


class ChunkRecorder(Protocol):
    def chunks(self) -> AsyncIterator[bytes]: ...

    def stop(self) -> None: ...


RecorderFactory = Callable[[Sequence[MediaTrack]], ChunkRecorder]


class CaptureState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    STOPPED = "stopped"


def release_tracks(tracks: Sequence[MediaTrack]) -> None:
    for track in tracks:
        try:
            track.stop()
        except Exception:
            logger.warning("failed to stop %s track", getattr(track, "kind", "?"), exc_info=True)


class CaptureController:
    def __init__(
        self,
        *,
        devices: MediaDevices,
        recorder_factory: RecorderFactory,
        cache: LocalCache,
        key: str = LATEST_RECORDING_KEY,
        invalidates: Sequence[str] = (TRIMMED_RECORDING_KEY,),
        content_type: str = settings.VIDEO_CONTENT_TYPE,
    ):
        self.devices = devices
        self.recorder_factory = recorder_factory
        self.cache = cache
        self.key = key
        # clés dérivées de l'ancien enregistrement (ex: sa découpe)
        self.invalidates = tuple(invalidates)
        self.content_type = content_type

        self.state = CaptureState.IDLE
        self.asset: Optional[Asset] = None
        self._tracks: List[MediaTrack] = []
        self._chunks: List[bytes] = []
        self._recorder: Optional[ChunkRecorder] = None
        self._pump: Optional[asyncio.Task] = None

    @property
    def recording(self) -> bool:
        return self.state is CaptureState.RECORDING

    # -------- Transitions --------

    async def start(self) -> None:
        if self.recording:
            raise CaptureStateError("Already recording")

        # un nouveau départ abandonne la référence à l'asset précédent
        self.asset = None
        self.state = CaptureState.IDLE

        acquired: List[MediaTrack] = []
        try:
            display = list(await self.devices.get_display_media())
            acquired.extend(display)
            microphone = list(await self.devices.get_user_media())
            acquired.extend(microphone)
        except Exception as e:
            release_tracks(acquired)
            raise CaptureError("Could not acquire capture streams", details=str(e)) from e

        combined = [t for t in display if t.kind == "video"] + [t for t in microphone if t.kind == "audio"]
        try:
            recorder = self.recorder_factory(combined)
        except Exception as e:
            release_tracks(acquired)
            raise CaptureError("Could not start recorder", details=str(e)) from e

        self._tracks = acquired
        self._chunks = []
        self._recorder = recorder
        self._pump = asyncio.create_task(self._drain(recorder))
        self.state = CaptureState.RECORDING
        logger.info("recording started (%d video, %d audio tracks)",
                    sum(t.kind == "video" for t in combined), sum(t.kind == "audio" for t in combined))

    async def _drain(self, recorder: ChunkRecorder) -> None:
        async for chunk in recorder.chunks():
            if chunk:
                self._chunks.append(chunk)

    async def stop(self) -> Optional[Asset]:
        """Sans effet (None) si on n'enregistre pas."""
        if not self.recording:
            return None

        try:
            self._recorder.stop()
            await self._pump
            asset = Asset(data=b"".join(self._chunks), content_type=self.content_type)
            await self.cache.put(self.key, asset.data)
            for stale in self.invalidates:
                await self.cache.delete(stale)
        except Exception as e:
            self.state = CaptureState.IDLE
            raise CaptureError("Recording could not be finalised", details=str(e)) from e
        finally:
            release_tracks(self._tracks)
            self._tracks = []
            self._chunks = []
            self._recorder = None
            self._pump = None

        self.asset = asset
        self.state = CaptureState.STOPPED
        logger.info("recording stopped: %d bytes persisted under %r", asset.size, self.key)
        return asset

    async def restore(self) -> Optional[Asset]:
        """Recharge l'enregistrement persisté (ex : après un rechargement de page)."""
        if self.recording:
            return None
        data = await self.cache.get(self.key)
        if not data:
            return None
        self.asset = Asset(data=data, content_type=self.content_type)
        self.state = CaptureState.STOPPED
        return self.asset
