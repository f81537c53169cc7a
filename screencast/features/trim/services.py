import asyncio
import logging
from typing import Optional

from screencast.core.errors import DecodeError, TranscoderNotReadyError, ValidationError
from screencast.features.capture.cache import TRIMMED_RECORDING_KEY, LocalCache
from screencast.features.capture.models import Asset
from screencast.features.trim.transcoder import Transcoder

logger = logging.getLogger(__name__)


def validate_range(start: float, end: float, source_duration: float) -> None:
    """0 <= start < end <= source_duration, sinon ValidationError."""
    if start < 0:
        raise ValidationError("Start time must be >= 0")
    if start >= end:
        raise ValidationError("Start time must be less than end time")
    if end > source_duration:
        raise ValidationError("End time exceeds video duration",
                              details=f"end={end} duration={source_duration}")


class TrimOperator:
    """
    Découpe [start, end) d'un asset par copie de flux.

    - la plage est validée localement avant tout appel au transcodeur ;
    - tant que le transcodeur n'est pas chargé, trim échoue (TranscoderNotReadyError), sans file d'attente ;
    - une sortie vide est une DecodeError, jamais un asset vide.
    """

    def __init__(self, transcoder: Transcoder, *, cache: Optional[LocalCache] = None,
                 key: str = TRIMMED_RECORDING_KEY):
        self.transcoder = transcoder
        self.cache = cache
        self.key = key
        self._loading: Optional[asyncio.Task] = None

    @property
    def ready(self) -> bool:
        return bool(self.transcoder.ready)

    def prepare(self) -> asyncio.Task:
        """Lance le chargement du transcodeur une seule fois, en arrière-plan."""
        if self._loading is None or (self._loading.done() and not self.ready):
            self._loading = asyncio.ensure_future(self.transcoder.load())
        return self._loading

    async def trim(self, source: Asset, start: float, end: float,
                   source_duration: Optional[float] = None) -> Asset:
        if source_duration is not None:
            validate_range(start, end, source_duration)
        elif start < 0 or start >= end:
            validate_range(start, end, float("inf"))

        if not self.ready:
            raise TranscoderNotReadyError("Video or FFmpeg not ready")

        if source_duration is None:
            source_duration = await self.transcoder.probe_duration(source.data)
            validate_range(start, end, source_duration)

        output = await self.transcoder.cut(source.data, start, end)
        if not output:
            raise DecodeError("Trimmed video is empty")

        trimmed = source.trimmed(output)
        if self.cache is not None:
            await self.cache.put(self.key, trimmed.data)
        logger.info("trimmed [%s, %s) -> %d bytes", start, end, trimmed.size)
        return trimmed
