"""
➡️ But : Adaptateur vers le transcodeur externe (ffmpeg), vu comme une boîte noire
qui découpe un intervalle de temps par copie de flux (sans ré-encodage).

Le transcodeur se charge une seule fois, paresseusement et en arrière-plan :
tant que le chargement n'est pas terminé, `ready` vaut False.
"""

import asyncio
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional, Protocol

import ffmpeg

from screencast.core.config import settings
from screencast.core.errors import ConfigurationError, DecodeError

logger = logging.getLogger(__name__)


class Transcoder(Protocol):
    ready: bool

    async def load(self) -> None: ...

    async def cut(self, data: bytes, start: float, end: float) -> bytes: ...

    async def probe_duration(self, data: bytes) -> float: ...


class FfmpegTranscoder:
    def __init__(
        self,
        *,
        ffmpeg_binary: str = settings.FFMPEG_BINARY,
        ffprobe_binary: str = settings.FFPROBE_BINARY,
        extension: str = settings.VIDEO_EXTENSION,
    ):
        self.ffmpeg_binary = ffmpeg_binary
        self.ffprobe_binary = ffprobe_binary
        self.extension = extension
        self.ready = False
        self._load_task: Optional[asyncio.Task] = None

    # -------- Chargement --------

    def _check_binaries(self) -> None:
        for binary in (self.ffmpeg_binary, self.ffprobe_binary):
            if shutil.which(binary) is None:
                raise ConfigurationError("Failed to load FFmpeg", details=f"{binary} not found on PATH")
        proc = subprocess.run([self.ffmpeg_binary, "-version"], capture_output=True)
        if proc.returncode != 0:
            raise ConfigurationError("Failed to load FFmpeg", details=proc.stderr.decode(errors="replace"))
        logger.debug("ffmpeg: %s", proc.stdout.decode(errors="replace").splitlines()[0])

    async def load(self) -> None:
        """Idempotent : plusieurs appels partagent le même chargement."""
        if self.ready:
            return
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(asyncio.to_thread(self._check_binaries))
        try:
            await asyncio.shield(self._load_task)
        except Exception:
            # un échec de chargement pourra être retenté par un nouvel appel
            self._load_task = None
            raise
        self.ready = True

    # -------- Opérations --------

    def _cut_sync(self, data: bytes, start: float, end: float) -> bytes:
        with tempfile.TemporaryDirectory(prefix="screencast-trim-") as tmp:
            src = Path(tmp) / f"input{self.extension}"
            dst = Path(tmp) / f"output{self.extension}"
            src.write_bytes(data)
            try:
                (
                    ffmpeg
                    .input(str(src))
                    .output(str(dst), ss=start, to=end, c="copy")
                    .overwrite_output()
                    .run(cmd=self.ffmpeg_binary, quiet=True)
                )
            except ffmpeg.Error as e:
                stderr = e.stderr.decode(errors="replace") if e.stderr else str(e)
                raise DecodeError("Failed to trim video", details=stderr.strip()[-500:])
            return dst.read_bytes() if dst.exists() else b""

    def _probe_sync(self, data: bytes) -> float:
        with tempfile.TemporaryDirectory(prefix="screencast-probe-") as tmp:
            src = Path(tmp) / f"input{self.extension}"
            src.write_bytes(data)
            try:
                probe = ffmpeg.probe(str(src), cmd=self.ffprobe_binary)
            except ffmpeg.Error as e:
                stderr = e.stderr.decode(errors="replace") if e.stderr else str(e)
                raise DecodeError("Could not read video duration", details=stderr.strip()[-500:])
        duration = float(probe.get("format", {}).get("duration", 0.0) or 0.0)
        if duration <= 0:
            for stream in probe.get("streams", []):
                if stream.get("codec_type") == "video":
                    duration = float(stream.get("duration", 0.0) or 0.0)
                    if duration > 0:
                        break
        return duration

    async def cut(self, data: bytes, start: float, end: float) -> bytes:
        return await asyncio.to_thread(self._cut_sync, data, start, end)

    async def probe_duration(self, data: bytes) -> float:
        return await asyncio.to_thread(self._probe_sync, data)
