from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Codes MediaError du lecteur HTML5
MEDIA_ERR_ABORTED = 1
MEDIA_ERR_NETWORK = 2
MEDIA_ERR_DECODE = 3
MEDIA_ERR_SRC_NOT_SUPPORTED = 4


class PlaybackFailureKind(str, Enum):
    NETWORK = "network"
    UNSUPPORTED = "unsupported"
    DECODE = "decode"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PlaybackFailure:
    kind: PlaybackFailureKind
    message: str
    hint: str


_FAILURES = {
    PlaybackFailureKind.NETWORK: PlaybackFailure(
        PlaybackFailureKind.NETWORK,
        "The video could not be downloaded.",
        "Check your connection and the bucket CORS policy, then refresh the page to get a new link.",
    ),
    PlaybackFailureKind.UNSUPPORTED: PlaybackFailure(
        PlaybackFailureKind.UNSUPPORTED,
        "This browser cannot play this video format.",
        "Open the video in a browser with WebM support (Chrome, Firefox, Edge) or download it.",
    ),
    PlaybackFailureKind.DECODE: PlaybackFailure(
        PlaybackFailureKind.DECODE,
        "The video file is damaged or could not be decoded.",
        "Re-record or re-trim the video and upload it again.",
    ),
    PlaybackFailureKind.UNKNOWN: PlaybackFailure(
        PlaybackFailureKind.UNKNOWN,
        "Failed to load video.",
        "Please try refreshing the page.",
    ),
}


def classify_playback_error(code: Optional[int] = None, message: Optional[str] = None) -> PlaybackFailure:
    """Code MediaError (et/ou message brut) -> cause + conseil adapté."""
    text = (message or "").lower()
    if code == MEDIA_ERR_NETWORK or "cors" in text or "network" in text or "403" in text:
        return _FAILURES[PlaybackFailureKind.NETWORK]
    if code == MEDIA_ERR_SRC_NOT_SUPPORTED or "not supported" in text or "format" in text:
        return _FAILURES[PlaybackFailureKind.UNSUPPORTED]
    if code == MEDIA_ERR_DECODE or "decode" in text:
        return _FAILURES[PlaybackFailureKind.DECODE]
    return _FAILURES[PlaybackFailureKind.UNKNOWN]
