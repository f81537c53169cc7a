import pytest

from screencast.features.tracking.playback import (
    MEDIA_ERR_DECODE,
    MEDIA_ERR_NETWORK,
    MEDIA_ERR_SRC_NOT_SUPPORTED,
    PlaybackFailureKind,
    classify_playback_error,
)


@pytest.mark.parametrize(
    "code,message,kind",
    [
        (MEDIA_ERR_NETWORK, None, PlaybackFailureKind.NETWORK),
        (None, "Blocked by CORS policy", PlaybackFailureKind.NETWORK),
        (None, "HTTP 403 Forbidden", PlaybackFailureKind.NETWORK),
        (MEDIA_ERR_SRC_NOT_SUPPORTED, None, PlaybackFailureKind.UNSUPPORTED),
        (None, "Format error", PlaybackFailureKind.UNSUPPORTED),
        (MEDIA_ERR_DECODE, None, PlaybackFailureKind.DECODE),
        (None, None, PlaybackFailureKind.UNKNOWN),
        (1, "aborted", PlaybackFailureKind.UNKNOWN),
    ],
)
def test_classify_playback_error(code, message, kind):
    failure = classify_playback_error(code, message)
    assert failure.kind is kind
    assert failure.message
    assert failure.hint
