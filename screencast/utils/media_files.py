from typing import Optional, Set, Tuple
from uuid import uuid4

import filetype


ALLOWED_VIDEO_MIME: Set[str] = {
    "video/mp4",
    "video/webm",
    "video/ogg",
    "video/quicktime",   # mov
    "video/x-matroska",  # mkv (selon filetype)
}


def new_video_id() -> str:
    """Identifiant opaque d'une vidéo. Jamais dérivé du contenu : deux uploads identiques = deux ids."""
    return str(uuid4())


def detect_mime(file_bytes: bytes) -> Optional[str]:
    """Type réel deviné via 'filetype', ou None si inconnu."""
    kind = filetype.guess(file_bytes)
    return kind.mime if kind else None


def check_size(file_bytes: bytes, *, max_mb: int) -> int:
    """
    Retourne la taille en octets.
    Lève ValueError si vide ou trop gros.
    """
    size = len(file_bytes)
    if size == 0:
        raise ValueError("Empty file")
    if size > max_mb * 1024 * 1024:
        raise ValueError(f"File too large (max {max_mb} MB)")
    return size


def looks_like_video(file_bytes: bytes) -> Tuple[bool, Optional[str]]:
    mime = detect_mime(file_bytes)
    return (mime in ALLOWED_VIDEO_MIME), mime


def build_object_key(*, prefix: str, video_id: str, ext_with_dot: str) -> str:
    """
    Clé S3 dérivée de l'id.
    Exemple: prefix="videos" -> videos/<uuid>.webm
    """
    ext = ext_with_dot if ext_with_dot.startswith(".") else f".{ext_with_dot}"
    return f"{prefix}/{video_id}{ext}"
