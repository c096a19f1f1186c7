"""On-disk layout of track binaries and filesystem-safe name derivation."""
import mimetypes
import os
import re
from pathlib import Path
from typing import Optional, Tuple

from soundgate.config import DEFAULT_ALBUM, DEFAULT_EXTENSION

# Characters rejected by common filesystems, plus control characters
_ILLEGAL_RE = re.compile(r'[/\?<>\\:\*\|"\x00-\x1f\x80-\x9f]')
_RESERVED_RE = re.compile(r"^\.+$")
_WINDOWS_RESERVED_RE = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)
_WINDOWS_TRAILING_RE = re.compile(r"[\. ]+$")
_MAX_NAME_BYTES = 255
# Longer suffixes are treated as part of the name, not as an extension
_MAX_EXTENSION_BYTES = 16
# Uploads are staged as ".<stored name>.part" before the rename into place
STAGING_PREFIX = "."
STAGING_SUFFIX = ".part"

# Registered by some platforms under other types or not at all
_EXTRA_EXTENSIONS = {
    "audio/mpeg": ".mp3",
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/flac": ".flac",
    "audio/x-flac": ".flac",
    "audio/aac": ".aac",
    "audio/ogg": ".ogg",
    "audio/x-m4a": ".m4a",
    "audio/mp4": ".m4a",
}


def _truncate_bytes(text: str, max_bytes: int) -> str:
    return text.encode("utf-8")[: max(max_bytes, 0)].decode("utf-8", errors="ignore")


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def sanitize_filename(name: str, replacement: str = "") -> str:
    """Strip characters and names that are unsafe as a single path component."""
    cleaned = _ILLEGAL_RE.sub(replacement, name)
    cleaned = _RESERVED_RE.sub(replacement, cleaned)
    cleaned = _WINDOWS_RESERVED_RE.sub(replacement, cleaned)
    cleaned = _WINDOWS_TRAILING_RE.sub(replacement, cleaned)
    return _truncate_bytes(cleaned, _MAX_NAME_BYTES)


def split_extension(name: str) -> Tuple[str, str]:
    """Split off a plausible extension; an oversized suffix stays in the stem."""
    stem, ext = os.path.splitext(name)
    if _byte_len(ext) > _MAX_EXTENSION_BYTES:
        return name, ""
    return stem, ext


def extension_for(stored_file_name: str, mime_type: str) -> str:
    """Extension of the stored file, else one derived from the MIME type, else .mp3."""
    _stem, suffix = split_extension(stored_file_name)
    if suffix:
        return suffix.lower()
    ext = _EXTRA_EXTENSIONS.get(mime_type) or mimetypes.guess_extension(mime_type or "")
    return ext or DEFAULT_EXTENSION


class StorageLayout:
    """Per-user pending area and per-user/per-album approved area."""

    def __init__(self, pending_root: Path, music_root: Path) -> None:
        self.pending_root = Path(pending_root)
        self.music_root = Path(music_root)

    def _user_component(self, user_id: str) -> str:
        safe = sanitize_filename(user_id)
        if not safe:
            raise ValueError(f"User id {user_id!r} is not usable as a directory name")
        return safe

    def pending_dir(self, user_id: str) -> Path:
        return self.pending_root / self._user_component(user_id)

    def approved_root(self, user_id: str) -> Path:
        return self.music_root / self._user_component(user_id)

    def album_dir(self, user_id: str, album: str) -> Path:
        return self.approved_root(user_id) / (sanitize_filename(album) or DEFAULT_ALBUM)

    @staticmethod
    def staging_name(stored_file_name: str) -> str:
        return f"{STAGING_PREFIX}{stored_file_name}{STAGING_SUFFIX}"

    @staticmethod
    def stored_file_name(track_id: str, original_file_name: str, timestamp_ms: int) -> str:
        """Timestamp-prefixed pending name; the id prefix keeps same-millisecond uploads apart.

        Long names lose the end of their stem so that the staging name, with
        its dot prefix and ``.part`` suffix, and the extension still fit.
        """
        safe = sanitize_filename(original_file_name.lower()) or "upload"
        stem, ext = split_extension(safe)
        prefix = f"{timestamp_ms}-{track_id[:8]}-"
        room = (
            _MAX_NAME_BYTES
            - _byte_len(STAGING_PREFIX + STAGING_SUFFIX)
            - _byte_len(prefix)
            - _byte_len(ext)
        )
        stem = _WINDOWS_TRAILING_RE.sub("", _truncate_bytes(stem, room)) or "upload"
        return f"{prefix}{stem}{ext}"

    @staticmethod
    def approved_file_name(track_id: str, title: str, extension: str) -> str:
        """Approved name: readable title, then the immutable id, then the extension."""
        extension = _truncate_bytes(extension, _MAX_EXTENSION_BYTES) or DEFAULT_EXTENSION
        safe_title = sanitize_filename(title) or "track"
        suffix = f"-{track_id}{extension}"
        # keep the id and extension intact when truncating long titles
        safe_title = _truncate_bytes(safe_title, _MAX_NAME_BYTES - _byte_len(suffix))
        return f"{safe_title}{suffix}"

    def find_approved_file(self, user_id: str, track_id: str) -> Optional[Path]:
        """Locate an id-keyed approved file in any of the user's albums."""
        root = self.approved_root(user_id)
        if not root.is_dir():
            return None
        for candidate in root.glob(f"*/*-{track_id}.*"):
            if candidate.is_file():
                return candidate
        return None
