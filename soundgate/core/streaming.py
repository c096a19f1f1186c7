"""Serve track binaries with single byte-range support."""
import logging
import os
import re
from typing import BinaryIO, Optional, Tuple

from soundgate.config import STREAM_CHUNK_BYTES
from soundgate.core.errors import Forbidden, MediaMissing
from soundgate.core.metadata_store import MetadataStore
from soundgate.models.stream import MediaStream
from soundgate.models.track import TrackRecord, TrackStatus
from soundgate.models.user import ROLE_ADMIN

logger = logging.getLogger(__name__)

_RANGE_RE = re.compile(r"^\s*bytes\s*=\s*(\d+)\s*-\s*(\d*)\s*$", re.IGNORECASE)


def parse_range(header: Optional[str], size: int) -> Optional[Tuple[int, int]]:
    """Return the inclusive (start, end) for a single ``bytes=start-end`` range, else None.

    None means "serve everything": no header, multiple ranges, suffix ranges,
    malformed syntax, or a range that does not overlap the file. An end past the
    last byte is clamped to it.
    """
    if not header or size <= 0:
        return None
    match = _RANGE_RE.match(header)
    if not match:
        return None
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else size - 1
    if start >= size or start > end:
        return None
    return start, min(end, size - 1)


def can_access(record: TrackRecord, requester_id: Optional[str], requester_role: Optional[str]) -> bool:
    """Approved tracks are public; others only for admins and the owner."""
    return (
        record.status is TrackStatus.APPROVED
        or requester_role == ROLE_ADMIN
        or (requester_id is not None and record.owner_id == requester_id)
    )


class StreamDelivery:
    """Resolve a track's active binary and open it for (partial) delivery.

    Holds no lock: one metadata read, then the file is opened and every later
    read goes through that handle, so a concurrent approval that renames the
    file does not affect a stream already opened.
    """

    def __init__(self, store: MetadataStore, chunk_size: int = STREAM_CHUNK_BYTES) -> None:
        self._store = store
        self._chunk_size = chunk_size

    def open(
        self,
        track_id: str,
        requester_id: Optional[str],
        requester_role: Optional[str],
        range_header: Optional[str] = None,
    ) -> MediaStream:
        record = self._store.get(track_id)
        if not can_access(record, requester_id, requester_role):
            raise Forbidden("Track not available")

        record, handle = self._open_active(record)

        try:
            total = os.fstat(handle.fileno()).st_size
        except OSError:
            handle.close()
            raise
        window = parse_range(range_header, total)
        if window is None:
            start, end, partial = 0, max(total - 1, 0), False
        else:
            (start, end), partial = window, True
        return MediaStream(
            track_id=record.id,
            handle=handle,
            mime_type=record.mime_type or "application/octet-stream",
            total_size=total,
            start=start,
            end=end,
            partial=partial,
            chunk_size=self._chunk_size,
        )

    def _open_active(self, record: TrackRecord) -> Tuple[TrackRecord, BinaryIO]:
        """Open the record's active file, following one concurrent move of it.

        An approval between the metadata read and the open renames the file;
        the record is read once more and the new location tried before the
        file is reported missing.
        """
        handle = _open_binary(record.active_location)
        if handle is not None:
            return record, handle
        current = self._store.get(record.id)
        if current.active_location != record.active_location:
            handle = _open_binary(current.active_location)
            if handle is not None:
                return current, handle
        logger.warning("Track %s: audio file missing at %s", current.id, current.active_location)
        raise MediaMissing("Audio file missing")


def _open_binary(path: str) -> Optional[BinaryIO]:
    try:
        return open(path, "rb")
    except (FileNotFoundError, IsADirectoryError):
        return None
