"""Persist and load track records, one JSON file per track id."""
import logging
import os
import re
from pathlib import Path
from typing import Iterator, List, Optional

from soundgate.core.errors import NotFound
from soundgate.core.json_files import read_json, write_json_atomic
from soundgate.models.track import TrackRecord, TrackStatus

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
_SUFFIX = ".json"


class MetadataStore:
    """Durable key-value store of track records backed by individual files.

    Writes go through a temp file and ``os.replace`` so a reader never observes a
    half-written record. Listing snapshots the directory once, then loads lazily.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, track_id: str) -> Path:
        if not track_id or not _ID_RE.match(track_id):
            raise NotFound(f"Track {track_id!r} not found")
        return self.root / f"{track_id}{_SUFFIX}"

    def put(self, record: TrackRecord) -> None:
        """Create or overwrite the record for record.id."""
        write_json_atomic(self._path(record.id), record.to_dict())

    def get(self, track_id: str) -> TrackRecord:
        """Return the record or raise NotFound."""
        path = self._path(track_id)
        try:
            data = read_json(path)
        except FileNotFoundError:
            raise NotFound(f"Track {track_id} not found") from None
        return TrackRecord.from_dict(data)

    def exists(self, track_id: str) -> bool:
        try:
            return self._path(track_id).is_file()
        except NotFound:
            return False

    def delete(self, track_id: str) -> None:
        """Remove the record; a missing record raises NotFound."""
        try:
            os.unlink(self._path(track_id))
        except FileNotFoundError:
            raise NotFound(f"Track {track_id} not found") from None

    def _snapshot_ids(self) -> List[str]:
        ids = []
        with os.scandir(self.root) as entries:
            for entry in entries:
                name = entry.name
                # temp files are hidden and carry a different suffix
                if name.startswith(".") or not name.endswith(_SUFFIX):
                    continue
                ids.append(name[: -len(_SUFFIX)])
        return ids

    def _load_quietly(self, track_id: str) -> Optional[TrackRecord]:
        try:
            return self.get(track_id)
        except NotFound:
            # deleted after the snapshot was taken
            return None
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Skipping unreadable track record %s: %s", track_id, e)
            return None

    def _iter_records(self, ids: List[str], status: Optional[TrackStatus]) -> Iterator[TrackRecord]:
        for track_id in ids:
            record = self._load_quietly(track_id)
            if record is None:
                continue
            if status is None or record.status is status:
                yield record

    def list_all(self) -> Iterator[TrackRecord]:
        """Yield every record present when the call was made."""
        return self._iter_records(self._snapshot_ids(), None)

    def list_by_status(self, status: TrackStatus) -> Iterator[TrackRecord]:
        """Yield records with the given status. No ordering guarantee."""
        return self._iter_records(self._snapshot_ids(), TrackStatus(status))
