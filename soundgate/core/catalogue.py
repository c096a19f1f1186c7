"""Read-side views over track records: public catalogue, moderation queue, search."""
from typing import List, Optional

from soundgate.core.errors import Forbidden
from soundgate.core.metadata_store import MetadataStore
from soundgate.core.streaming import can_access
from soundgate.models.track import TrackRecord, TrackStatus


def _newest_first(records) -> List[TrackRecord]:
    return sorted(records, key=lambda r: r.created_at, reverse=True)


class Catalogue:
    def __init__(self, store: MetadataStore) -> None:
        self._store = store

    def approved(self) -> List[TrackRecord]:
        """Publicly streamable tracks."""
        return _newest_first(self._store.list_by_status(TrackStatus.APPROVED))

    def pending(self) -> List[TrackRecord]:
        """Moderation queue."""
        return _newest_first(self._store.list_by_status(TrackStatus.PENDING))

    def owned_by(self, user_id: str) -> List[TrackRecord]:
        return _newest_first(r for r in self._store.list_all() if r.owner_id == user_id)

    def visible(self, track_id: str, requester_id: Optional[str], requester_role: Optional[str]) -> TrackRecord:
        """Record metadata, under the same rule as streaming."""
        record = self._store.get(track_id)
        if not can_access(record, requester_id, requester_role):
            raise Forbidden("Track not available")
        return record

    def search(self, query: str) -> List[TrackRecord]:
        """Case-insensitive match on title, album, and artist of approved tracks."""
        q = query.strip().lower()
        if not q:
            return []
        return [
            r
            for r in self.approved()
            if q in r.title.lower()
            or q in r.album.lower()
            or q in r.owner_id.lower()
            or q in r.owner_display_name.lower()
        ]
