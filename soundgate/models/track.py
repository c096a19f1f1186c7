"""Track record persisted once per submitted track."""
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class TrackStatus(str, Enum):
    """Persisted lifecycle states. Rejection deletes the record instead."""
    PENDING = "pending"
    APPROVED = "approved"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class TrackRecord:
    """Metadata for one submitted track; the binary is addressed only through it."""
    id: str
    title: str
    album: str
    owner_id: str
    owner_display_name: str
    status: TrackStatus
    mime_type: str
    file_size_bytes: int
    original_file_name: str
    stored_file_name: str
    pending_location: Optional[str]
    approved_location: Optional[str]
    created_at: str
    updated_at: str

    def __post_init__(self) -> None:
        # exactly one location, matching status
        if self.status is TrackStatus.PENDING:
            ok = self.pending_location is not None and self.approved_location is None
        else:
            ok = self.approved_location is not None and self.pending_location is None
        if not ok:
            raise ValueError(f"Track {self.id}: locations do not match status {self.status.value}")

    @property
    def active_location(self) -> str:
        """Path of the binary for the current status."""
        if self.status is TrackStatus.APPROVED:
            return self.approved_location
        return self.pending_location

    def approved(self, album: str, approved_location: str) -> "TrackRecord":
        """Return the approved copy of this record."""
        return replace(
            self,
            status=TrackStatus.APPROVED,
            album=album,
            pending_location=None,
            approved_location=approved_location,
            updated_at=utc_now(),
        )

    def reverted_to_pending(self, pending_location: str) -> "TrackRecord":
        """Return a pending copy; only used when repairing drift against the filesystem."""
        return replace(
            self,
            status=TrackStatus.PENDING,
            pending_location=pending_location,
            approved_location=None,
            updated_at=utc_now(),
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "TrackRecord":
        return cls(
            id=data["id"],
            title=data["title"],
            album=data["album"],
            owner_id=data["owner_id"],
            owner_display_name=data.get("owner_display_name") or data["owner_id"],
            status=TrackStatus(data["status"]),
            mime_type=data["mime_type"],
            file_size_bytes=int(data["file_size_bytes"]),
            original_file_name=data["original_file_name"],
            stored_file_name=data["stored_file_name"],
            pending_location=data.get("pending_location"),
            approved_location=data.get("approved_location"),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )
