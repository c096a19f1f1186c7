"""User accounts and quota limits (owned by the identity side, read here)."""
from dataclasses import dataclass, field
from typing import List

from soundgate.config import DEFAULT_MAX_PENDING_TRACKS, DEFAULT_MAX_STORAGE_MB

ROLE_ADMIN = "admin"
ROLE_ARTIST = "artist"


@dataclass
class UserQuota:
    max_pending_tracks: int = DEFAULT_MAX_PENDING_TRACKS
    max_storage_mb: float = DEFAULT_MAX_STORAGE_MB


@dataclass
class UserAccount:
    """Stored account: identity, display fields, and quota."""
    user_id: str
    display_name: str
    role: str = ROLE_ARTIST
    verified: bool = False
    badges: List[str] = field(default_factory=list)
    quota: UserQuota = field(default_factory=UserQuota)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass
class QuotaUsage:
    """Snapshot of a user's consumption against their limits."""
    storage_used_mb: float
    max_storage_mb: float
    pending_count: int
    max_pending_tracks: int
