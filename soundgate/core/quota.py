"""Per-user storage and pending-submission accounting.

Both figures are recomputed from the filesystem and the record set on every
call. There is no cached counter, so a check reflects ground truth at the time
it runs. Two submits racing for the same user can both pass and overshoot a
limit by at most one file.
"""
import os
from pathlib import Path

from soundgate.core.errors import PendingQuotaExceeded, QuotaExceeded
from soundgate.core.layout import StorageLayout
from soundgate.core.metadata_store import MetadataStore
from soundgate.models.track import TrackStatus
from soundgate.models.user import QuotaUsage, UserAccount

_BYTES_PER_MB = 1024 * 1024


def _dir_size(root: Path) -> int:
    total = 0
    for dirpath, _dirnames, filenames in os.walk(root):
        for name in filenames:
            try:
                total += os.stat(os.path.join(dirpath, name)).st_size
            except FileNotFoundError:
                # moved or deleted during the walk
                continue
    return total


class UserQuotaLedger:
    def __init__(self, store: MetadataStore, layout: StorageLayout) -> None:
        self._store = store
        self._layout = layout

    def storage_used_mb(self, user_id: str) -> float:
        """Megabytes of every binary (pending and approved) under the user's areas."""
        used = _dir_size(self._layout.pending_dir(user_id)) + _dir_size(self._layout.approved_root(user_id))
        return used / _BYTES_PER_MB

    def pending_count(self, user_id: str) -> int:
        return sum(1 for r in self._store.list_by_status(TrackStatus.PENDING) if r.owner_id == user_id)

    def check(self, account: UserAccount) -> None:
        """Raise if the account may not submit another track."""
        used = self.storage_used_mb(account.user_id)
        if used > account.quota.max_storage_mb:
            raise QuotaExceeded(
                f"Storage quota exceeded ({used:.1f} of {account.quota.max_storage_mb:g} MB used)"
            )
        pending = self.pending_count(account.user_id)
        if pending >= account.quota.max_pending_tracks:
            raise PendingQuotaExceeded(
                f"Pending tracks quota reached ({pending} of {account.quota.max_pending_tracks})"
            )

    def usage(self, account: UserAccount) -> QuotaUsage:
        return QuotaUsage(
            storage_used_mb=self.storage_used_mb(account.user_id),
            max_storage_mb=account.quota.max_storage_mb,
            pending_count=self.pending_count(account.user_id),
            max_pending_tracks=account.quota.max_pending_tracks,
        )
