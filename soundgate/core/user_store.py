"""Persist and load user accounts (one JSON file per user)."""
import logging
import os
from pathlib import Path
from typing import List, Optional

from soundgate.core.errors import NotFound
from soundgate.core.json_files import read_json, write_json_atomic
from soundgate.core.layout import sanitize_filename
from soundgate.models.user import ROLE_ARTIST, UserAccount, UserQuota

logger = logging.getLogger(__name__)


def _account_from_dict(data: dict) -> UserAccount:
    quota = data.get("quota") or {}
    defaults = UserQuota()
    return UserAccount(
        user_id=data["user_id"],
        display_name=data.get("display_name") or data["user_id"],
        role=data.get("role") or ROLE_ARTIST,
        verified=bool(data.get("verified", False)),
        badges=list(data.get("badges") or []),
        quota=UserQuota(
            max_pending_tracks=int(quota.get("max_pending_tracks", defaults.max_pending_tracks)),
            max_storage_mb=float(quota.get("max_storage_mb", defaults.max_storage_mb)),
        ),
    )


def _account_to_dict(account: UserAccount) -> dict:
    return {
        "user_id": account.user_id,
        "display_name": account.display_name,
        "role": account.role,
        "verified": account.verified,
        "badges": list(account.badges),
        "quota": {
            "max_pending_tracks": account.quota.max_pending_tracks,
            "max_storage_mb": account.quota.max_storage_mb,
        },
    }


class UserDirectory:
    """Read access to accounts for quota checks, plus the admin update path."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, user_id: str) -> Path:
        safe = sanitize_filename(user_id)
        if not safe or safe != user_id:
            raise NotFound(f"User {user_id!r} not found")
        return self.root / f"{safe}.json"

    def get(self, user_id: str) -> UserAccount:
        """Return the account or raise NotFound."""
        try:
            return _account_from_dict(read_json(self._path(user_id)))
        except FileNotFoundError:
            raise NotFound(f"User {user_id} not found") from None

    def save(self, account: UserAccount) -> None:
        write_json_atomic(self._path(account.user_id), _account_to_dict(account))

    def list(self) -> List[UserAccount]:
        """Return all accounts, skipping unreadable files."""
        out = []
        for name in sorted(os.listdir(self.root)):
            if name.startswith(".") or not name.endswith(".json"):
                continue
            try:
                out.append(_account_from_dict(read_json(self.root / name)))
            except FileNotFoundError:
                continue
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Skipping unreadable account %s: %s", name, e)
        return out

    def update(
        self,
        user_id: str,
        *,
        display_name: Optional[str] = None,
        verified: Optional[bool] = None,
        badges: Optional[List[str]] = None,
        max_pending_tracks: Optional[int] = None,
        max_storage_mb: Optional[float] = None,
    ) -> UserAccount:
        """Apply the given fields and save. Returns the updated account."""
        account = self.get(user_id)
        if display_name is not None:
            account.display_name = display_name
        if verified is not None:
            account.verified = verified
        if badges is not None:
            account.badges = [b for b in badges if b]
        if max_pending_tracks is not None:
            account.quota.max_pending_tracks = max_pending_tracks
        if max_storage_mb is not None:
            account.quota.max_storage_mb = max_storage_mb
        self.save(account)
        return account
