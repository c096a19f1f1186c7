"""Shared application state (injected into routes)."""
from pathlib import Path
from typing import Optional

from soundgate import config
from soundgate.core.catalogue import Catalogue
from soundgate.core.layout import StorageLayout
from soundgate.core.lifecycle import TrackLifecycle
from soundgate.core.metadata_store import MetadataStore
from soundgate.core.quota import UserQuotaLedger
from soundgate.core.streaming import StreamDelivery
from soundgate.core.user_store import UserDirectory


class AppState:
    def __init__(self, data_dir: Optional[Path] = None) -> None:
        root = Path(data_dir) if data_dir is not None else config.DATA_DIR
        self.data_dir = root
        self.activity_log_path = root / config.ACTIVITY_LOG_PATH.name
        self.layout = StorageLayout(root / config.PENDING_DIR.name, root / config.MUSIC_DIR.name)
        self.store = MetadataStore(root / config.META_DIR.name)
        self.users = UserDirectory(root / config.USERS_DIR.name)
        self.ledger = UserQuotaLedger(self.store, self.layout)
        self.lifecycle = TrackLifecycle(self.store, self.users, self.ledger, self.layout)
        self.streams = StreamDelivery(self.store)
        self.catalogue = Catalogue(self.store)


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config.ensure_data_dirs()
        _state = AppState()
    return _state
