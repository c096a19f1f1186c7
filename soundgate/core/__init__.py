"""Core services: metadata store, quota ledger, moderation lifecycle, streaming."""
from soundgate.core.catalogue import Catalogue
from soundgate.core.layout import StorageLayout
from soundgate.core.lifecycle import ReconcileReport, TrackLifecycle
from soundgate.core.metadata_store import MetadataStore
from soundgate.core.quota import UserQuotaLedger
from soundgate.core.streaming import StreamDelivery
from soundgate.core.user_store import UserDirectory

__all__ = [
    "Catalogue",
    "MetadataStore",
    "ReconcileReport",
    "StorageLayout",
    "StreamDelivery",
    "TrackLifecycle",
    "UserDirectory",
    "UserQuotaLedger",
]
