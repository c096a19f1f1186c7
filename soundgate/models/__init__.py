"""Data models for tracks, user accounts, and media streams."""
from soundgate.models.stream import MediaStream
from soundgate.models.track import TrackRecord, TrackStatus
from soundgate.models.user import QuotaUsage, UserAccount, UserQuota

__all__ = [
    "MediaStream",
    "QuotaUsage",
    "TrackRecord",
    "TrackStatus",
    "UserAccount",
    "UserQuota",
]
