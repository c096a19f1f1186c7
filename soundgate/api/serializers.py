"""Map core models to API response shapes."""
from dataclasses import asdict

from soundgate.models.track import TrackRecord
from soundgate.models.user import QuotaUsage, UserAccount


def track_to_dict(r: TrackRecord) -> dict:
    return {
        "id": r.id,
        "title": r.title,
        "album": r.album,
        "artist_username": r.owner_id,
        "artist_display_name": r.owner_display_name,
        "status": r.status.value,
        "mime_type": r.mime_type,
        "file_size": r.file_size_bytes,
        "original_file_name": r.original_file_name,
        "created_at": r.created_at,
        "updated_at": r.updated_at,
    }


def user_to_dict(u: UserAccount) -> dict:
    return {
        "username": u.user_id,
        "display_name": u.display_name,
        "role": u.role,
        "verified": u.verified,
        "badges": list(u.badges),
        "quota": asdict(u.quota),
    }


def usage_to_dict(usage: QuotaUsage) -> dict:
    return {
        "storage_used_mb": round(usage.storage_used_mb, 3),
        "max_storage_mb": usage.max_storage_mb,
        "pending_count": usage.pending_count,
        "max_pending_tracks": usage.max_pending_tracks,
    }
