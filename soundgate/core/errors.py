"""Error kinds raised by the track store. Each carries the HTTP status the API maps it to."""


class SoundgateError(Exception):
    """Base class for errors reported to callers."""
    status_code = 500
    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(SoundgateError):
    status_code = 404
    kind = "not_found"


class InvalidState(SoundgateError):
    status_code = 409
    kind = "invalid_state"


class Forbidden(SoundgateError):
    status_code = 403
    kind = "forbidden"


class QuotaExceeded(SoundgateError):
    status_code = 413
    kind = "quota_exceeded"


class PendingQuotaExceeded(SoundgateError):
    status_code = 429
    kind = "pending_quota_exceeded"


class MediaMissing(SoundgateError):
    """Record exists but its binary is gone from storage."""
    status_code = 404
    kind = "media_missing"


class UnsupportedMedia(SoundgateError):
    status_code = 415
    kind = "unsupported_media"


class PayloadTooLarge(SoundgateError):
    status_code = 413
    kind = "payload_too_large"


class ReconciliationRequired(SoundgateError):
    """Binary was relocated but the record could not be updated."""
    status_code = 500
    kind = "reconciliation_required"

    def __init__(self, track_id: str, source: str, destination: str) -> None:
        super().__init__(
            f"Track {track_id} moved from {source} to {destination} but metadata was not updated"
        )
        self.track_id = track_id
        self.source = source
        self.destination = destination


class RelocationFailed(SoundgateError):
    """Binary could not be moved into the approved area; the track stays pending."""
    status_code = 500
    kind = "relocation_failed"
