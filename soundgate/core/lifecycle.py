"""Moderation state machine: submit, approve, reject, and startup reconciliation.

A track is created pending, then either approved (binary renamed into the
owner's album directory) or rejected (binary and record deleted). Nothing
returns to pending except reconciliation repairing drift against the files.
Approve and reject on one id are serialized by a per-id lock.
"""
import logging
import os
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, List, Optional

from soundgate.config import (
    ALLOWED_MIME_TYPES,
    DEFAULT_ALBUM,
    MAX_UPLOAD_BYTES,
    UPLOAD_CHUNK_BYTES,
)
from soundgate.core.activity import log_activity
from soundgate.core.errors import (
    InvalidState,
    MediaMissing,
    NotFound,
    PayloadTooLarge,
    ReconciliationRequired,
    RelocationFailed,
    UnsupportedMedia,
)
from soundgate.core.layout import STAGING_SUFFIX, StorageLayout, extension_for
from soundgate.core.locks import KeyedLocks
from soundgate.core.metadata_store import MetadataStore
from soundgate.core.quota import UserQuotaLedger
from soundgate.core.user_store import UserDirectory
from soundgate.models.track import TrackRecord, TrackStatus, utc_now

logger = logging.getLogger(__name__)


def _remove_if_empty(directory: Path) -> None:
    try:
        directory.rmdir()
    except OSError as e:
        # another approval may have filed a track there meanwhile
        logger.debug("Keeping album directory %s: %s", directory, e)


@dataclass
class ReconcileReport:
    """Track ids repaired or flagged by a reconciliation pass."""
    promoted: List[str] = field(default_factory=list)
    demoted: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    removed_partials: List[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.promoted or self.demoted or self.missing or self.removed_partials)


class TrackLifecycle:
    def __init__(
        self,
        store: MetadataStore,
        users: UserDirectory,
        ledger: UserQuotaLedger,
        layout: StorageLayout,
        *,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
        allowed_mime_types: Iterable[str] = ALLOWED_MIME_TYPES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._users = users
        self._ledger = ledger
        self._layout = layout
        self._max_upload_bytes = max_upload_bytes
        self._allowed_mime_types = frozenset(allowed_mime_types)
        self._clock = clock
        self._locks = KeyedLocks()

    # -- submit ---------------------------------------------------------------

    def submit(
        self,
        owner_id: str,
        payload: BinaryIO,
        original_file_name: str,
        mime_type: str,
        title: Optional[str] = None,
        album: Optional[str] = None,
    ) -> TrackRecord:
        """Store an upload in the owner's pending area and create its pending record.

        Checks run before any byte is written. On failure nothing is left behind.
        """
        if mime_type not in self._allowed_mime_types:
            raise UnsupportedMedia(f"Unsupported file type: {mime_type or 'unknown'}")
        account = self._users.get(owner_id)
        self._ledger.check(account)

        track_id = str(uuid.uuid4())
        pending_dir = self._layout.pending_dir(owner_id)
        pending_dir.mkdir(parents=True, exist_ok=True)
        stored_name = self._layout.stored_file_name(
            track_id, original_file_name, int(self._clock() * 1000)
        )
        stored_path = pending_dir / stored_name
        size = self._write_payload(payload, pending_dir / self._layout.staging_name(stored_name), stored_path)

        now = utc_now()
        record = TrackRecord(
            id=track_id,
            title=(title or "").strip() or Path(original_file_name).stem or stored_name,
            album=(album or "").strip() or DEFAULT_ALBUM,
            owner_id=owner_id,
            owner_display_name=account.display_name,
            status=TrackStatus.PENDING,
            mime_type=mime_type,
            file_size_bytes=size,
            original_file_name=original_file_name,
            stored_file_name=stored_name,
            pending_location=str(stored_path),
            approved_location=None,
            created_at=now,
            updated_at=now,
        )
        try:
            self._store.put(record)
        except Exception:
            stored_path.unlink(missing_ok=True)
            raise
        log_activity("UPLOAD", owner_id, track_id)
        logger.info("Track %s submitted by %s (%d bytes)", track_id, owner_id, size)
        return record

    def _write_payload(self, payload: BinaryIO, part_path: Path, stored_path: Path) -> int:
        """Copy payload in chunks to part_path, then rename it into place. Returns the size."""
        size = 0
        try:
            with open(part_path, "xb") as out:
                while True:
                    chunk = payload.read(UPLOAD_CHUNK_BYTES)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self._max_upload_bytes:
                        raise PayloadTooLarge(
                            f"Upload exceeds {self._max_upload_bytes // (1024 * 1024)} MB limit"
                        )
                    out.write(chunk)
                out.flush()
                os.fsync(out.fileno())
            os.rename(part_path, stored_path)
        except BaseException:
            part_path.unlink(missing_ok=True)
            raise
        return size

    # -- moderation -----------------------------------------------------------

    def approve(
        self, track_id: str, album: Optional[str] = None, actor_id: Optional[str] = None
    ) -> TrackRecord:
        """Move a pending track into the owner's album directory and mark it approved.

        The file is renamed before the record is written. If the write fails the
        file has already moved and ReconciliationRequired is raised.
        """
        with self._locks.hold(track_id):
            record = self._store.get(track_id)
            if record.status is not TrackStatus.PENDING:
                raise InvalidState(f"Track {track_id} is not pending")

            album_name = (album or "").strip() or record.album
            album_dir = self._layout.album_dir(record.owner_id, album_name)
            extension = extension_for(record.stored_file_name, record.mime_type)
            destination = album_dir / self._layout.approved_file_name(record.id, record.title, extension)
            source = Path(record.pending_location)
            if not source.is_file():
                raise MediaMissing(f"Audio file missing for track {track_id}")

            created_dir = not album_dir.exists()
            try:
                album_dir.mkdir(parents=True, exist_ok=True)
                os.rename(source, destination)
            except OSError as e:
                if created_dir:
                    _remove_if_empty(album_dir)
                if isinstance(e, FileNotFoundError) and not source.exists():
                    raise MediaMissing(f"Audio file missing for track {track_id}") from None
                logger.exception("Relocating track %s to %s failed", track_id, destination)
                raise RelocationFailed(f"Could not move track {track_id} into {album_dir.name}") from e

            updated = record.approved(album_name, str(destination))
            try:
                self._store.put(updated)
            except Exception as e:
                logger.error(
                    "Track %s moved to %s but its record still says pending; run reconciliation",
                    track_id,
                    destination,
                )
                raise ReconciliationRequired(track_id, str(source), str(destination)) from e

        log_activity("APPROVE", actor_id, record.owner_id, track_id)
        logger.info("Track %s approved into album %r", track_id, album_name)
        return updated

    def reject(
        self, track_id: str, reason: Optional[str] = None, actor_id: Optional[str] = None
    ) -> TrackRecord:
        """Delete a pending track's binary and record. Returns the removed record."""
        with self._locks.hold(track_id):
            record = self._store.get(track_id)
            if record.status is not TrackStatus.PENDING:
                raise InvalidState(f"Track {track_id} is not pending")
            Path(record.pending_location).unlink(missing_ok=True)
            self._store.delete(track_id)

        log_activity("REJECT", actor_id, record.owner_id, track_id, reason)
        logger.info("Track %s rejected", track_id)
        return record

    # -- reconciliation -------------------------------------------------------

    def reconcile(self) -> ReconcileReport:
        """Compare every record with the files on disk and trust the files.

        Meant for startup, before uploads are accepted: leftover ``.part`` files
        from interrupted uploads are deleted.
        """
        report = ReconcileReport()
        for record in self._store.list_all():
            with self._locks.hold(record.id):
                self._reconcile_one(record.id, report)
        self._remove_partials(report)
        if report.clean:
            logger.info("Reconciliation found no drift")
        else:
            logger.warning(
                "Reconciliation: %d promoted, %d demoted, %d missing media, %d partial uploads removed",
                len(report.promoted),
                len(report.demoted),
                len(report.missing),
                len(report.removed_partials),
            )
            log_activity(
                "RECONCILE",
                f"promoted={len(report.promoted)}",
                f"demoted={len(report.demoted)}",
                f"missing={len(report.missing)}",
            )
        return report

    def _reconcile_one(self, track_id: str, report: ReconcileReport) -> None:
        try:
            record = self._store.get(track_id)
        except NotFound:
            return
        if Path(record.active_location).is_file():
            return
        if record.status is TrackStatus.PENDING:
            found = self._layout.find_approved_file(record.owner_id, record.id)
            if found is not None:
                self._store.put(record.approved(found.parent.name, str(found)))
                report.promoted.append(record.id)
                logger.warning("Track %s: file already approved at %s, record updated", record.id, found)
                return
        else:
            pending = self._layout.pending_dir(record.owner_id) / record.stored_file_name
            if pending.is_file():
                self._store.put(record.reverted_to_pending(str(pending)))
                report.demoted.append(record.id)
                logger.warning("Track %s: approved file missing, still pending at %s", record.id, pending)
                return
        report.missing.append(record.id)
        logger.error("Track %s: no binary found on storage", record.id)

    def _remove_partials(self, report: ReconcileReport) -> None:
        root = self._layout.pending_root
        if not root.is_dir():
            return
        for part in root.glob(f"*/.*{STAGING_SUFFIX}"):
            part.unlink(missing_ok=True)
            report.removed_partials.append(str(part))
