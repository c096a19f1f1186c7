from __future__ import annotations

from pathlib import Path

import pytest

from soundgate.core.errors import NotFound
from soundgate.core.metadata_store import MetadataStore
from soundgate.models.track import TrackRecord, TrackStatus


def make_record(track_id: str, status: TrackStatus = TrackStatus.PENDING, owner: str = "alice") -> TrackRecord:
    pending = f"/data/pending/{owner}/{track_id}.mp3" if status is TrackStatus.PENDING else None
    approved = f"/data/music/{owner}/Singles/{track_id}.mp3" if status is TrackStatus.APPROVED else None
    return TrackRecord(
        id=track_id,
        title="Title",
        album="Singles",
        owner_id=owner,
        owner_display_name=owner.title(),
        status=status,
        mime_type="audio/mpeg",
        file_size_bytes=10,
        original_file_name="title.mp3",
        stored_file_name=f"1-{track_id}-title.mp3",
        pending_location=pending,
        approved_location=approved,
        created_at="2024-01-01T00:00:00+00:00",
        updated_at="2024-01-01T00:00:00+00:00",
    )


@pytest.fixture
def store(tmp_path: Path) -> MetadataStore:
    return MetadataStore(tmp_path / "meta")


def test_put_then_get_returns_same_record(store: MetadataStore) -> None:
    record = make_record("t1")
    store.put(record)

    assert store.get("t1") == record
    assert store.exists("t1")


def test_put_overwrites_existing_record(store: MetadataStore) -> None:
    store.put(make_record("t1"))
    approved = store.get("t1").approved("Live", "/data/music/alice/Live/t1.mp3")
    store.put(approved)

    loaded = store.get("t1")
    assert loaded.status is TrackStatus.APPROVED
    assert loaded.album == "Live"
    assert loaded.pending_location is None


def test_put_leaves_no_temp_files(store: MetadataStore) -> None:
    store.put(make_record("t1"))
    store.put(make_record("t1"))

    assert sorted(p.name for p in store.root.iterdir()) == ["t1.json"]


def test_get_missing_raises_not_found(store: MetadataStore) -> None:
    with pytest.raises(NotFound):
        store.get("nope")


@pytest.mark.parametrize("bad_id", ["", "../etc/passwd", ".hidden", "a/b"])
def test_unsafe_ids_are_not_found(store: MetadataStore, bad_id: str) -> None:
    with pytest.raises(NotFound):
        store.get(bad_id)
    assert not store.exists(bad_id)


def test_delete_twice_fails_second_time(store: MetadataStore) -> None:
    store.put(make_record("t1"))
    store.delete("t1")

    with pytest.raises(NotFound):
        store.delete("t1")
    with pytest.raises(NotFound):
        store.get("t1")


def test_list_by_status_filters(store: MetadataStore) -> None:
    store.put(make_record("p1"))
    store.put(make_record("p2"))
    store.put(make_record("a1", TrackStatus.APPROVED))

    pending = {r.id for r in store.list_by_status(TrackStatus.PENDING)}
    approved = {r.id for r in store.list_by_status("approved")}

    assert pending == {"p1", "p2"}
    assert approved == {"a1"}
    assert {r.id for r in store.list_all()} == {"p1", "p2", "a1"}


def test_listing_is_a_snapshot_of_ids(store: MetadataStore) -> None:
    for i in range(3):
        store.put(make_record(f"p{i}"))

    listing = store.list_by_status(TrackStatus.PENDING)
    store.put(make_record("late"))
    first = next(listing)
    remaining = [r.id for r in listing if r.id != first.id]
    seen = {first.id, *remaining}

    assert "late" not in seen
    assert seen == {"p0", "p1", "p2"}


def test_listing_skips_records_deleted_mid_iteration(store: MetadataStore) -> None:
    for i in range(3):
        store.put(make_record(f"p{i}"))

    seen = []
    for record in store.list_by_status(TrackStatus.PENDING):
        seen.append(record.id)
        for other in ("p0", "p1", "p2"):
            if other not in seen and store.exists(other):
                store.delete(other)
                break

    assert len(seen) == 2


def test_listing_ignores_temp_and_corrupt_files(store: MetadataStore) -> None:
    store.put(make_record("good"))
    (store.root / ".good.abc.tmp").write_text("{", encoding="utf-8")
    (store.root / "broken.json").write_text("{not json", encoding="utf-8")

    assert [r.id for r in store.list_all()] == ["good"]


def test_record_rejects_mismatched_locations() -> None:
    with pytest.raises(ValueError):
        TrackRecord.from_dict({**make_record("t1").to_dict(), "approved_location": "/x.mp3"})
