from __future__ import annotations

from pathlib import Path

import pytest

from conftest import audio_bytes
from soundgate.core.errors import Forbidden, MediaMissing, NotFound
from soundgate.core.streaming import StreamDelivery, parse_range
from soundgate.models.user import ROLE_ADMIN, ROLE_ARTIST


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        (None, None),
        ("bytes=100-199", (100, 199)),
        ("bytes=100-", (100, 999)),
        ("bytes=900-5000", (900, 999)),
        ("bytes=0-0", (0, 0)),
        ("bytes=0-10,20-30", None),
        ("bytes=-500", None),
        ("bytes=abc-def", None),
        ("items=0-10", None),
        ("bytes=1000-1001", None),
        ("bytes=200-100", None),
    ],
)
def test_parse_range(header, expected) -> None:
    assert parse_range(header, 1000) == expected


def test_parse_range_on_empty_file_serves_everything() -> None:
    assert parse_range("bytes=0-10", 0) is None


@pytest.fixture
def approved_track(state, artist, submit):
    record = submit("alice", audio_bytes(1000))
    return state.lifecycle.approve(record.id)


def test_range_request_returns_exact_window(state, approved_track) -> None:
    media = state.streams.open(approved_track.id, "someone", ROLE_ARTIST, "bytes=100-199")

    body = media.read_all()

    assert media.partial
    assert media.status_code == 206
    assert len(body) == 100
    assert body == audio_bytes(1000)[100:200]
    assert media.headers()["Content-Range"] == "bytes 100-199/1000"
    assert media.headers()["Content-Length"] == "100"


def test_no_range_returns_whole_file(state, approved_track) -> None:
    media = state.streams.open(approved_track.id, "someone", ROLE_ARTIST)

    body = media.read_all()

    assert not media.partial
    assert media.status_code == 200
    assert body == audio_bytes(1000)
    headers = media.headers()
    assert headers["Content-Length"] == "1000"
    assert headers["Accept-Ranges"] == "bytes"
    assert headers["Content-Type"] == "audio/mpeg"
    assert "Content-Range" not in headers


def test_malformed_range_falls_back_to_full_content(state, approved_track) -> None:
    media = state.streams.open(approved_track.id, "someone", ROLE_ARTIST, "bytes=0-1,5-9")

    assert media.status_code == 200
    assert len(media.read_all()) == 1000


def test_small_chunks_cover_the_window(state, approved_track) -> None:
    streams = StreamDelivery(state.store, chunk_size=7)
    media = streams.open(approved_track.id, "someone", ROLE_ARTIST, "bytes=10-59")

    chunks = list(media.iter_bytes())

    assert all(len(c) <= 7 for c in chunks)
    assert b"".join(chunks) == audio_bytes(1000)[10:60]
    assert media.handle.closed


def test_pending_track_is_forbidden_to_other_users(state, artist, submit) -> None:
    record = submit("alice")

    with pytest.raises(Forbidden):
        state.streams.open(record.id, "mallory", ROLE_ARTIST)


def test_pending_track_is_streamable_by_owner_and_admin(state, artist, submit) -> None:
    record = submit("alice", b"pending-bytes")

    assert state.streams.open(record.id, "alice", ROLE_ARTIST).read_all() == b"pending-bytes"
    assert state.streams.open(record.id, "root", ROLE_ADMIN).read_all() == b"pending-bytes"


def test_unknown_track_is_not_found(state) -> None:
    with pytest.raises(NotFound):
        state.streams.open("missing-id", "alice", ROLE_ARTIST)


def test_missing_binary_is_media_missing(state, approved_track) -> None:
    Path(approved_track.approved_location).unlink()

    with pytest.raises(MediaMissing):
        state.streams.open(approved_track.id, "someone", ROLE_ARTIST)


def test_open_stream_survives_concurrent_approval(state, artist, submit) -> None:
    record = submit("alice", audio_bytes(500))
    media = state.streams.open(record.id, "alice", ROLE_ARTIST, "bytes=0-99")

    state.lifecycle.approve(record.id)

    assert media.read_all() == audio_bytes(500)[:100]


def test_open_follows_approval_between_lookup_and_open(state, artist, submit, monkeypatch) -> None:
    record = submit("alice", audio_bytes(300))
    real_get = state.store.get
    calls = []

    def get_then_approve(track_id):
        found = real_get(track_id)
        if not calls:
            calls.append(track_id)
            state.lifecycle.approve(track_id)
        return found

    monkeypatch.setattr(state.store, "get", get_then_approve)

    media = state.streams.open(record.id, "alice", ROLE_ARTIST)

    assert calls == [record.id]
    assert media.read_all() == audio_bytes(300)
