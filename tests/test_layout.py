from __future__ import annotations

from pathlib import Path

import pytest

from soundgate.core.layout import StorageLayout, extension_for, sanitize_filename


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("My Song.mp3", "My Song.mp3"),
        ("a/b\\c:d*e?f\"g<h>i|j", "abcdefghij"),
        ("..", ""),
        ("con.txt", ""),
        ("trailing. ", "trailing"),
        ("tab\there", "tabhere"),
    ],
)
def test_sanitize_filename(raw: str, expected: str) -> None:
    assert sanitize_filename(raw) == expected


def test_sanitize_filename_truncates_to_255_bytes() -> None:
    assert len(sanitize_filename("é" * 300).encode("utf-8")) <= 255


def test_extension_prefers_stored_file_suffix() -> None:
    assert extension_for("123-abc-take.FLAC", "audio/mpeg") == ".flac"


def test_extension_falls_back_to_mime_then_mp3() -> None:
    assert extension_for("123-abc-take", "audio/ogg") == ".ogg"
    assert extension_for("123-abc-take", "audio/x-unknown") == ".mp3"


def test_approved_name_is_keyed_by_id() -> None:
    name = StorageLayout.approved_file_name("1234-id", "Night/Drive", ".mp3")
    assert name == "NightDrive-1234-id.mp3"


def test_album_dir_falls_back_to_default_album(tmp_path: Path) -> None:
    layout = StorageLayout(tmp_path / "pending", tmp_path / "music")
    assert layout.album_dir("alice", "///") == tmp_path / "music" / "alice" / "Singles"
    assert layout.album_dir("alice", "Live: 2024") == tmp_path / "music" / "alice" / "Live 2024"


def test_stored_name_is_timestamp_prefixed_and_lowercase() -> None:
    name = StorageLayout.stored_file_name("abcdef123456", "My Song.MP3", 1700000000000)
    assert name == "1700000000000-abcdef12-my song.mp3"


def test_long_stored_name_keeps_extension_and_leaves_room_for_staging() -> None:
    name = StorageLayout.stored_file_name("abcdef123456", "x" * 236 + ".mp3", 1700000000000)
    assert name.startswith("1700000000000-abcdef12-xxx")
    assert name.endswith(".mp3")
    assert len(StorageLayout.staging_name(name).encode("utf-8")) <= 255


def test_oversized_suffix_is_not_treated_as_extension() -> None:
    name = StorageLayout.stored_file_name("abcdef123456", "a." + "b" * 240, 1700000000000)
    assert len(StorageLayout.staging_name(name).encode("utf-8")) <= 255
    assert extension_for(name, "audio/mpeg") == ".mp3"


def test_approved_name_caps_long_extension() -> None:
    name = StorageLayout.approved_file_name("1234-id", "t" * 300, "." + "z" * 300)
    assert len(name.encode("utf-8")) <= 255
    assert "-1234-id." in name
