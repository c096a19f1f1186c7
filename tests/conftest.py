"""Shared pytest fixtures."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from soundgate.api.app import app
from soundgate.api.state import AppState, get_state
from soundgate.core.activity import activity_logger, configure_activity_log
from soundgate.models.track import TrackRecord
from soundgate.models.user import ROLE_ADMIN, ROLE_ARTIST, UserAccount, UserQuota


def audio_bytes(size: int) -> bytes:
    return bytes(i % 256 for i in range(size))


@pytest.fixture
def state(tmp_path: Path) -> AppState:
    return AppState(data_dir=tmp_path / "data")


@pytest.fixture
def add_user(state: AppState):
    def _add(
        user_id: str,
        *,
        role: str = ROLE_ARTIST,
        max_pending_tracks: int = 5,
        max_storage_mb: float = 1024,
    ) -> UserAccount:
        account = UserAccount(
            user_id=user_id,
            display_name=user_id.title(),
            role=role,
            quota=UserQuota(max_pending_tracks=max_pending_tracks, max_storage_mb=max_storage_mb),
        )
        state.users.save(account)
        return account

    return _add


@pytest.fixture
def artist(add_user) -> UserAccount:
    return add_user("alice")


@pytest.fixture
def admin(add_user) -> UserAccount:
    return add_user("root", role=ROLE_ADMIN)


@pytest.fixture
def submit(state: AppState):
    def _submit(
        owner_id: str,
        payload: bytes = b"ID3fake-audio",
        *,
        file_name: str = "Song.mp3",
        mime_type: str = "audio/mpeg",
        title: str | None = None,
        album: str | None = None,
    ) -> TrackRecord:
        return state.lifecycle.submit(
            owner_id, io.BytesIO(payload), file_name, mime_type, title=title, album=album
        )

    return _submit


@pytest.fixture
def activity_log(state: AppState):
    handler = configure_activity_log(state.activity_log_path)
    yield state.activity_log_path
    activity_logger.removeHandler(handler)
    handler.close()


@pytest.fixture
def client(state: AppState):
    app.dependency_overrides[get_state] = lambda: state
    yield TestClient(app)
    app.dependency_overrides.clear()


def as_user(user_id: str, role: str = ROLE_ARTIST) -> dict[str, str]:
    return {"X-User-Id": user_id, "X-User-Role": role}
