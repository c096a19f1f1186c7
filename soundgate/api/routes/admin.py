"""Moderation queue, approve/reject, account management, and activity log (admin only)."""
from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from soundgate.api.identity import Caller, require_admin
from soundgate.api.serializers import track_to_dict, user_to_dict
from soundgate.api.state import AppState, get_state
from soundgate.core.activity import log_activity, read_activity_log

router = APIRouter()


class ApproveBody(BaseModel):
    album: Optional[str] = Field(None, min_length=1, max_length=120)


class RejectBody(BaseModel):
    reason: Optional[str] = Field(None, max_length=240)


class QuotaBody(BaseModel):
    max_pending_tracks: Optional[int] = Field(None, ge=1, le=100)
    max_storage_mb: Optional[int] = Field(None, ge=128, le=10240)


class UpdateUserBody(BaseModel):
    display_name: Optional[str] = Field(None, min_length=2, max_length=120)
    verified: Optional[bool] = None
    badges: Optional[List[str]] = Field(None, max_length=10)
    quota: Optional[QuotaBody] = None


@router.get("/tracks/pending")
def list_pending(caller: Caller = Depends(require_admin), state: AppState = Depends(get_state)):
    """Moderation queue, newest first."""
    return [track_to_dict(r) for r in state.catalogue.pending()]


@router.post("/tracks/{track_id}/approve")
def approve_track(
    track_id: str,
    body: ApproveBody | None = Body(None),
    caller: Caller = Depends(require_admin),
    state: AppState = Depends(get_state),
):
    """Approve a pending track, optionally filing it under a different album."""
    album = body.album if body else None
    record = state.lifecycle.approve(track_id, album=album, actor_id=caller.user_id)
    return {"message": "Track approved", "track": track_to_dict(record)}


@router.post("/tracks/{track_id}/reject")
def reject_track(
    track_id: str,
    body: RejectBody | None = Body(None),
    caller: Caller = Depends(require_admin),
    state: AppState = Depends(get_state),
):
    reason = body.reason if body else None
    state.lifecycle.reject(track_id, reason=reason, actor_id=caller.user_id)
    return {"message": "Track rejected and removed"}


@router.get("/users")
def list_users(caller: Caller = Depends(require_admin), state: AppState = Depends(get_state)):
    return [user_to_dict(u) for u in state.users.list()]


@router.patch("/users/{user_id}")
def update_user(
    user_id: str,
    body: UpdateUserBody,
    caller: Caller = Depends(require_admin),
    state: AppState = Depends(get_state),
):
    """Update display fields or quota of an account."""
    quota = body.quota or QuotaBody()
    account = state.users.update(
        user_id,
        display_name=body.display_name.strip() if body.display_name else None,
        verified=body.verified,
        badges=[b.strip() for b in body.badges] if body.badges is not None else None,
        max_pending_tracks=quota.max_pending_tracks,
        max_storage_mb=quota.max_storage_mb,
    )
    log_activity("USER_UPDATE", caller.user_id, user_id)
    return {"message": "User updated", "user": user_to_dict(account)}


@router.get("/logs", response_class=PlainTextResponse)
def get_logs(caller: Caller = Depends(require_admin), state: AppState = Depends(get_state)):
    return read_activity_log(state.activity_log_path)
