"""Track upload, catalogue, metadata, and streaming endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Header, UploadFile
from fastapi.responses import StreamingResponse

from soundgate.api.identity import Caller, get_caller
from soundgate.api.serializers import track_to_dict
from soundgate.api.state import AppState, get_state

router = APIRouter()


@router.post("/upload", status_code=201)
def upload_track(
    track: UploadFile = File(...),
    title: Optional[str] = Form(None, max_length=120),
    album: Optional[str] = Form(None, max_length=120),
    caller: Caller = Depends(get_caller),
    state: AppState = Depends(get_state),
):
    """Accept an audio file into the caller's pending area for moderation."""
    record = state.lifecycle.submit(
        caller.user_id,
        track.file,
        track.filename or "upload",
        track.content_type or "",
        title=title,
        album=album,
    )
    return {"message": "Track uploaded and awaiting moderation", "track": track_to_dict(record)}


@router.get("")
def list_tracks(caller: Caller = Depends(get_caller), state: AppState = Depends(get_state)):
    """List approved tracks."""
    return [track_to_dict(r) for r in state.catalogue.approved()]


@router.get("/mine")
def list_my_tracks(caller: Caller = Depends(get_caller), state: AppState = Depends(get_state)):
    """List the caller's tracks in any state."""
    return [track_to_dict(r) for r in state.catalogue.owned_by(caller.user_id)]


@router.get("/{track_id}")
def get_track(
    track_id: str,
    caller: Caller = Depends(get_caller),
    state: AppState = Depends(get_state),
):
    return track_to_dict(state.catalogue.visible(track_id, caller.user_id, caller.role))


@router.get("/{track_id}/stream")
def stream_track(
    track_id: str,
    range_header: Optional[str] = Header(None, alias="Range"),
    caller: Caller = Depends(get_caller),
    state: AppState = Depends(get_state),
):
    """Stream audio; honours a single ``bytes=start-end`` range."""
    media = state.streams.open(track_id, caller.user_id, caller.role, range_header)
    return StreamingResponse(
        media.iter_bytes(),
        status_code=media.status_code,
        headers=media.headers(),
        media_type=media.mime_type,
    )
