"""Search over approved tracks."""
from fastapi import APIRouter, Depends, Query

from soundgate.api.identity import Caller, get_caller
from soundgate.api.serializers import track_to_dict
from soundgate.api.state import AppState, get_state

router = APIRouter()


@router.get("")
def search(
    q: str = Query(..., min_length=1),
    caller: Caller = Depends(get_caller),
    state: AppState = Depends(get_state),
):
    """Match q against title, album, and artist."""
    return [track_to_dict(r) for r in state.catalogue.search(q)]
