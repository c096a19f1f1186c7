"""Caller's account and quota usage."""
from fastapi import APIRouter, Depends

from soundgate.api.identity import Caller, get_caller
from soundgate.api.serializers import usage_to_dict, user_to_dict
from soundgate.api.state import AppState, get_state

router = APIRouter()


@router.get("")
def get_profile(caller: Caller = Depends(get_caller), state: AppState = Depends(get_state)):
    account = state.users.get(caller.user_id)
    out = user_to_dict(account)
    out["usage"] = usage_to_dict(state.ledger.usage(account))
    return out
