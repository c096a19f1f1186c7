"""Liveness endpoint."""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from soundgate.api.state import AppState, get_state

router = APIRouter()


@router.get("")
def health_check(state: AppState = Depends(get_state)):
    """Health check for load balancers and monitoring."""
    checks = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {},
    }
    if state.store.root.is_dir():
        checks["services"]["storage"] = "ok"
    else:
        checks["services"]["storage"] = "error: metadata directory missing"
        checks["status"] = "unhealthy"
    return checks
