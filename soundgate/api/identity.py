"""Caller identity as attached by the upstream auth gateway.

Tokens are verified before requests reach this service; the gateway forwards
the verified user id and role as headers, which are trusted as-is here.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException

from soundgate.models.user import ROLE_ADMIN

USER_HEADER = "X-User-Id"
ROLE_HEADER = "X-User-Role"


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def get_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Caller:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Authorization header missing")
    return Caller(user_id=x_user_id.strip(), role=(x_user_role or "").strip().lower())


def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_admin:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return caller
