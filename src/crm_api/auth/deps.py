"""
crm_api.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Expose the request `Principal` to endpoints.
- Require an authenticated caller with a usable user id for non-ownership endpoints.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from starlette.status import HTTP_401_UNAUTHORIZED

from crm_api.auth.identity import IdentityResolver
from crm_api.auth.models import Principal


def get_principal(request: Request) -> Principal:
    return IdentityResolver(request).principal()


def require_authenticated(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_authenticated or principal.user_id is None:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


# --- Module Notes -----------------------------------------------------------
# Ownership-protected endpoints use `authorization.policies.authorize(OWNED_BY)`
# instead, which answers 403/404 rather than 401.
