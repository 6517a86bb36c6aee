"""
crm_api.api.routers.dev_auth

Dev-only token minting. Disabled (404) when `env == "prod"`.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_404_NOT_FOUND

from crm_api.api.deps import settings_dep
from crm_api.auth.jwt import JwtConfig, issue_token
from crm_api.settings import Settings

router = APIRouter(prefix="/api/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    user_id: uuid.UUID
    role: str | None = Field(default="Basic", max_length=64)
    email: str | None = Field(default=None, max_length=256)
    ttl_minutes: int | None = Field(default=None, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(settings_dep),
) -> DevTokenResponse:
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=str(body.user_id),
        role=body.role,
        email=body.email,
        ttl=timedelta(minutes=body.ttl_minutes or settings.jwt_access_minutes),
    )
    return DevTokenResponse(access_token=token)
