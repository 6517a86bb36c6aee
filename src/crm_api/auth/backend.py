"""
crm_api.auth.backend

Starlette authentication backend for bearer JWTs.

Responsibilities:
- Verify the bearer token (if any) and attach the claim set to the request.
- Leave requests without a usable token anonymous; authorization decides what that means.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from starlette.authentication import AuthCredentials, AuthenticationBackend, BaseUser
from starlette.requests import HTTPConnection

from crm_api.auth.identity import SUBJECT_CLAIM_KEYS, first_claim
from crm_api.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from crm_api.observability.logging import get_logger

log = get_logger(__name__)


class ClaimsUser(BaseUser):
    """
    Authenticated user carrying the verified claim set.
    """

    def __init__(self, claims: Mapping[str, Any]) -> None:
        self.claims = dict(claims)

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return str(self.claims.get("email") or self.identity)

    @property
    def identity(self) -> str:
        return first_claim(self.claims, SUBJECT_CLAIM_KEYS) or ""


class JwtAuthBackend(AuthenticationBackend):
    def __init__(self, cfg: JwtConfig) -> None:
        self._cfg = cfg

    async def authenticate(self, conn: HTTPConnection) -> tuple[AuthCredentials, BaseUser] | None:
        header = conn.headers.get("authorization")
        if not header:
            return None

        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            log.warning("auth.malformed_header")
            return None

        try:
            claims = decode_and_validate(cfg=self._cfg, token=token.strip())
        except JwtValidationError as e:
            # Invalid tokens degrade to an anonymous request rather than an error response.
            log.warning("auth.invalid_token", error=str(e))
            return None

        return AuthCredentials(["authenticated"]), ClaimsUser(claims)


# --- Module Notes -----------------------------------------------------------
# Installed in `api.app.create_app` through `AuthenticationMiddleware`.
