"""
crm_api.auth.identity

Identity resolution from the verified claim set attached to a request.

Responsibilities:
- Answer "is the caller authenticated", "who is it" and "which role" for a request.
- Own the claim-name fallback contract.

Claim-name contract
-------------------
Tokens in the wild carry the subject id and role under either a standard long
claim URI or a legacy short name. Candidates are tried in the order listed in
`SUBJECT_CLAIM_KEYS` / `ROLE_CLAIM_KEYS`; the first key with a non-empty value
wins. The order is part of the public contract.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any

from starlette.requests import HTTPConnection

from crm_api.auth.models import Principal

NAME_IDENTIFIER_CLAIM = "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/nameidentifier"
ROLE_CLAIM = "http://schemas.microsoft.com/ws/2008/06/identity/claims/role"

SUBJECT_CLAIM_KEYS: tuple[str, ...] = (NAME_IDENTIFIER_CLAIM, "sub")
ROLE_CLAIM_KEYS: tuple[str, ...] = (ROLE_CLAIM, "role")


def first_claim(claims: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = claims.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def parse_user_id(raw: str | None) -> uuid.UUID | None:
    if raw is None:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


class IdentityResolver:
    """
    Read-only view over the claims the authentication backend attached to `conn`.
    """

    def __init__(self, conn: HTTPConnection) -> None:
        self._conn = conn

    def _claims(self) -> Mapping[str, Any]:
        # `request.user` is only populated when AuthenticationMiddleware is installed.
        if "user" not in self._conn.scope:
            return {}
        return getattr(self._conn.user, "claims", None) or {}

    def is_authenticated(self) -> bool:
        if "user" not in self._conn.scope:
            return False
        return bool(getattr(self._conn.user, "is_authenticated", False))

    def current_user_id(self) -> uuid.UUID | None:
        if not self.is_authenticated():
            return None
        return parse_user_id(first_claim(self._claims(), SUBJECT_CLAIM_KEYS))

    def current_role(self) -> str | None:
        if not self.is_authenticated():
            return None
        return first_claim(self._claims(), ROLE_CLAIM_KEYS)

    def principal(self) -> Principal:
        if not self.is_authenticated():
            return Principal.anonymous()
        return Principal(
            is_authenticated=True,
            user_id=self.current_user_id(),
            role=self.current_role(),
        )


# --- Module Notes -----------------------------------------------------------
# Claims are attached by `auth.backend.JwtAuthBackend`; this module never verifies tokens.
