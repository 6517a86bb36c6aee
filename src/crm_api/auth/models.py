"""
crm_api.auth.models

Auth domain models.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """
    The actor making a request, derived per request from verified claims.

    An unauthenticated principal never carries a user id or role.
    """

    is_authenticated: bool
    user_id: uuid.UUID | None = None
    role: str | None = None

    @classmethod
    def anonymous(cls) -> Principal:
        return cls(is_authenticated=False)

    def has_role(self, role: str) -> bool:
        return self.role is not None and self.role.casefold() == role.casefold()


# --- Module Notes -----------------------------------------------------------
# Principals are never persisted; `created_by` columns store `user_id` directly.
