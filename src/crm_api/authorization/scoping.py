"""
crm_api.authorization.scoping

Owner scoping for listing queries.

Responsibilities:
- Narrow a `select()` over an owner-scoped model to the caller's rows, leave it
  untouched for administrators, and make it empty when no caller id is known.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Select, false

from crm_api.db.models import OwnedMixin


def is_admin_role(role: str | None, admin_role: str = "Admin") -> bool:
    return role is not None and role.casefold() == admin_role.casefold()


def apply_ownership_filter(
    stmt: Select[Any],
    model: type[OwnedMixin],
    user_id: uuid.UUID | None,
    role: str | None,
    *,
    admin_role: str = "Admin",
) -> Select[Any]:
    if not (isinstance(model, type) and issubclass(model, OwnedMixin)):
        raise TypeError(f"{model!r} is not an owner-scoped model")

    if is_admin_role(role, admin_role):
        return stmt
    if user_id is None:
        # Never fall back to unscoped rows.
        return stmt.where(false())
    return stmt.where(model.created_by == user_id)


# --- Module Notes -----------------------------------------------------------
# Listing endpoints call this through the repositories; point lookups are covered by
# the owned-by policy instead.
