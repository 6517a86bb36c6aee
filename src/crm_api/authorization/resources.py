"""
crm_api.authorization.resources

The closed set of entity types the ownership policy can load.

Responsibilities:
- Name every loadable entity type (`OwnedEntityType`).
- Map each type tag to its ORM model (`ENTITY_MODELS`).
- Define the ownership capability (`OwnedResource`) checked after loading.
"""

from __future__ import annotations

import enum
import uuid
from typing import Protocol, runtime_checkable

from crm_api.db.base import Base
from crm_api.db.models import Account, AccountType, Note


class OwnedEntityType(enum.StrEnum):
    note = "note"
    account = "account"
    # Reference data: loadable but carries no owner, so declarations against it always deny.
    account_type = "account_type"


ENTITY_MODELS: dict[OwnedEntityType, type[Base]] = {
    OwnedEntityType.note: Note,
    OwnedEntityType.account: Account,
    OwnedEntityType.account_type: AccountType,
}


@runtime_checkable
class OwnedResource(Protocol):
    """Anything that can answer "who owns me"."""

    id: uuid.UUID

    @property
    def owner_id(self) -> uuid.UUID: ...


# --- Module Notes -----------------------------------------------------------
# Adding an owner-scoped entity means: give the model `OwnedMixin`, add a member to
# `OwnedEntityType`, and register the model in `ENTITY_MODELS`.
