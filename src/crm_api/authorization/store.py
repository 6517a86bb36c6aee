"""
crm_api.authorization.store

Entity lookup used by the ownership evaluator.

Responsibilities:
- Define the `EntityStore` protocol (single point lookup by type tag + UUID).
- Provide the SQLAlchemy-backed implementation.
"""

from __future__ import annotations

import uuid
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.authorization.resources import ENTITY_MODELS, OwnedEntityType


class EntityStore(Protocol):
    async def find_by_id(self, entity_type: OwnedEntityType, entity_id: uuid.UUID) -> Any | None: ...


class SqlEntityStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, entity_type: OwnedEntityType, entity_id: uuid.UUID) -> Any | None:
        model = ENTITY_MODELS[entity_type]
        # Primary-key lookup; read-only, nothing is flushed or locked.
        return await self._session.get(model, entity_id)


# --- Module Notes -----------------------------------------------------------
# Soft-deleted rows are still returned here: ownership of a deleted row is checked
# like any other, and the endpoint itself answers 404 for it afterwards.
