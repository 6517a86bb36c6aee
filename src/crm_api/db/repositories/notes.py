"""
crm_api.db.repositories.notes

Repository for `Note` entities.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.authorization.scoping import apply_ownership_filter
from crm_api.db.models import Note


class NoteRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        title: str,
        created_by: uuid.UUID,
        account_id: uuid.UUID | None = None,
    ) -> Note:
        note = Note(title=title, created_by=created_by, account_id=account_id)
        self._session.add(note)
        await self._session.flush()
        return note

    async def get(self, note_id: uuid.UUID) -> Note | None:
        note = await self._session.get(Note, note_id)
        if note is None or note.is_deleted:
            return None
        return note

    async def list_visible(
        self,
        *,
        user_id: uuid.UUID | None,
        role: str | None,
        admin_role: str = "Admin",
        account_id: uuid.UUID | None = None,
    ) -> list[Note]:
        stmt = apply_ownership_filter(select(Note), Note, user_id, role, admin_role=admin_role)
        stmt = stmt.where(Note.is_deleted.is_(False))
        if account_id is not None:
            stmt = stmt.where(Note.account_id == account_id)
        stmt = stmt.order_by(Note.title)
        return list((await self._session.execute(stmt)).scalars().all())

    async def rename(self, note: Note, title: str) -> None:
        note.title = title
        note.updated_at = datetime.utcnow()
        await self._session.flush()

    async def soft_delete(self, note: Note) -> None:
        note.is_deleted = True
        note.updated_at = datetime.utcnow()
        await self._session.flush()
