"""
crm_api.api.routers.notes

Note endpoints.

Responsibilities:
- List notes scoped to the caller (admins see all).
- Create notes owned by the caller.
- Read/update/delete single notes behind the `owned-by` policy.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_204_NO_CONTENT,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
)

from crm_api.api.deps import db_session, settings_dep
from crm_api.auth.deps import require_authenticated
from crm_api.auth.models import Principal
from crm_api.authorization.metadata import owned_by, ownership
from crm_api.authorization.policies import OWNED_BY, authorize
from crm_api.authorization.resources import OwnedEntityType
from crm_api.authorization.scoping import is_admin_role
from crm_api.db.models import Note
from crm_api.db.repositories.accounts import AccountRepo
from crm_api.db.repositories.notes import NoteRepo
from crm_api.settings import Settings

router = APIRouter(prefix="/api/notes", tags=["notes"])


class CreateNoteRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    account_id: uuid.UUID | None = None


class UpdateNoteRequest(BaseModel):
    # The account link is fixed at creation; sending it is rejected rather than ignored.
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=200)


class NoteOut(BaseModel):
    id: uuid.UUID
    title: str
    account_id: uuid.UUID | None
    created_by: uuid.UUID

    @classmethod
    def from_model(cls, note: Note) -> NoteOut:
        return cls(
            id=note.id,
            title=note.title,
            account_id=note.account_id,
            created_by=note.created_by,
        )


@router.get("")
async def list_notes(
    principal: Principal = Depends(require_authenticated),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, list[NoteOut]]:
    notes = await NoteRepo(session).list_visible(
        user_id=principal.user_id, role=principal.role, admin_role=settings.admin_role
    )
    return {"data": [NoteOut.from_model(n) for n in notes]}


@router.post("", status_code=HTTP_201_CREATED)
async def create_note(
    body: CreateNoteRequest,
    response: Response,
    principal: Principal = Depends(require_authenticated),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, NoteOut]:
    if body.account_id is not None:
        # Attaching a note to an account requires the same ownership as reading the account.
        account = await AccountRepo(session).get(body.account_id)
        if account is None:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")
        if account.owner_id != principal.user_id and not is_admin_role(
            principal.role, settings.admin_role
        ):
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Forbidden")

    # Owner is always the caller; clients cannot choose it.
    note = await NoteRepo(session).create(
        title=body.title, created_by=principal.user_id, account_id=body.account_id
    )
    await session.commit()
    response.headers["Location"] = f"{router.prefix}/{note.id}"
    return {"data": NoteOut.from_model(note)}


@router.get("/{id}", dependencies=[Depends(authorize(OWNED_BY))])
@ownership.declare(owned_by(OwnedEntityType.note))
async def get_note(
    id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, NoteOut]:
    note = await NoteRepo(session).get(id)
    if note is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")
    return {"data": NoteOut.from_model(note)}


@router.put("/{id}", status_code=HTTP_204_NO_CONTENT, dependencies=[Depends(authorize(OWNED_BY))])
@ownership.declare(owned_by(OwnedEntityType.note))
async def update_note(
    id: uuid.UUID,
    body: UpdateNoteRequest,
    session: AsyncSession = Depends(db_session),
) -> None:
    repo = NoteRepo(session)
    note = await repo.get(id)
    if note is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")
    await repo.rename(note, body.title)
    await session.commit()


@router.delete("/{id}", status_code=HTTP_204_NO_CONTENT, dependencies=[Depends(authorize(OWNED_BY))])
@ownership.declare(owned_by(OwnedEntityType.note))
async def delete_note(
    id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> None:
    repo = NoteRepo(session)
    note = await repo.get(id)
    if note is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")
    await repo.soft_delete(note)
    await session.commit()


# --- Module Notes -----------------------------------------------------------
# The endpoints re-check existence after the policy: admins skip the policy's lookup,
# and soft-deleted notes pass the ownership check but must still answer 404.
