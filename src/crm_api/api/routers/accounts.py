"""
crm_api.api.routers.accounts

Account endpoints.

Responsibilities:
- List accounts scoped to the caller, with pagination.
- Create accounts owned by the caller.
- Read a single account and its notes behind the `owned-by` policy.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND

from crm_api.api.deps import db_session, settings_dep
from crm_api.api.routers.notes import NoteOut
from crm_api.auth.deps import require_authenticated
from crm_api.auth.models import Principal
from crm_api.authorization.metadata import owned_by, ownership
from crm_api.authorization.policies import OWNED_BY, authorize
from crm_api.authorization.resources import OwnedEntityType
from crm_api.db.models import Account
from crm_api.db.repositories.accounts import AccountRepo
from crm_api.db.repositories.notes import NoteRepo
from crm_api.settings import Settings

router = APIRouter(prefix="/api/accounts", tags=["accounts"])

_account_owner = owned_by(OwnedEntityType.account).with_id_param("account_id")


class CreateAccountRequest(BaseModel):
    company_name: str = Field(min_length=1, max_length=200)
    account_type_id: uuid.UUID | None = None


class AccountOut(BaseModel):
    id: uuid.UUID
    company_name: str
    account_type_id: uuid.UUID | None
    created_by: uuid.UUID

    @classmethod
    def from_model(cls, account: Account) -> AccountOut:
        return cls(
            id=account.id,
            company_name=account.company_name,
            account_type_id=account.account_type_id,
            created_by=account.created_by,
        )


@router.get("")
async def list_accounts(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(require_authenticated),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, list[AccountOut]]:
    accounts = await AccountRepo(session).list_visible(
        user_id=principal.user_id,
        role=principal.role,
        admin_role=settings.admin_role,
        limit=limit,
        offset=offset,
    )
    return {"data": [AccountOut.from_model(a) for a in accounts]}


@router.post("", status_code=HTTP_201_CREATED)
async def create_account(
    body: CreateAccountRequest,
    principal: Principal = Depends(require_authenticated),
    session: AsyncSession = Depends(db_session),
) -> dict[str, AccountOut]:
    account = await AccountRepo(session).create(
        company_name=body.company_name,
        created_by=principal.user_id,
        account_type_id=body.account_type_id,
    )
    await session.commit()
    return {"data": AccountOut.from_model(account)}


@router.get("/{account_id}", dependencies=[Depends(authorize(OWNED_BY))])
@ownership.declare(_account_owner)
async def get_account(
    account_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, AccountOut]:
    account = await AccountRepo(session).get(account_id)
    if account is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")
    return {"data": AccountOut.from_model(account)}


@router.get("/{account_id}/notes", dependencies=[Depends(authorize(OWNED_BY))])
@ownership.declare(_account_owner)
async def list_account_notes(
    account_id: uuid.UUID,
    principal: Principal = Depends(require_authenticated),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, list[NoteOut]]:
    if await AccountRepo(session).get(account_id) is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")
    notes = await NoteRepo(session).list_visible(
        user_id=principal.user_id,
        role=principal.role,
        admin_role=settings.admin_role,
        account_id=account_id,
    )
    return {"data": [NoteOut.from_model(n) for n in notes]}


# --- Module Notes -----------------------------------------------------------
# Both single-account endpoints share one declaration keyed on `account_id`.
