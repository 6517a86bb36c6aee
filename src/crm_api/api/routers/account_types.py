"""
crm_api.api.routers.account_types

Account type (reference data) endpoints.

Account types carry no owner. The single-item endpoint is still routed through the
`owned-by` policy, so only administrators can read it; everyone else gets 403.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from crm_api.api.deps import db_session
from crm_api.authorization.metadata import owned_by, ownership
from crm_api.authorization.policies import OWNED_BY, authorize
from crm_api.authorization.resources import OwnedEntityType
from crm_api.db.repositories.accounts import AccountTypeRepo

router = APIRouter(prefix="/api/account-types", tags=["account-types"])


class AccountTypeOut(BaseModel):
    id: uuid.UUID
    name: str


@router.get("/{id}", dependencies=[Depends(authorize(OWNED_BY))])
@ownership.declare(owned_by(OwnedEntityType.account_type))
async def get_account_type(
    id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, AccountTypeOut]:
    account_type = await AccountTypeRepo(session).get(id)
    if account_type is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")
    return {"data": AccountTypeOut(id=account_type.id, name=account_type.name)}
