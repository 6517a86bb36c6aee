"""
crm_api.db.repositories.accounts

Repository for `Account` and `AccountType` entities.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.authorization.scoping import apply_ownership_filter
from crm_api.db.models import Account, AccountType


class AccountRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        company_name: str,
        created_by: uuid.UUID,
        account_type_id: uuid.UUID | None = None,
    ) -> Account:
        account = Account(
            company_name=company_name,
            created_by=created_by,
            account_type_id=account_type_id,
        )
        self._session.add(account)
        await self._session.flush()
        return account

    async def get(self, account_id: uuid.UUID) -> Account | None:
        account = await self._session.get(Account, account_id)
        if account is None or account.is_deleted:
            return None
        return account

    async def list_visible(
        self,
        *,
        user_id: uuid.UUID | None,
        role: str | None,
        admin_role: str = "Admin",
        limit: int = 100,
        offset: int = 0,
    ) -> list[Account]:
        stmt = apply_ownership_filter(
            select(Account), Account, user_id, role, admin_role=admin_role
        )
        stmt = (
            stmt.where(Account.is_deleted.is_(False))
            .order_by(Account.company_name)
            .limit(limit)
            .offset(offset)
        )
        return list((await self._session.execute(stmt)).scalars().all())


class AccountTypeRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, name: str) -> AccountType:
        account_type = AccountType(name=name)
        self._session.add(account_type)
        await self._session.flush()
        return account_type

    async def get(self, account_type_id: uuid.UUID) -> AccountType | None:
        return await self._session.get(AccountType, account_type_id)
