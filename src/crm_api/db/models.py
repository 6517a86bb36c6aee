"""
crm_api.db.models

Persistence schema for the CRM entities the authorization core touches.

Responsibilities:
- Define owner-scoped entities (`Note`, `Account`) sharing `OwnedMixin`.
- Define reference data (`AccountType`) that has no owner.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from crm_api.db.base import Base


def _utcnow() -> datetime:
    return datetime.utcnow()


class OwnedMixin:
    """
    Ownership column shared by every owner-scoped entity.

    `created_by` is set once by the create path and never changed afterwards;
    the authorization core only reads it (through `owner_id`).
    """

    created_by: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False, index=True)

    @property
    def owner_id(self) -> uuid.UUID:
        return self.created_by


class AccountType(Base):
    __tablename__ = "account_types"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)


class Account(OwnedMixin, Base):
    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    account_type_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("account_types.id"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)
    is_deleted: Mapped[bool] = mapped_column(nullable=False, default=False)

    account_type: Mapped[AccountType | None] = relationship()
    notes: Mapped[list[Note]] = relationship(back_populates="account")


class Note(OwnedMixin, Base):
    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Parent account this note belongs to (optional for standalone notes).
    account_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("accounts.id"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)
    is_deleted: Mapped[bool] = mapped_column(nullable=False, default=False)

    account: Mapped[Account | None] = relationship(back_populates="notes")


# --- Module Notes -----------------------------------------------------------
# Users and roles live in the identity provider; `created_by` stores the token subject
# (a UUID) rather than a foreign key into a local users table.
