"""
tests.conftest

Shared fixtures: an app bound to a throwaway SQLite file, an in-process HTTP
client, token helpers, and direct DB seeding.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from crm_api.api.app import create_app
from crm_api.auth.jwt import JwtConfig, issue_token
from crm_api.db.models import Account, AccountType, Note
from crm_api.settings import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(env="test", database_url=f"sqlite+aiosqlite:///{tmp_path / 'crm.db'}")


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not manage lifespan automatically; do it explicitly.
    await app.router.startup()
    try:
        yield app
    finally:
        await app.router.shutdown()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def auth_headers(settings: Settings):
    def _headers(user_id: uuid.UUID, role: str | None = "Basic") -> dict[str, str]:
        token = issue_token(cfg=JwtConfig.from_settings(settings), subject=str(user_id), role=role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def seed(app: FastAPI):
    async def _seed(*rows: Note | Account | AccountType) -> None:
        async with app.state.sessionmaker() as session:
            session.add_all(rows)
            await session.commit()

    return _seed
