"""
tests.test_ownership_evaluator

Decision procedure of the owned-by policy, exercised without HTTP or a database.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

import pytest
import structlog
from structlog.testing import capture_logs
from starlette.authentication import UnauthenticatedUser
from starlette.requests import Request

from crm_api.auth.backend import ClaimsUser
from crm_api.authorization import evaluator as evaluator_module
from crm_api.authorization.evaluator import (
    AuthorizationOutcome,
    DenyReason,
    OwnershipEvaluator,
)
from crm_api.authorization.metadata import OwnershipMetadata, owned_by
from crm_api.authorization.resources import OwnedEntityType

OWNER = uuid.UUID("aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa")
STRANGER = uuid.UUID("bbbbbbbb-bbbb-4bbb-8bbb-bbbbbbbbbbbb")
NOTE_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")


@dataclass
class FakeNote:
    id: uuid.UUID
    owner_id: uuid.UUID


@dataclass
class FakeLookup:
    id: uuid.UUID
    name: str


class FakeStore:
    def __init__(self, rows: dict[uuid.UUID, Any] | None = None) -> None:
        self.rows = rows or {}
        self.calls: list[tuple[OwnedEntityType, uuid.UUID]] = []

    async def find_by_id(self, entity_type: OwnedEntityType, entity_id: uuid.UUID) -> Any | None:
        self.calls.append((entity_type, entity_id))
        return self.rows.get(entity_id)


async def get_note() -> None:  # stands in for a routed endpoint
    return None


async def undeclared_endpoint() -> None:
    return None


def _metadata() -> OwnershipMetadata:
    metadata = OwnershipMetadata()
    metadata.register(get_note, owned_by(OwnedEntityType.note))
    return metadata


def _request(
    *,
    user_id: uuid.UUID | None = STRANGER,
    role: str | None = "Basic",
    authenticated: bool = True,
    path_params: dict[str, Any] | None = None,
    endpoint: Any = get_note,
) -> Request:
    if authenticated:
        claims: dict[str, Any] = {}
        if user_id is not None:
            claims["sub"] = str(user_id)
        if role is not None:
            claims["role"] = role
        user: Any = ClaimsUser(claims)
    else:
        user = UnauthenticatedUser()
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("test", 80),
        "root_path": "",
        "path": f"/api/notes/{NOTE_ID}",
        "headers": [],
        "query_string": b"",
        "path_params": {"id": str(NOTE_ID)} if path_params is None else path_params,
        "endpoint": endpoint,
        "user": user,
    }
    return Request(scope)


def _evaluator(store: FakeStore, metadata: OwnershipMetadata | None = None) -> OwnershipEvaluator:
    return OwnershipEvaluator(store=store, metadata=metadata or _metadata(), admin_role="Admin")


@pytest.mark.asyncio
async def test_owner_is_allowed() -> None:
    store = FakeStore({NOTE_ID: FakeNote(id=NOTE_ID, owner_id=OWNER)})
    decision = await _evaluator(store).evaluate(_request(user_id=OWNER))
    assert decision.outcome is AuthorizationOutcome.allow
    assert decision.succeeded
    assert store.calls == [(OwnedEntityType.note, NOTE_ID)]


@pytest.mark.asyncio
async def test_other_user_is_denied_without_not_found() -> None:
    store = FakeStore({NOTE_ID: FakeNote(id=NOTE_ID, owner_id=OWNER)})
    decision = await _evaluator(store).evaluate(_request(user_id=STRANGER))
    assert decision.outcome is AuthorizationOutcome.deny
    assert decision.reason is DenyReason.ownership_mismatch
    assert not decision.not_found


@pytest.mark.asyncio
async def test_missing_entity_is_not_found() -> None:
    decision = await _evaluator(FakeStore()).evaluate(_request(user_id=STRANGER))
    assert decision.outcome is AuthorizationOutcome.not_found
    assert decision.not_found
    assert not decision.succeeded


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ["Admin", "admin", "ADMIN"])
async def test_admin_bypasses_lookup_entirely(role: str) -> None:
    store = FakeStore()
    decision = await _evaluator(store).evaluate(_request(user_id=STRANGER, role=role))
    assert decision.succeeded
    assert store.calls == []


@pytest.mark.asyncio
async def test_admin_is_allowed_even_without_declaration() -> None:
    decision = await _evaluator(FakeStore()).evaluate(
        _request(role="admin", endpoint=undeclared_endpoint)
    )
    assert decision.succeeded


@pytest.mark.asyncio
async def test_unauthenticated_is_denied() -> None:
    store = FakeStore({NOTE_ID: FakeNote(id=NOTE_ID, owner_id=OWNER)})
    decision = await _evaluator(store).evaluate(_request(authenticated=False))
    assert decision.reason is DenyReason.unauthenticated
    assert store.calls == []


@pytest.mark.asyncio
async def test_authenticated_without_user_id_is_denied_even_as_admin() -> None:
    decision = await _evaluator(FakeStore()).evaluate(_request(user_id=None, role="Admin"))
    assert decision.reason is DenyReason.unauthenticated


@pytest.mark.asyncio
async def test_non_request_context_is_denied() -> None:
    decision = await _evaluator(FakeStore()).evaluate(object())
    assert decision.outcome is AuthorizationOutcome.deny
    assert decision.reason is DenyReason.no_context


@pytest.mark.asyncio
async def test_missing_declaration_fails_closed_for_true_owner() -> None:
    store = FakeStore({NOTE_ID: FakeNote(id=NOTE_ID, owner_id=OWNER)})
    decision = await _evaluator(store).evaluate(_request(user_id=OWNER, endpoint=undeclared_endpoint))
    assert decision.reason is DenyReason.missing_declaration
    assert store.calls == []


@pytest.mark.asyncio
async def test_missing_id_param_is_denied() -> None:
    store = FakeStore()
    decision = await _evaluator(store).evaluate(_request(user_id=OWNER, path_params={}))
    assert decision.reason is DenyReason.missing_id
    assert store.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["not-a-uuid", "123", "11111111-1111-1111-1111"])
async def test_invalid_id_is_denied_before_lookup(raw: str) -> None:
    store = FakeStore()
    decision = await _evaluator(store).evaluate(_request(user_id=OWNER, path_params={"id": raw}))
    assert decision.reason is DenyReason.invalid_id
    assert not decision.not_found
    assert len(store.calls) == 0


@pytest.mark.asyncio
async def test_custom_id_param_is_read() -> None:
    async def get_account() -> None:
        return None

    metadata = OwnershipMetadata()
    metadata.register(get_account, owned_by(OwnedEntityType.account, id_param="account_id"))
    store = FakeStore({NOTE_ID: FakeNote(id=NOTE_ID, owner_id=OWNER)})

    decision = await _evaluator(store, metadata).evaluate(
        _request(user_id=OWNER, endpoint=get_account, path_params={"account_id": str(NOTE_ID)})
    )
    assert decision.succeeded
    assert store.calls == [(OwnedEntityType.account, NOTE_ID)]


@pytest.mark.asyncio
async def test_entity_without_owner_capability_is_denied() -> None:
    store = FakeStore({NOTE_ID: FakeLookup(id=NOTE_ID, name="Enterprise")})
    decision = await _evaluator(store).evaluate(_request(user_id=OWNER))
    assert decision.reason is DenyReason.not_ownable
    assert not decision.not_found


@pytest.mark.asyncio
async def test_repeated_evaluation_is_stable() -> None:
    store = FakeStore({NOTE_ID: FakeNote(id=NOTE_ID, owner_id=OWNER)})
    evaluator = _evaluator(store)
    owner_decisions = {await evaluator.evaluate(_request(user_id=OWNER)) for _ in range(3)}
    stranger_decisions = {await evaluator.evaluate(_request(user_id=STRANGER)) for _ in range(3)}
    assert len(owner_decisions) == 1 and next(iter(owner_decisions)).succeeded
    assert len(stranger_decisions) == 1 and not next(iter(stranger_decisions)).succeeded
    # No caching: every evaluation performs its own lookup.
    assert len(store.calls) == 6


@pytest.fixture
def audit_log(monkeypatch):
    # A fresh logger so cached loggers from earlier app setups cannot bypass the capture.
    with capture_logs() as entries:
        monkeypatch.setattr(evaluator_module, "log", structlog.get_logger(evaluator_module.__name__))
        yield entries


@pytest.mark.asyncio
async def test_mismatch_is_logged_with_actual_owner(audit_log) -> None:
    store = FakeStore({NOTE_ID: FakeNote(id=NOTE_ID, owner_id=OWNER)})
    await _evaluator(store).evaluate(_request(user_id=STRANGER))

    assert len(audit_log) == 1
    entry = audit_log[0]
    assert entry["event"] == "rbac.forbidden"
    assert entry["log_level"] == "info"
    assert entry["reason"] == "ownership_mismatch"
    assert entry["path"] == f"/api/notes/{NOTE_ID}"
    assert entry["entity_type"] == "note"
    assert entry["entity_id"] == NOTE_ID
    assert entry["user_id"] == STRANGER
    assert entry["owner_id"] == OWNER


@pytest.mark.asyncio
async def test_not_found_is_logged(audit_log) -> None:
    await _evaluator(FakeStore()).evaluate(_request(user_id=STRANGER))

    assert len(audit_log) == 1
    entry = audit_log[0]
    assert entry["event"] == "rbac.not_found"
    assert entry["reason"] == "entity_absent"
    assert entry["path"] == f"/api/notes/{NOTE_ID}"
    assert entry["entity_type"] == "note"
    assert entry["entity_id"] == NOTE_ID
    assert entry["user_id"] == STRANGER
    assert "owner_id" not in entry


@pytest.mark.asyncio
async def test_invalid_id_is_logged_as_warning(audit_log) -> None:
    await _evaluator(FakeStore()).evaluate(_request(user_id=OWNER, path_params={"id": "nope"}))

    assert len(audit_log) == 1
    entry = audit_log[0]
    assert entry["event"] == "rbac.deny"
    assert entry["log_level"] == "warning"
    assert entry["reason"] == "invalid_id"
    assert entry["entity_type"] == "note"
    assert entry["user_id"] == OWNER
    assert entry["value"] == "nope"


@pytest.mark.asyncio
async def test_unauthenticated_and_missing_declaration_are_logged(audit_log) -> None:
    evaluator = _evaluator(FakeStore())
    await evaluator.evaluate(_request(authenticated=False))
    await evaluator.evaluate(_request(user_id=OWNER, endpoint=undeclared_endpoint))

    assert [e["reason"] for e in audit_log] == ["unauthenticated", "missing_declaration"]
    assert all(e["path"] == f"/api/notes/{NOTE_ID}" for e in audit_log)


@pytest.mark.asyncio
async def test_allowed_requests_log_nothing(audit_log) -> None:
    store = FakeStore({NOTE_ID: FakeNote(id=NOTE_ID, owner_id=OWNER)})
    evaluator = _evaluator(store)
    assert (await evaluator.evaluate(_request(user_id=OWNER))).succeeded
    assert (await evaluator.evaluate(_request(user_id=STRANGER, role="admin"))).succeeded
    assert audit_log == []
