"""
crm_api.authorization.evaluator

The ownership decision procedure behind the `owned-by` policy.

Responsibilities:
- Decide, for one request to an ownership-protected endpoint, whether the caller
  may proceed: ALLOW, DENY, or NOT_FOUND.
- Emit a structured audit log entry for every denial.

Decision order (first applicable branch wins):
1. No usable request context                         -> DENY
2. Unauthenticated, or no resolvable user id         -> DENY
3. Role equals the admin role (case-insensitive)     -> ALLOW (no lookup at all)
4. Endpoint has no ownership declaration             -> DENY (fail closed)
5. Declared id parameter absent from the path        -> DENY
6. Id parameter is not a UUID                        -> DENY (store never called)
7. No entity with that id                            -> NOT_FOUND
8. Entity has no owner capability                    -> DENY
9. owner id == caller id                             -> ALLOW, else DENY

Every branch is terminal and resolved here; nothing is raised to the caller.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from typing import Any

from starlette.requests import HTTPConnection

from crm_api.auth.identity import IdentityResolver
from crm_api.authorization.metadata import OwnershipMetadata
from crm_api.authorization.resources import OwnedResource
from crm_api.authorization.store import EntityStore
from crm_api.observability.logging import get_logger

log = get_logger(__name__)


class AuthorizationOutcome(enum.StrEnum):
    allow = "ALLOW"
    deny = "DENY"
    not_found = "NOT_FOUND"


class DenyReason(enum.StrEnum):
    no_context = "no_context"
    unauthenticated = "unauthenticated"
    missing_declaration = "missing_declaration"
    missing_id = "missing_id"
    invalid_id = "invalid_id"
    entity_absent = "entity_absent"
    not_ownable = "not_ownable"
    ownership_mismatch = "ownership_mismatch"


@dataclass(frozen=True, slots=True)
class OwnershipDecision:
    outcome: AuthorizationOutcome
    reason: DenyReason | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is AuthorizationOutcome.allow

    @property
    def not_found(self) -> bool:
        return self.outcome is AuthorizationOutcome.not_found


ALLOW = OwnershipDecision(AuthorizationOutcome.allow)


def _deny(reason: DenyReason) -> OwnershipDecision:
    return OwnershipDecision(AuthorizationOutcome.deny, reason)


class OwnershipEvaluator:
    def __init__(
        self,
        *,
        store: EntityStore,
        metadata: OwnershipMetadata,
        admin_role: str = "Admin",
    ) -> None:
        self._store = store
        self._metadata = metadata
        self._admin_role = admin_role

    async def evaluate(self, request: Any) -> OwnershipDecision:
        if not isinstance(request, HTTPConnection):
            log.warning("rbac.deny", reason=DenyReason.no_context.value)
            return _deny(DenyReason.no_context)

        path = request.url.path
        principal = IdentityResolver(request).principal()
        if not principal.is_authenticated or principal.user_id is None:
            log.warning("rbac.deny", reason=DenyReason.unauthenticated.value, path=path)
            return _deny(DenyReason.unauthenticated)

        if principal.has_role(self._admin_role):
            return ALLOW

        declaration = self._metadata.for_request(request)
        if declaration is None:
            log.warning(
                "rbac.deny",
                reason=DenyReason.missing_declaration.value,
                path=path,
                user_id=principal.user_id,
            )
            return _deny(DenyReason.missing_declaration)

        entity_type = declaration.entity_type.value
        raw_id = request.path_params.get(declaration.id_param)
        if raw_id is None:
            log.warning(
                "rbac.deny",
                reason=DenyReason.missing_id.value,
                path=path,
                entity_type=entity_type,
                id_param=declaration.id_param,
                user_id=principal.user_id,
            )
            return _deny(DenyReason.missing_id)

        try:
            entity_id = raw_id if isinstance(raw_id, uuid.UUID) else uuid.UUID(str(raw_id))
        except ValueError:
            log.warning(
                "rbac.deny",
                reason=DenyReason.invalid_id.value,
                path=path,
                entity_type=entity_type,
                value=str(raw_id),
                user_id=principal.user_id,
            )
            return _deny(DenyReason.invalid_id)

        entity = await self._store.find_by_id(declaration.entity_type, entity_id)
        if entity is None:
            log.info(
                "rbac.not_found",
                reason=DenyReason.entity_absent.value,
                path=path,
                entity_type=entity_type,
                entity_id=entity_id,
                user_id=principal.user_id,
            )
            return OwnershipDecision(AuthorizationOutcome.not_found, DenyReason.entity_absent)

        if not isinstance(entity, OwnedResource):
            log.warning(
                "rbac.deny",
                reason=DenyReason.not_ownable.value,
                path=path,
                entity_type=entity_type,
                entity_id=entity_id,
                user_id=principal.user_id,
            )
            return _deny(DenyReason.not_ownable)

        if entity.owner_id == principal.user_id:
            return ALLOW

        log.info(
            "rbac.forbidden",
            reason=DenyReason.ownership_mismatch.value,
            path=path,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=principal.user_id,
            owner_id=entity.owner_id,
        )
        return _deny(DenyReason.ownership_mismatch)


# --- Module Notes -----------------------------------------------------------
# The evaluator keeps no state between calls and performs at most one store lookup;
# concurrent evaluations need no coordination.
