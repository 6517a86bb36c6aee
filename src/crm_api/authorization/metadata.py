"""
crm_api.authorization.metadata

Static per-endpoint ownership declarations.

Responsibilities:
- Describe which entity type owns an endpoint's target and which path parameter
  carries its id (`OwnershipDeclaration`, built with `owned_by(...)`).
- Register declarations against endpoint callables at route-registration time and
  look them up for the matched endpoint at request time (`OwnershipMetadata`).

Usage:

    @router.get("/{id}", dependencies=[Depends(authorize(OWNED_BY))])
    @ownership.declare(owned_by(OwnedEntityType.note))
    async def get_note(id: uuid.UUID, ...): ...

The `declare` decorator sits below the route decorator so FastAPI registers the
same callable that carries the declaration.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, TypeVar

from starlette.requests import HTTPConnection

from crm_api.authorization.resources import OwnedEntityType

DEFAULT_ID_PARAM = "id"

F = TypeVar("F", bound=Callable[..., Any])


def _normalize_id_param(id_param: str | None) -> str:
    # Only blank names fall back to the default; anything else is kept verbatim.
    if id_param is None or not id_param.strip():
        return DEFAULT_ID_PARAM
    return id_param


@dataclass(frozen=True, slots=True)
class OwnershipDeclaration:
    entity_type: OwnedEntityType
    id_param: str = DEFAULT_ID_PARAM

    def __post_init__(self) -> None:
        object.__setattr__(self, "id_param", _normalize_id_param(self.id_param))

    def with_id_param(self, id_param: str) -> OwnershipDeclaration:
        return replace(self, id_param=id_param)


def owned_by(entity_type: OwnedEntityType, id_param: str = DEFAULT_ID_PARAM) -> OwnershipDeclaration:
    return OwnershipDeclaration(entity_type=OwnedEntityType(entity_type), id_param=id_param)


class OwnershipMetadata:
    """
    Registry of ownership declarations keyed by endpoint callable.
    """

    def __init__(self) -> None:
        self._by_endpoint: dict[Callable[..., Any], OwnershipDeclaration] = {}

    def declare(self, declaration: OwnershipDeclaration) -> Callable[[F], F]:
        def _decorator(endpoint: F) -> F:
            self.register(endpoint, declaration)
            return endpoint

        return _decorator

    def register(self, endpoint: Callable[..., Any], declaration: OwnershipDeclaration) -> None:
        if endpoint in self._by_endpoint:
            raise ValueError(f"Ownership already declared for {endpoint.__qualname__}")
        self._by_endpoint[endpoint] = declaration

    def get(self, endpoint: Callable[..., Any] | None) -> OwnershipDeclaration | None:
        if endpoint is None:
            return None
        return self._by_endpoint.get(endpoint)

    def for_request(self, conn: HTTPConnection) -> OwnershipDeclaration | None:
        # Routing stores the matched endpoint callable in the ASGI scope.
        return self.get(conn.scope.get("endpoint"))


# Process-wide registry used by the routers; tests may build their own.
ownership = OwnershipMetadata()


# --- Module Notes -----------------------------------------------------------
# An endpoint guarded by the owned-by policy without a declaration is denied at
# request time; nothing here validates that pairing at import time.
