"""
crm_api.authorization.policies

Named authorization policies exposed to routers as FastAPI dependencies.

Responsibilities:
- Define the `owned-by` policy id.
- Build the per-request evaluator from request-scoped collaborators and translate
  its decision.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from crm_api.api.deps import db_session, settings_dep
from crm_api.authorization.evaluator import OwnershipDecision, OwnershipEvaluator
from crm_api.authorization.metadata import ownership
from crm_api.authorization.store import SqlEntityStore
from crm_api.authorization.translator import translate
from crm_api.settings import Settings

OWNED_BY = "owned-by"


async def owned_by_policy(
    request: Request,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> OwnershipDecision:
    evaluator = OwnershipEvaluator(
        store=SqlEntityStore(session),
        metadata=ownership,
        admin_role=settings.admin_role,
    )
    decision = await evaluator.evaluate(request)
    translate(decision)
    return decision


_POLICIES: dict[str, Callable[..., Awaitable[OwnershipDecision]]] = {
    OWNED_BY: owned_by_policy,
}


def authorize(policy: str) -> Callable[..., Awaitable[OwnershipDecision]]:
    """
    Return the dependency enforcing `policy`, e.g. `Depends(authorize(OWNED_BY))`.
    """

    try:
        return _POLICIES[policy]
    except KeyError:
        raise KeyError(f"Unknown authorization policy: {policy!r}") from None


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request, so the endpoint's own `db_session`
# dependency shares the session the policy used for its lookup.
