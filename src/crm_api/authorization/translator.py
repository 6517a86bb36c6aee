"""
crm_api.authorization.translator

Maps ownership decisions onto HTTP outcomes.

- ALLOW     -> returns; the endpoint runs.
- NOT_FOUND -> 404.
- DENY      -> 403.

Response bodies are identical for every deny reason; only the status differs.
"""

from __future__ import annotations

from fastapi import HTTPException
from starlette.status import HTTP_403_FORBIDDEN, HTTP_404_NOT_FOUND

from crm_api.authorization.evaluator import AuthorizationOutcome, OwnershipDecision


def status_for(decision: OwnershipDecision) -> int | None:
    if decision.outcome is AuthorizationOutcome.allow:
        return None
    if decision.outcome is AuthorizationOutcome.not_found:
        return HTTP_404_NOT_FOUND
    return HTTP_403_FORBIDDEN


def translate(decision: OwnershipDecision) -> None:
    status_code = status_for(decision)
    if status_code is None:
        return
    if status_code == HTTP_404_NOT_FOUND:
        raise HTTPException(status_code=status_code, detail="Not found")
    raise HTTPException(status_code=status_code, detail="Forbidden")


# --- Module Notes -----------------------------------------------------------
# The 403/404 split is the only signal callers get; the reason stays in the audit log.
