# File: agentrpg/api/v1/routes_auth.py

"""
Auth API routes.

Both endpoints accept POST only and always answer with a JSON object,
including on errors: ``{"success": true, ...}`` or ``{"error": "<code>"}``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from agentrpg.api.deps import get_credential_service
from agentrpg.schemas.agent import AgentRead
from agentrpg.services.auth_service import CredentialService
from agentrpg.services.outcomes import AuthFailure

router = APIRouter()


def outcome_response(outcome) -> JSONResponse:
    return JSONResponse(status_code=outcome.status_code, content=outcome.to_dict())


@router.post("/register", summary="Register a new agent")
async def register(
    request: Request,
    service: CredentialService = Depends(get_credential_service),
):
    """
    Create an account from ``{email, password, name?}``.

    Errors: database_unavailable, invalid_json, email_and_password_required,
    email_already_registered, store_error.
    """
    body = await request.body()
    outcome = await run_in_threadpool(service.register, body)
    return outcome_response(outcome)


@router.post("/login", summary="Verify credentials")
async def login(
    request: Request,
    service: CredentialService = Depends(get_credential_service),
):
    """
    Check ``{email, password}`` and record the visit in last_seen.

    No session token is issued. Errors: database_unavailable, invalid_json,
    invalid_credentials.
    """
    body = await request.body()
    outcome = await run_in_threadpool(service.login, body)
    return outcome_response(outcome)


@router.get("/me", summary="Current agent (HTTP Basic auth)")
def read_me(
    authorization: Optional[str] = Header(default=None),
    service: CredentialService = Depends(get_credential_service),
):
    result = service.authenticate_basic(authorization)
    if isinstance(result, AuthFailure):
        return JSONResponse(
            status_code=result.status_code,
            content=result.to_dict(),
            headers={"WWW-Authenticate": "Basic"},
        )
    return AgentRead(
        agent_id=result.id,
        email=result.email,
        name=result.name,
        created_at=result.created_at,
        last_seen=result.last_seen,
    )
