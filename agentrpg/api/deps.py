# File: agentrpg/api/deps.py

from fastapi import Request

from agentrpg.services.auth_service import CredentialService


def get_credential_service(request: Request) -> CredentialService:
    """
    FastAPI dependency returning the service built at application startup.

    Usage in route functions:
        service: CredentialService = Depends(get_credential_service)
    """
    return request.app.state.credential_service
