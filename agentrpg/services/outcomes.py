# File: agentrpg/services/outcomes.py

"""
Result types returned by the credential service.

Every register/login call ends in exactly one AuthSuccess or AuthFailure;
the error codes form a closed set so callers match on the enum instead of
comparing strings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union


class AuthErrorCode(str, Enum):
    DATABASE_UNAVAILABLE = "database_unavailable"
    INVALID_JSON = "invalid_json"
    EMAIL_AND_PASSWORD_REQUIRED = "email_and_password_required"
    EMAIL_ALREADY_REGISTERED = "email_already_registered"
    INVALID_CREDENTIALS = "invalid_credentials"
    STORE_ERROR = "store_error"


# HTTP status used when a failure is sent over the API
HTTP_STATUS: Dict[AuthErrorCode, int] = {
    AuthErrorCode.DATABASE_UNAVAILABLE: 503,
    AuthErrorCode.INVALID_JSON: 400,
    AuthErrorCode.EMAIL_AND_PASSWORD_REQUIRED: 400,
    AuthErrorCode.EMAIL_ALREADY_REGISTERED: 409,
    AuthErrorCode.INVALID_CREDENTIALS: 401,
    AuthErrorCode.STORE_ERROR: 500,
}


@dataclass(frozen=True)
class AuthSuccess:
    agent_id: int
    message: str

    @property
    def status_code(self) -> int:
        return 200

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "agent_id": self.agent_id, "message": self.message}


@dataclass(frozen=True)
class AuthFailure:
    code: AuthErrorCode

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.code]

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code.value}


AuthOutcome = Union[AuthSuccess, AuthFailure]
