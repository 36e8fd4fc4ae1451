# File: agentrpg/services/auth_service.py

"""
Credential service: registration, login and Basic-auth verification.

The service is stateless apart from the injected store. A service built
without a store (no DATABASE_URL) answers every call with
``database_unavailable`` instead of failing.

Request bodies are handed over raw so the service owns the whole
validation order: store availability first, then JSON shape, then
required fields, and only then the store.
"""

import json
import logging
from typing import Any, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from agentrpg.core.security import (
    SALT_BYTES,
    generate_salt,
    hash_password,
    parse_basic_auth,
    verify_password,
)
from agentrpg.db.credential_store import (
    Account,
    CredentialStore,
    DuplicateEmail,
    StoreError,
    StoreUnavailable,
    utcnow,
)
from agentrpg.schemas.agent import LoginRequest, RegisterRequest
from agentrpg.services.outcomes import AuthErrorCode, AuthFailure, AuthOutcome, AuthSuccess

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Welcome to Agent RPG! Log in with your email and password to start playing."
LOGIN_MESSAGE = "Login successful."

RequestModel = TypeVar("RequestModel", bound=BaseModel)


def _encodable(req: BaseModel) -> bool:
    # json.loads accepts lone surrogates ("\ud800") that cannot be hashed or stored
    for value in req.model_dump().values():
        if isinstance(value, str):
            try:
                value.encode("utf-8")
            except UnicodeEncodeError:
                return False
    return True


def parse_body(body: Union[bytes, str], model: Type[RequestModel]) -> Optional[RequestModel]:
    """
    Decode a JSON object into `model`, or return None when it is not one.

    A literal ``null`` body counts as an empty object. Strings that are not
    valid Unicode text make the whole body invalid.
    """
    try:
        data: Any = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    if data is None:
        data = {}
    try:
        req = model.model_validate(data)
    except ValidationError:
        return None
    return req if _encodable(req) else None


class CredentialService:
    def __init__(
        self,
        store: Optional[CredentialStore],
        *,
        salt_bytes: int = SALT_BYTES,
        timeout: Optional[float] = None,
    ) -> None:
        self._store = store
        self._salt_bytes = salt_bytes
        self._timeout = timeout

    @property
    def available(self) -> bool:
        return self._store is not None

    def _deadline(self, timeout: Optional[float]) -> Optional[float]:
        return timeout if timeout is not None else self._timeout

    def register(self, body: Union[bytes, str], *, timeout: Optional[float] = None) -> AuthOutcome:
        """
        Create an account from ``{email, password, name?}``.

        The insert is attempted directly; a duplicate email is recognised
        from the store's constraint violation, not from a prior lookup.
        """
        if self._store is None:
            return AuthFailure(AuthErrorCode.DATABASE_UNAVAILABLE)

        req = parse_body(body, RegisterRequest)
        if req is None:
            return AuthFailure(AuthErrorCode.INVALID_JSON)
        if not req.email or not req.password:
            return AuthFailure(AuthErrorCode.EMAIL_AND_PASSWORD_REQUIRED)

        salt = generate_salt(self._salt_bytes)
        password_hash = hash_password(req.password, salt)

        try:
            agent_id = self._store.create_account(
                req.email,
                password_hash,
                salt,
                req.name or None,
                timeout=self._deadline(timeout),
            )
        except DuplicateEmail:
            logger.info("Registration rejected, email already registered")
            return AuthFailure(AuthErrorCode.EMAIL_ALREADY_REGISTERED)
        except StoreUnavailable:
            logger.exception("Registration failed, store unavailable")
            return AuthFailure(AuthErrorCode.DATABASE_UNAVAILABLE)
        except StoreError:
            logger.exception("Registration failed")
            return AuthFailure(AuthErrorCode.STORE_ERROR)

        logger.info("Registered agent %s", agent_id)
        return AuthSuccess(agent_id=agent_id, message=WELCOME_MESSAGE)

    def login(self, body: Union[bytes, str], *, timeout: Optional[float] = None) -> AuthOutcome:
        """
        Check ``{email, password}`` against the stored salted hash.

        Unknown email and wrong password produce the same failure.
        """
        if self._store is None:
            return AuthFailure(AuthErrorCode.DATABASE_UNAVAILABLE)

        req = parse_body(body, LoginRequest)
        if req is None:
            return AuthFailure(AuthErrorCode.INVALID_JSON)

        try:
            account = self._verify(req.email or "", req.password or "", timeout)
        except StoreUnavailable:
            logger.exception("Login failed, store unavailable")
            return AuthFailure(AuthErrorCode.DATABASE_UNAVAILABLE)
        except StoreError:
            logger.exception("Login failed")
            return AuthFailure(AuthErrorCode.STORE_ERROR)

        if account is None:
            return AuthFailure(AuthErrorCode.INVALID_CREDENTIALS)

        self._store.touch_last_seen(account.id, utcnow(), timeout=self._deadline(timeout))
        logger.info("Agent %s logged in", account.id)
        return AuthSuccess(agent_id=account.id, message=LOGIN_MESSAGE)

    def authenticate_basic(
        self, authorization: Optional[str], *, timeout: Optional[float] = None
    ) -> Union[Account, AuthFailure]:
        """
        Resolve an ``Authorization: Basic`` header to its account.

        Does not touch last_seen; that only moves on an explicit login.
        """
        if self._store is None:
            return AuthFailure(AuthErrorCode.DATABASE_UNAVAILABLE)

        creds = parse_basic_auth(authorization)
        if creds is None:
            return AuthFailure(AuthErrorCode.INVALID_CREDENTIALS)

        try:
            account = self._verify(creds[0], creds[1], timeout)
        except StoreUnavailable:
            logger.exception("Basic auth failed, store unavailable")
            return AuthFailure(AuthErrorCode.DATABASE_UNAVAILABLE)
        except StoreError:
            logger.exception("Basic auth failed")
            return AuthFailure(AuthErrorCode.STORE_ERROR)

        if account is None:
            return AuthFailure(AuthErrorCode.INVALID_CREDENTIALS)
        return account

    def _verify(self, email: str, password: str, timeout: Optional[float]) -> Optional[Account]:
        if not email:
            return None
        account = self._store.find_account_by_email(email, timeout=self._deadline(timeout))
        if account is None:
            logger.debug("Credential check failed: unknown email")
            return None
        if not verify_password(password, account.salt, account.password_hash):
            logger.debug("Credential check failed: password mismatch for agent %s", account.id)
            return None
        return account
