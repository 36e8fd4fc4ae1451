# File: agentrpg/db/credential_store.py

"""
Credential store: durable persistence of agent accounts.

The store is the only shared resource between requests. Email uniqueness
is enforced by the database constraint; `create_account` just attempts the
insert and interprets the driver's constraint-violation code, so two
concurrent registrations for one email cannot both succeed.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import select, text, update
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from agentrpg.db.init_db import init_db
from agentrpg.db.session import build_engine, build_session_factory
from agentrpg.models.agent import Agent

logger = logging.getLogger(__name__)

# SQLSTATE unique_violation (PostgreSQL) and the matching SQLite extended code name
PG_UNIQUE_VIOLATION = "23505"
SQLITE_UNIQUE_VIOLATION = "SQLITE_CONSTRAINT_UNIQUE"


class StoreError(Exception):
    """Any store failure that is not one of the more specific cases below."""


class StoreUnavailable(StoreError):
    """The database could not be reached or did not answer within the deadline."""


class DuplicateEmail(StoreError):
    def __init__(self, email: str) -> None:
        super().__init__(f"email already registered: {email}")
        self.email = email


@dataclass(frozen=True)
class Account:
    id: int
    email: str
    password_hash: str
    salt: str
    name: Optional[str]
    created_at: datetime
    last_seen: datetime

    @classmethod
    def from_row(cls, row: Agent) -> "Account":
        return cls(
            id=row.id,
            email=row.email,
            password_hash=row.password_hash,
            salt=row.salt,
            name=row.name,
            created_at=row.created_at,
            last_seen=row.last_seen,
        )


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the TIMESTAMP columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_unique_violation(exc: sa_exc.IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == PG_UNIQUE_VIOLATION
    return getattr(orig, "sqlite_errorname", None) == SQLITE_UNIQUE_VIOLATION


def is_unavailable(exc: sa_exc.SQLAlchemyError) -> bool:
    if isinstance(exc, (sa_exc.DisconnectionError, sa_exc.TimeoutError)):
        return True
    if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
        return True
    if isinstance(exc, (sa_exc.OperationalError, sa_exc.InterfaceError)):
        # SQLite reports schema/SQL mistakes as OperationalError too
        return getattr(exc.orig, "sqlite_errorname", None) != "SQLITE_ERROR"
    return False


def translate_error(exc: sa_exc.SQLAlchemyError) -> StoreError:
    if is_unavailable(exc):
        return StoreUnavailable(type(exc).__name__)
    return StoreError(type(exc).__name__)


class CredentialStore:
    def __init__(self, engine: Engine, timeout: float = 5.0) -> None:
        self._engine = engine
        self._timeout = timeout
        self._session_factory = build_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str, timeout: float = 5.0) -> "CredentialStore":
        return cls(build_engine(database_url, timeout), timeout=timeout)

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _transaction(self, timeout: Optional[float] = None) -> Iterator[Session]:
        """
        One session with one transaction; commits on success, rolls back on error.

        On PostgreSQL the deadline is applied as a transaction-local
        statement_timeout so a hung query cannot block the request forever.
        """
        deadline = timeout if timeout is not None else self._timeout
        with self._session_factory() as session, session.begin():
            if self._engine.dialect.name == "postgresql":
                session.execute(
                    text("SELECT set_config('statement_timeout', :value, true)"),
                    {"value": str(int(deadline * 1000))},
                )
            yield session

    # ---------- lifecycle ----------

    def ping(self) -> None:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except sa_exc.SQLAlchemyError as exc:
            raise StoreUnavailable(type(exc).__name__) from exc

    def init_schema(self) -> None:
        try:
            init_db(self._engine)
        except sa_exc.SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    def dispose(self) -> None:
        self._engine.dispose()

    # ---------- accounts ----------

    def create_account(
        self,
        email: str,
        password_hash: str,
        salt: str,
        name: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ) -> int:
        """
        Insert a new agent row and return its id.

        Raises DuplicateEmail when the email constraint rejects the row,
        StoreUnavailable / StoreError for anything else. Nothing is left
        behind on failure.
        """
        now = utcnow()
        row = Agent(
            email=email,
            password_hash=password_hash,
            salt=salt,
            name=name,
            created_at=now,
            last_seen=now,
        )
        try:
            with self._transaction(timeout) as session:
                session.add(row)
                session.flush()
                agent_id = row.id
        except sa_exc.IntegrityError as exc:
            if is_unique_violation(exc):
                raise DuplicateEmail(email) from exc
            raise StoreError(type(exc).__name__) from exc
        except sa_exc.SQLAlchemyError as exc:
            raise translate_error(exc) from exc
        return agent_id

    def find_account_by_email(
        self, email: str, *, timeout: Optional[float] = None
    ) -> Optional[Account]:
        try:
            with self._transaction(timeout) as session:
                row = session.scalars(select(Agent).where(Agent.email == email)).first()
                return Account.from_row(row) if row is not None else None
        except sa_exc.SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    def get_account(self, agent_id: int, *, timeout: Optional[float] = None) -> Optional[Account]:
        try:
            with self._transaction(timeout) as session:
                row = session.get(Agent, agent_id)
                return Account.from_row(row) if row is not None else None
        except sa_exc.SQLAlchemyError as exc:
            raise translate_error(exc) from exc

    def touch_last_seen(
        self,
        agent_id: int,
        seen_at: Optional[datetime] = None,
        *,
        timeout: Optional[float] = None,
    ) -> bool:
        """
        Best-effort last_seen update. Failures are logged, never raised.

        Returns whether the update went through.
        """
        try:
            with self._transaction(timeout) as session:
                session.execute(
                    update(Agent)
                    .where(Agent.id == agent_id)
                    .values(last_seen=seen_at or utcnow())
                )
        except sa_exc.SQLAlchemyError:
            logger.warning("Could not update last_seen for agent %s", agent_id, exc_info=True)
            return False
        return True
