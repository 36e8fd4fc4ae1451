# File: tests/test_credential_store.py

from datetime import timedelta

import pytest
from sqlalchemy import exc as sa_exc
from sqlalchemy import inspect

from agentrpg.db.credential_store import (
    CredentialStore,
    DuplicateEmail,
    StoreError,
    StoreUnavailable,
    is_unique_violation,
    utcnow,
)
from agentrpg.models.base import Base


class FakeDriverError(Exception):
    def __init__(self, **attrs):
        super().__init__("driver error")
        for key, value in attrs.items():
            setattr(self, key, value)


def _integrity_error(orig) -> sa_exc.IntegrityError:
    return sa_exc.IntegrityError("INSERT INTO agents ...", {}, orig)


def test_schema_has_agents_and_lobbies(store):
    tables = set(inspect(store.engine).get_table_names())
    assert {"agents", "lobbies"} <= tables

    fks = inspect(store.engine).get_foreign_keys("lobbies")
    assert fks[0]["referred_table"] == "agents"


def test_init_schema_is_idempotent(store):
    agent_id = store.create_account("a@x.com", "hash", "salt", "A")
    store.init_schema()
    assert store.get_account(agent_id).email == "a@x.com"


def test_create_and_find_account(store):
    agent_id = store.create_account("a@x.com", "hash", "salt", "A")
    account = store.find_account_by_email("a@x.com")

    assert account.id == agent_id
    assert account.password_hash == "hash"
    assert account.salt == "salt"
    assert account.name == "A"
    assert account.created_at == account.last_seen


def test_ids_are_assigned_by_the_store(store):
    first = store.create_account("a@x.com", "h", "s")
    second = store.create_account("b@x.com", "h", "s")
    assert first == 1
    assert second == 2


def test_email_lookup_is_exact(store):
    store.create_account("a@x.com", "hash", "salt")
    assert store.find_account_by_email("A@x.com") is None
    assert store.find_account_by_email("nobody@x.com") is None


def test_duplicate_email_raises_and_keeps_first_row(store):
    store.create_account("a@x.com", "hash1", "salt1", "First")
    before = store.find_account_by_email("a@x.com")

    with pytest.raises(DuplicateEmail):
        store.create_account("a@x.com", "hash2", "salt2", "Second")

    assert store.find_account_by_email("a@x.com") == before


def test_name_is_optional(store):
    agent_id = store.create_account("a@x.com", "hash", "salt")
    assert store.get_account(agent_id).name is None


def test_get_account_missing(store):
    assert store.get_account(999) is None


def test_touch_last_seen(store):
    agent_id = store.create_account("a@x.com", "hash", "salt")
    later = utcnow() + timedelta(minutes=5)

    assert store.touch_last_seen(agent_id, later) is True
    account = store.get_account(agent_id)
    assert account.last_seen == later
    assert account.created_at < later


def test_touch_last_seen_swallows_store_failures(store):
    agent_id = store.create_account("a@x.com", "hash", "salt")
    Base.metadata.drop_all(store.engine)

    assert store.touch_last_seen(agent_id) is False


def test_query_errors_are_store_errors_not_unavailable(store):
    Base.metadata.drop_all(store.engine)

    with pytest.raises(StoreError) as excinfo:
        store.create_account("a@x.com", "hash", "salt")
    assert not isinstance(excinfo.value, StoreUnavailable)


def test_unreachable_database_is_unavailable(tmp_path):
    store = CredentialStore.from_url(f"sqlite:///{tmp_path / 'missing' / 'agents.db'}", timeout=1.0)

    with pytest.raises(StoreUnavailable):
        store.ping()
    with pytest.raises(StoreUnavailable):
        store.find_account_by_email("a@x.com")


def test_unique_violation_detection_uses_driver_codes():
    assert is_unique_violation(_integrity_error(FakeDriverError(sqlstate="23505")))
    assert is_unique_violation(_integrity_error(FakeDriverError(pgcode="23505")))
    assert is_unique_violation(_integrity_error(FakeDriverError(sqlite_errorname="SQLITE_CONSTRAINT_UNIQUE")))

    # not-null and foreign-key violations are not duplicates
    assert not is_unique_violation(_integrity_error(FakeDriverError(sqlstate="23502")))
    assert not is_unique_violation(_integrity_error(FakeDriverError(sqlite_errorname="SQLITE_CONSTRAINT_NOTNULL")))
    # message text alone is never trusted
    assert not is_unique_violation(_integrity_error(Exception("duplicate key value violates unique constraint")))
