from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def build_engine(database_url: str, timeout: float) -> Engine:
    """
    Create the engine for the credential store.

    `timeout` (seconds) bounds connecting and waiting on the pool or on
    SQLite's write lock. Statement deadlines are applied per transaction
    by the store.
    """
    url = make_url(database_url)
    options = {"pool_pre_ping": True}

    if url.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False, "timeout": timeout}
        if url.database in (None, "", ":memory:"):
            # one shared connection, otherwise every checkout sees an empty database
            options["poolclass"] = StaticPool
    else:
        connect_args = {"connect_timeout": max(1, int(timeout))}
        options["pool_timeout"] = timeout

    return create_engine(url, connect_args=connect_args, **options)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
