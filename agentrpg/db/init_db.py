"""
Database initialization helpers.

Models are imported here so their tables get registered on Base.metadata.
"""

from sqlalchemy.engine import Engine

from agentrpg.models.base import Base
from agentrpg.models import agent, lobby  # noqa: F401


def init_db(engine: Engine) -> None:
    """
    Create the agents and lobbies tables if they do not exist yet.

    Existing tables are left untouched, so this is safe on every startup.
    """
    Base.metadata.create_all(bind=engine, checkfirst=True)
