# File: agentrpg/models/base.py

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Agent and Lobby inherit from this; Base.metadata drives schema creation.
    """
    pass
