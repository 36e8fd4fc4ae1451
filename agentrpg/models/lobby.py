# File: agentrpg/models/lobby.py

"""
Lobby placeholder.

Only the table exists so the foreign key to agents is in place for the
gameplay services; nothing in this package reads or writes lobbies.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from agentrpg.models.base import Base


class Lobby(Base):
    __tablename__ = "lobbies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    dm_id: Mapped[int | None] = mapped_column(ForeignKey("agents.id"), nullable=True)
    max_players: Mapped[int] = mapped_column(Integer, default=4, server_default="4")
    status: Mapped[str] = mapped_column(
        String(50), default="recruiting", server_default="recruiting"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.now(),
        nullable=False,
    )
