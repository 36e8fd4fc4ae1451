# File: agentrpg/schemas/agent.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Credentials(BaseModel):
    # Missing or null fields are accepted here and reported as empty by the service
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(Credentials):
    name: Optional[str] = None


class LoginRequest(Credentials):
    pass


class AgentRead(BaseModel):
    agent_id: int
    email: str
    name: Optional[str] = None
    created_at: datetime
    last_seen: datetime
