# File: agentrpg/core/config.py

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Settings(BaseModel):
    model_config = ConfigDict(validate_default=True)

    # Basic app info
    PROJECT_NAME: str = "Agent RPG API"
    VERSION: str = "0.8.0"

    api_prefix: str = "/api"
    docs_url: str = "/docs"

    # CORS
    backend_cors_origins: List[str] = os.getenv("BACKEND_CORS_ORIGINS", "")

    # Database. Unset means the API runs without persistence.
    database_url: Optional[str] = os.getenv("DATABASE_URL") or None

    # Upper bound for a single store round trip (connect, checkout, statement)
    store_timeout_seconds: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "5"))

    # Credential material
    salt_bytes: int = 32

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @field_validator("backend_cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return v
        return []

    @field_validator("database_url", mode="before")
    @classmethod
    def normalize_database_url(cls, v):
        if not v:
            return None
        # Hosting providers hand out postgres:// URLs; SQLAlchemy wants the driver spelled out
        if v.startswith("postgres://"):
            return "postgresql+psycopg://" + v[len("postgres://"):]
        if v.startswith("postgresql://"):
            return "postgresql+psycopg://" + v[len("postgresql://"):]
        return v

    @field_validator("store_timeout_seconds")
    @classmethod
    def check_timeout(cls, v):
        if v <= 0:
            raise ValueError("store_timeout_seconds must be positive")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
