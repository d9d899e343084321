"""Application configuration loading utilities."""

from __future__ import annotations

import os
import pathlib
from functools import lru_cache
from typing import List

import yaml
from pydantic import BaseModel, Field

BASE_DIR = pathlib.Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_PATH = BASE_DIR.parent / "config" / "providers.yaml"
DEFAULT_DATABASE_PATH = BASE_DIR.parent / "data" / "chatbridge.db"


class ModelInfo(BaseModel):
    id: str
    name: str
    max_tokens: int | None = None


class ProviderModel(BaseModel):
    id: str
    name: str
    kind: str
    base_url: str
    chat_path: str
    timeout: float = Field(default=60.0)
    max_tokens: int | None = None
    temperature: float | None = None
    models: List[ModelInfo] = Field(default_factory=list)


class AppConfig(BaseModel):
    providers: List[ProviderModel]


class Settings(BaseModel):
    encryption_key: str | None = None
    jwt_secret: str | None = None
    jwt_expires_minutes: int = 60 * 24 * 7
    database_url: str = f"sqlite:///{DEFAULT_DATABASE_PATH}"
    allowed_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])


@lru_cache(maxsize=1)
def load_config(path: pathlib.Path | None = None) -> AppConfig:
    """Load provider configuration from YAML."""
    config_path = path or pathlib.Path(os.getenv("PROVIDERS_CONFIG", str(DEFAULT_CONFIG_PATH)))
    raw = yaml.safe_load(config_path.read_text())
    return AppConfig(**raw)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Read process settings from the environment."""
    origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173")
    return Settings(
        encryption_key=os.getenv("ENCRYPTION_KEY") or None,
        jwt_secret=os.getenv("JWT_SECRET") or None,
        jwt_expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", str(60 * 24 * 7))),
        database_url=os.getenv("DATABASE_URL", f"sqlite:///{DEFAULT_DATABASE_PATH}"),
        allowed_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
    )
