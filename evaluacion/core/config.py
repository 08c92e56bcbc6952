# evaluacion/core/config.py
from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = ROOT_DIR / ".env"

SUPABASE_HOSTS = ("supabase.co", "supabase.com")
_CREDENTIALS = re.compile(r"://([^:/@]+):([^@]+)@")


def normalize_db_url(url: Optional[str]) -> str:
    """Limpia la URL y agrega sslmode=require para Supabase si falta."""
    url = (url or "").strip()
    if not url:
        raise ValueError("Define DATABASE_URL o SQLALCHEMY_DATABASE_URI en variables de entorno.")
    if any(host in url for host in SUPABASE_HOSTS) and "sslmode=" not in url:
        url += ("&" if "?" in url else "?") + "sslmode=require"
    return url


def mask_url(url: str) -> str:
    """URL sin contraseña, apta para logs."""
    return _CREDENTIALS.sub(r"://\1:***@", url)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_NAME: str = "Evaluacion Docente API"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = Field(60, gt=0)

    # separados por coma; vacío = "*"
    CORS_ORIGINS: str = ""

    DATABASE_URL: Optional[str] = None
    SQLALCHEMY_DATABASE_URI: Optional[str] = None
    DB_POOL_SIZE: int = Field(5, ge=1)
    DB_MAX_OVERFLOW: int = Field(10, ge=0)

    RECENT_EVALUATIONS_LIMIT: int = Field(5, ge=1)

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper() or "INFO"

    @property
    def cors_list(self) -> list[str]:
        origins = [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
        return origins or ["*"]

    @property
    def db_url(self) -> str:
        return normalize_db_url(self.DATABASE_URL or self.SQLALCHEMY_DATABASE_URI)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
