# civitasfix/config.py
from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings


load_dotenv()


class Settings(BaseSettings):
    DB_URL: str = Field(default=os.getenv("DB_URL", "sqlite:///./civitasfix.db"))
    JWT_SECRET: str = Field(default=os.getenv("JWT_SECRET", "change_me"))
    JWT_ALG: str = Field(default=os.getenv("JWT_ALG", "HS256"))
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))
    )

    ENVIRONMENT: str = Field(default=os.getenv("ENVIRONMENT", "development"))
    LOG_LEVEL: str = Field(default=os.getenv("LOG_LEVEL", "INFO"))
    LOG_FILE: str = Field(default=os.getenv("LOG_FILE", ""))

    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )

    # Report images
    UPLOAD_DIR: str = Field(default=os.getenv("UPLOAD_DIR", "data/uploads"))
    MAX_UPLOAD_BYTES: int = Field(default=int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024))))

    # Outbound email (queued on redis, sent by the rq worker)
    REDIS_URL: str = Field(default=os.getenv("REDIS_URL", "redis://localhost:6379/0"))
    EMAIL_NOTIFICATIONS_ENABLED: bool = Field(default=False)
    SMTP_HOST: str = Field(default=os.getenv("SMTP_HOST", "localhost"))
    SMTP_PORT: int = Field(default=int(os.getenv("SMTP_PORT", "587")))
    SMTP_USER: str = Field(default=os.getenv("SMTP_USER", ""))
    SMTP_PASSWORD: str = Field(default=os.getenv("SMTP_PASSWORD", ""))
    EMAIL_FROM: str = Field(default=os.getenv("EMAIL_FROM", "no-reply@civitasfix.local"))

    class Config:
        case_sensitive = False


settings = Settings()


def validate_runtime_config() -> None:
    if settings.ENVIRONMENT.lower() == "production" and settings.JWT_SECRET == "change_me":
        raise RuntimeError("JWT_SECRET must be set in production.")
