from __future__ import annotations

import os
from enum import Enum
from typing import Any

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, field_validator

from aurora_store.logging import get_logger

logger = get_logger(__name__)


class ExecutorKind(str, Enum):
    """How statements reach the database."""

    DATA_API = "data_api"
    POSTGRES = "postgres"


def env_field(default: Any, env: str, **kwargs):
    extra = kwargs.pop("json_schema_extra", {}) or {}
    extra = {**extra, "env": env}
    return Field(default, json_schema_extra=extra, **kwargs)


class Settings(BaseModel):
    """Connection settings for the statement executor."""

    resource_arn: str | None = env_field(
        None, "AURORA_RESOURCE_ARN", description="ARN of the Aurora cluster"
    )
    secret_arn: str | None = env_field(
        None, "AURORA_SECRET_ARN", description="ARN of the Secrets Manager credentials"
    )
    database: str = env_field("postgres", "AURORA_DATABASE")
    region: str | None = env_field(None, "AWS_REGION")
    endpoint_url: str | None = env_field(
        None,
        "RDS_DATA_ENDPOINT_URL",
        description="Override for the rds-data endpoint (e.g. a local Data API emulator)",
    )
    executor: ExecutorKind = env_field(ExecutorKind.DATA_API, "STORE_EXECUTOR")
    database_url: str = env_field(
        "postgresql://localhost:5432/postgres",
        "DATABASE_URL",
        description="DSN used when STORE_EXECUTOR=postgres",
    )
    key_length: int = env_field(64, "STORE_KEY_LENGTH", ge=1)

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_env(cls) -> "Settings":
        env_file_values = dotenv_values(".env")
        merged: dict[str, str] = {}
        for name, field in cls.model_fields.items():
            extra = field.json_schema_extra or {}
            env_key = extra.get("env") if isinstance(extra, dict) else None
            env_name = env_key or name.upper()
            if env_name in os.environ:
                merged[name] = os.environ[env_name]
            elif env_name in env_file_values:
                merged[name] = env_file_values[env_name]
        return cls(**merged)

    @field_validator("executor")
    @classmethod
    def _validate_executor(cls, value: ExecutorKind) -> ExecutorKind:
        return ExecutorKind(value)

    def require_data_api(self) -> None:
        """Fail early when Data API credentials are missing."""
        missing = [
            env
            for name, env in (
                ("resource_arn", "AURORA_RESOURCE_ARN"),
                ("secret_arn", "AURORA_SECRET_ARN"),
            )
            if not getattr(self, name)
        ]
        if missing:
            logger.error("data_api_settings_missing", missing=missing)
            raise RuntimeError(
                "Data API executor requires {} to be set".format(", ".join(missing))
            )


def get_settings() -> Settings:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = Settings.from_env()
    return _settings_cache


_settings_cache: Settings | None = None


def reset_settings_cache() -> None:
    """Clear cached settings so future calls re-read the environment."""

    global _settings_cache
    _settings_cache = None
