"""Application configuration."""

import re
from functools import lru_cache

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cqd.exceptions import ConfigurationError

_TABLE_ID_RE = re.compile(r"^[\w.:-]+$")


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """API server settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    bigquery_table_id: str
    project_id: str | None = None
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080
    static_dir: str | None = None
    cors_origins: str = "*"
    code_hosts: str = "github.com,www.github.com,raw.githubusercontent.com"
    code_fetch_timeout: float = 10.0

    @field_validator("bigquery_table_id", mode="after")
    @classmethod
    def validate_table_id(cls, v: str) -> str:
        """Reject empty ids, the sample placeholder, and anything that is not a plain table path."""
        v = v.strip()
        if not v or "your-project" in v:
            raise ValueError("BIGQUERY_TABLE_ID has not been set to the evaluation table")
        if not _TABLE_ID_RE.match(v):
            raise ValueError(f"BIGQUERY_TABLE_ID is not a valid table path: {v!r}")
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def allowed_origins(self) -> list[str]:
        return _split_csv(self.cors_origins) or ["*"]

    @property
    def allowed_code_hosts(self) -> set[str]:
        return {host.lower() for host in _split_csv(self.code_hosts)}

    @property
    def warehouse_project(self) -> str:
        """Billing project for queries; defaults to the table's own project."""
        return self.project_id or self.bigquery_table_id.split(".")[0]


class DashboardSettings(BaseSettings):
    """Settings for the Streamlit dashboard client."""

    model_config = SettingsConfigDict(
        env_prefix="DASHBOARD_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_url: str = "http://localhost:8080"
    public_url: str = "http://localhost:8501"
    timeout: float = 15.0


def load_settings(**overrides) -> Settings:
    """Load server settings, failing with ConfigurationError when they are unusable."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid server configuration: {exc}") from exc


@lru_cache
def get_settings() -> Settings:
    return load_settings()
