import json
import os
import re
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = Field(default="Creator CRM API", validation_alias="PROJECT_NAME")
    environment: str = Field(default="dev", validation_alias="ENVIRONMENT")
    build_version: Optional[str] = Field(default=None, validation_alias="BUILD_VERSION")
    database_url: str = Field(
        default="sqlite+pysqlite:///./dev-local.db", validation_alias="DATABASE_URL"
    )
    # API prefix used by FastAPI router include (e.g. "/api/v1").
    api_prefix: str = Field(default="", validation_alias="API_V1_STR")
    enable_docs: Optional[bool] = Field(default=None, validation_alias="ENABLE_DOCS")
    secret_key: str = Field(default="change-me", validation_alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", validation_alias="ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )
    # Kept as a raw string so CSV values do not go through JSON decoding.
    cors_origins_raw: Optional[str] = Field(default=None, validation_alias="CORS_ORIGINS")
    run_migrations_on_start: bool = Field(default=False, validation_alias="RUN_MIGRATIONS_ON_START")

    # Read-replica caps (most recent first).
    notification_history_limit: int = Field(
        default=50, ge=1, validation_alias="NOTIFICATION_HISTORY_LIMIT"
    )
    task_history_limit: int = Field(default=5, ge=1, validation_alias="TASK_HISTORY_LIMIT")

    invoice_default_due_days: int = Field(
        default=30, ge=0, validation_alias="INVOICE_DEFAULT_DUE_DAYS"
    )
    invoice_number_max_retries: int = Field(
        default=5, ge=1, validation_alias="INVOICE_NUMBER_MAX_RETRIES"
    )
    # "all": profile edits rewrite every invoice; "unsent": only drafts.
    profile_sync_scope: Literal["all", "unsent"] = Field(
        default="all", validation_alias="PROFILE_SYNC_SCOPE"
    )

    @field_validator("enable_docs", mode="before")
    @classmethod
    def parse_enable_docs(cls, value):
        if value is None or value == "":
            return None
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "y", "on"}
        return bool(value)

    @field_validator("api_prefix", mode="before")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        """
        Normalize API prefix coming from env/.env.

        On Windows Git Bash (MSYS), values like "/api/v1" may appear as a Windows path
        (e.g. "C:/Program Files/Git/api/v1"). Extract the trailing "/api/..." portion.
        """
        if v is None:
            return ""
        s = str(v).strip()
        if not s:
            return ""

        if s.startswith("/api/") or s == "/api":
            return s

        m = re.search(r"(/api/[^\s]*)$", s.replace("\\", "/"))
        if m:
            return m.group(1)

        if s.startswith("api/") or s == "api":
            return f"/{s}"

        return s

    @field_validator("database_url", mode="before")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Make SQLite relative paths stable across working directories.

        Relative sqlite URLs (sqlite+pysqlite:///./dev-local.db) are rooted at the
        backend folder. Postgres URLs are pointed at psycopg3.
        """

        if v is None:
            return v

        s = str(v).strip()
        if not s:
            return s

        if s.startswith("postgres://"):
            s = "postgresql://" + s[len("postgres://") :]
        if s.startswith("postgresql://"):
            return "postgresql+psycopg://" + s[len("postgresql://") :]
        if s.startswith("postgresql+psycopg2://"):
            return "postgresql+psycopg://" + s[len("postgresql+psycopg2://") :]

        if not s.startswith("sqlite"):
            return s

        marker = ":///"
        i = s.find(marker)
        if i == -1:
            return s

        path_part = s[i + len(marker) :]

        # In-memory or already absolute (e.g. /var/... or C:/...)
        if path_part in {"", ":memory:"}:
            return s
        if path_part.startswith("/") or re.match(r"^[A-Za-z]:/", path_part):
            return s

        if path_part.startswith("./") or path_part.startswith(".\\"):
            backend_root = Path(__file__).resolve().parents[1]
            abs_path = (backend_root / path_part[2:]).resolve().as_posix()
            return f"{s[: i + len(marker)]}{abs_path}"

        return s

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        if not v or v.lower() in {"change-me", "secret"}:
            raise ValueError("SECRET_KEY must be set to a strong value")
        return v

    @property
    def docs_enabled(self) -> bool:
        if self.enable_docs is not None:
            return self.enable_docs
        return str(self.environment or "dev").lower() in {"dev", "development", "test"}

    @property
    def cors_origins(self) -> List[str]:
        env = str(self.environment or "dev").lower()

        def _normalize_origin(o: str) -> str:
            # Browsers send the Origin header without a trailing slash.
            return str(o).strip().strip('"').strip("'").rstrip("/")

        raw = self.cors_origins_raw
        if raw is None or not raw.strip():
            if env in {"prod", "production"}:
                raise ValueError("CORS_ORIGINS must be explicitly set in production")
            return [
                "http://localhost:5173",
                "http://localhost:3000",
                "http://127.0.0.1:5173",
            ]

        s = raw.strip()
        if (s.startswith('"') and s.endswith('"')) or (s.startswith("'") and s.endswith("'")):
            s = s[1:-1].strip()

        try:
            parsed = json.loads(s)
            if isinstance(parsed, list):
                return [_normalize_origin(v) for v in parsed if str(v).strip()]
            return [_normalize_origin(str(parsed))]
        except json.JSONDecodeError:
            pass

        return [_normalize_origin(v) for v in s.split(",") if str(v).strip()]


settings = Settings()

if str(settings.environment).lower() in {"prod", "production"} and not os.getenv("DATABASE_URL"):
    raise RuntimeError("DATABASE_URL must be explicitly set in production")
