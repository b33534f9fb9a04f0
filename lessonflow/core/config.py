# Fichier: lessonflow/core/config.py
from pydantic_settings import BaseSettings
from typing import Optional, List
from pydantic import AnyHttpUrl, ValidationError, field_validator
import sys

class Settings(BaseSettings):
    DATABASE_URL: str
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:8000",
        "http://127.0.0.1:5173",
    ]
    FRONTEND_BASE_URL: Optional[AnyHttpUrl] = None

    ENVIRONMENT: str = "development"

    # La clé secrète pour signer les JWTs.
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Performance instrumentation
    SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS: int = 300

    # --- Lesson flow ---
    LESSON_DEFAULT_XP: int = 50
    LESSON_DEFAULT_MINUTES: int = 10
    COMING_NEXT_LIMIT: int = 3

    # --- Learner dashboard ---
    WEEKLY_ACTIVITY_RETENTION_DAYS: int = 14
    RECENT_COMPLETED_LESSONS_LIMIT: int = 8

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        """Ensure Postgres URLs always use the asyncpg driver.

        Managed Postgres providers still expose database URLs using the legacy
        ``postgres://`` scheme, which SQLAlchemy no longer understands. Those
        URLs, as well as ``postgresql://`` and psycopg variants, are upgraded to
        ``postgresql+asyncpg://`` while SQLite and other backends stay untouched.
        """

        if not isinstance(value, str):
            return value

        if "+asyncpg" in value:
            return value

        replacements = {
            "postgres://": "postgresql+asyncpg://",
            "postgresql://": "postgresql+asyncpg://",
            "postgresql+psycopg2://": "postgresql+asyncpg://",
            "postgresql+psycopg://": "postgresql+asyncpg://",
        }

        for prefix, target in replacements.items():
            if value.startswith(prefix):
                return target + value[len(prefix) :]

        return value

    @field_validator("WEEKLY_ACTIVITY_RETENTION_DAYS")
    @classmethod
    def _retention_covers_a_week(cls, value: int) -> int:
        # The dashboard always renders the last seven days.
        if value < 7:
            raise ValueError("WEEKLY_ACTIVITY_RETENTION_DAYS must be at least 7")
        return value


def _log_settings_validation_error(exc: ValidationError) -> None:
    """Pretty-print missing or invalid environment variables.

    The exception bubbles up during module import, which makes it hard to spot
    which variable is responsible. The structured error payload is printed so
    it shows up in server logs before the exception is re-raised.
    """

    header = "Configuration error while loading environment variables:"
    print(header, file=sys.stderr)

    details = exc.errors()
    if details:
        for error in details:
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = error.get("msg", "Unknown validation error")
            type_name = error.get("type")
            hint_parts = [message]
            if type_name:
                hint_parts.append(f"(type={type_name})")
            hint = " ".join(hint_parts)
            print(f"  - {location}: {hint}", file=sys.stderr)
    else:
        print(exc, file=sys.stderr)


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover - exercised at runtime
    _log_settings_validation_error(exc)
    raise
