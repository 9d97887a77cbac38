"""Process-wide configuration for coallytasks.

Settings are read once from the environment (``.env`` is loaded through
python-dotenv) and handed to the app factory. Nothing else in the package
reads the environment.
"""

import os
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from coallytasks.errors import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./coallytasks.db"


class Settings(BaseModel):
    """Immutable startup configuration."""

    database_url: str = Field(DEFAULT_DATABASE_URL, description="SQLAlchemy database URL")
    jwt_secret: str = Field(..., min_length=1, description="HMAC secret used to sign access tokens")
    jwt_algorithm: str = Field("HS256", description="JWT signing algorithm")
    bcrypt_rounds: int = Field(10, ge=4, le=31, description="bcrypt cost factor")
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_timeout_sec: int = 30
    run_migrations: bool = False
    alembic_ini: str = Field("alembic.ini", description="Path to the Alembic config used when RUN_MIGRATIONS is set")
    app_name: str = "Coally Test v1"

    class Config:
        """Pydantic configuration."""
        frozen = True


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ`` after
            loading ``.env``.

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If ``JWT_SECRET`` is missing or a value is invalid
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    secret = environ.get("JWT_SECRET", "")
    if not secret:
        raise ConfigurationError("JWT_SECRET must be set")

    database_url = environ.get("DATABASE_URL") or environ.get("DBO") or DEFAULT_DATABASE_URL
    origins = [o.strip() for o in environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]

    try:
        return Settings(
            database_url=database_url,
            jwt_secret=secret,
            jwt_algorithm=environ.get("JWT_ALGORITHM", "HS256"),
            bcrypt_rounds=int(environ.get("BCRYPT_ROUNDS", "10")),
            host=environ.get("HOST", "0.0.0.0"),
            port=int(environ.get("PORT", "3000")),
            debug=_as_bool(environ.get("DEBUG")),
            cors_origins=origins or ["*"],
            db_pool_size=int(environ.get("DB_POOL_SIZE", "5")),
            db_max_overflow=int(environ.get("DB_MAX_OVERFLOW", "5")),
            db_pool_timeout_sec=int(environ.get("DB_POOL_TIMEOUT_SEC", "30")),
            run_migrations=_as_bool(environ.get("RUN_MIGRATIONS")),
            alembic_ini=environ.get("ALEMBIC_INI", "alembic.ini"),
        )
    except ValueError as e:
        # pydantic's ValidationError is a ValueError subclass
        raise ConfigurationError(f"Invalid configuration: {e}") from e
