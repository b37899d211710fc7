import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Default to a local SQLite DB for dev so the backend can start out-of-the-box.
# Use an absolute path so it works regardless of current working directory.
_default_sqlite_path = (Path(__file__).resolve().parent.parent / "dev.db").as_posix()
DEFAULT_DATABASE_URL = f"sqlite:///{_default_sqlite_path}"

# NOTE: keep a default for local dev so the server can boot even if SECRET_KEY isn't set.
DEFAULT_SECRET_KEY = "dev_secret_change_me"

TOKEN_TTL_DAYS = 7


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    secret_key: str = DEFAULT_SECRET_KEY
    token_ttl_days: int = TOKEN_TTL_DAYS
    frontend_origins: tuple[str, ...] = field(default_factory=tuple)
    log_level: str = "INFO"


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


def load_settings() -> Settings:
    """Build settings from the environment (and backend/.env when present).

    Set DISABLE_DOTENV=1 to skip loading .env, e.g. for automated tests that
    point DATABASE_URL at a throwaway SQLite file.
    """
    if os.getenv("DISABLE_DOTENV") != "1":
        load_dotenv(override=True)

    return Settings(
        database_url=(os.getenv("DATABASE_URL") or "").strip() or DEFAULT_DATABASE_URL,
        secret_key=os.getenv("SECRET_KEY") or DEFAULT_SECRET_KEY,
        token_ttl_days=int(os.getenv("TOKEN_TTL_DAYS", str(TOKEN_TTL_DAYS)) or TOKEN_TTL_DAYS),
        frontend_origins=_split_origins(os.getenv("FRONTEND_ORIGINS", "")),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
    )
