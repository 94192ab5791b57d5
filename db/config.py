"""
Environment-driven database configuration for the compliance service.

Only PostgreSQL is supported in deployment: bulk scheduling relies on
``SELECT ... FOR UPDATE`` row locks and reports on REPEATABLE READ.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_PSYCOPG_SCHEME = "postgresql+psycopg://"


def load_env_files() -> None:
    """
    Load KEY=VALUE pairs from `.env` and `.env.local` at the project root.
    Variables already present in the process environment win.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_postgres_url(url: str) -> str:
    """
    Rewrite ``postgres://`` and ``postgresql://`` URLs to the psycopg (v3)
    driver form. Any other URL is returned unchanged.
    """

    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return _PSYCOPG_SCHEME + url[len(prefix):]
    return url


def resolve_database_url() -> str:
    """
    ``DATABASE_URL``, falling back to ``CLOUD_DATABASE_URL``.

    Raises RuntimeError when neither is set or the URL is not PostgreSQL.
    """

    load_env_files()
    for name in ("DATABASE_URL", "CLOUD_DATABASE_URL"):
        raw = (os.getenv(name) or "").strip()
        if not raw:
            continue
        url = normalize_postgres_url(raw)
        if not url.startswith("postgresql"):
            raise RuntimeError(f"{name} must be a PostgreSQL URL.")
        return url

    raise RuntimeError("No database URL configured. Set DATABASE_URL or CLOUD_DATABASE_URL.")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle: int = 1800


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
    """
    Return cached engine settings. ``DB_POOL_SIZE``, ``DB_MAX_OVERFLOW``,
    ``DB_POOL_RECYCLE`` and ``SQL_ECHO`` tune the pool.
    """

    url = resolve_database_url()
    return DatabaseSettings(
        url=url,
        echo=os.getenv("SQL_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
        pool_size=max(1, _env_int("DB_POOL_SIZE", 5)),
        max_overflow=max(0, _env_int("DB_MAX_OVERFLOW", 10)),
        pool_recycle=_env_int("DB_POOL_RECYCLE", 1800),
    )
