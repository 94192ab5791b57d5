"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_ALLOWED_APP_MODES = {"cloud"}

DEFAULT_DOCUMENT_TYPES: tuple[str, ...] = (
    "Fire Safety Certificate",
    "Building Insurance",
    "Electrical Safety Certificate",
    "Gas Safety Certificate",
    "EPC Certificate",
    "HMO License",
    "Planning Permission",
)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _require_app_mode() -> str:
    """
    Read and validate APP_MODE from the environment.

    APP_MODE must be explicitly set to 'cloud'. Any other value, or the
    absence of the variable, raises RuntimeError.
    """

    _load_env_once()
    raw = os.getenv("APP_MODE")
    if raw is None:
        raise RuntimeError("APP_MODE must be explicitly set to 'cloud'.")
    mode = raw.strip().lower()
    if mode not in _ALLOWED_APP_MODES:
        raise RuntimeError(
            f"APP_MODE '{raw.strip()}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_APP_MODES)}."
        )
    return mode


@dataclass(frozen=True)
class AppSettings:
    """
    Top-level application mode settings.
    """

    mode: str


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """
    Return cached application settings.

    Raises RuntimeError if APP_MODE is missing or not set to 'cloud'.
    """

    return AppSettings(mode=_require_app_mode())


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list; blank entries are dropped, order and
    first occurrence are kept.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return default
    items: list[str] = []
    for token in raw_value.split(","):
        token = token.strip()
        if token and token not in items:
            items.append(token)
    return tuple(items) or default


@dataclass(frozen=True)
class ComplianceSettings:
    """
    Runtime settings for reports, document calendars and scheduling.
    """

    bulk_max_selections: int = 240
    expiring_days_ahead: int = 90
    default_document_types: tuple[str, ...] = DEFAULT_DOCUMENT_TYPES
    min_year: int = 2000
    max_year: int = 2100


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Background job settings. Times are UTC.
    """

    enabled: bool = True
    document_refresh_hour: int = 1
    document_refresh_minute: int = 0


@lru_cache(maxsize=1)
def get_compliance_settings() -> ComplianceSettings:
    """
    Return cached compliance settings from environment variables.
    """

    min_year = _get_int_env("COMPLIANCE_MIN_YEAR", 2000)
    max_year = max(min_year, _get_int_env("COMPLIANCE_MAX_YEAR", 2100))
    return ComplianceSettings(
        bulk_max_selections=max(1, _get_int_env("COMPLIANCE_BULK_MAX_SELECTIONS", 240)),
        expiring_days_ahead=max(0, _get_int_env("COMPLIANCE_EXPIRING_DAYS_AHEAD", 90)),
        default_document_types=_get_list_env(
            "COMPLIANCE_DEFAULT_DOCUMENT_TYPES", DEFAULT_DOCUMENT_TYPES
        ),
        min_year=min_year,
        max_year=max_year,
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    """
    Return background scheduler settings from environment variables.
    """

    return SchedulerSettings(
        enabled=_get_bool_env("SCHEDULER_ENABLED", True),
        document_refresh_hour=min(23, max(0, _get_int_env("DOCUMENT_STATUS_REFRESH_HOUR", 1))),
        document_refresh_minute=min(59, max(0, _get_int_env("DOCUMENT_STATUS_REFRESH_MINUTE", 0))),
    )
