# src/pollwatch/config.py

"""Settings loaded from environment variables (+ optional .env).

- One Settings object for the CLI and any embedding app that wants defaults.
- Malformed values fall back to defaults instead of failing at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .core.models import DEFAULT_DELAY_SECONDS, DEFAULT_TIMEOUT_SECONDS

ENV_PREFIX = "POLLWATCH"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_int_list(name: str, default: list[int]) -> list[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    out: list[int] = []
    for part in raw.replace(",", " ").split():
        try:
            out.append(int(part))
        except ValueError:
            continue
    return out or list(default)


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- logging ----
    log_level: str
    log_dir: Path | None

    # ---- polling defaults (seconds) ----
    delay_seconds: float
    timeout_seconds: float

    # ---- HTTP status check ----
    http_timeout_seconds: float
    expect_status: list[int]

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            log_level=_env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO",
            log_dir=_env_path(_k("LOG_DIR")),
            delay_seconds=_env_float(_k("DELAY_SECONDS"), DEFAULT_DELAY_SECONDS),
            timeout_seconds=_env_float(_k("TIMEOUT_SECONDS"), DEFAULT_TIMEOUT_SECONDS),
            http_timeout_seconds=_env_float(_k("HTTP_TIMEOUT_SECONDS"), 5.0),
            expect_status=_env_int_list(_k("EXPECT_STATUS"), [200]),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
