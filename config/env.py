"""Environment variable loading helpers.

Local configuration can live in dotenv-style files at the project root.

Load order (existing process env vars are never overridden):
- .env
- .env.dev (only when STATUS_TRACKER_ENV or DJANGO_ENV is dev/local)

Production deployments should set real environment variables instead.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

_DEV_ENV_NAMES = {"dev", "development", "local"}


def _should_load_dev_env() -> bool:
    env_name = os.environ.get("STATUS_TRACKER_ENV") or os.environ.get("DJANGO_ENV", "")
    return env_name.lower() in _DEV_ENV_NAMES


def load_env(base_dir: Path | None = None) -> None:
    """Load .env files into the process environment.

    Safe to call multiple times; values already present in ``os.environ`` win.

    Args:
        base_dir: Project root directory. Defaults to the parent of ``config/``.
    """
    if base_dir is None:
        base_dir = Path(__file__).resolve().parent.parent

    load_dotenv(base_dir / ".env", override=False)

    if _should_load_dev_env():
        load_dotenv(base_dir / ".env.dev", override=False)


def env_bool(name: str, default: bool = False) -> bool:
    """Read a boolean flag from the environment ("1", "true", "yes", "on")."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    """Read an integer from the environment, falling back to ``default`` on bad input."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_list(name: str, default: str = "") -> list[str]:
    """Read a comma-separated list from the environment, dropping blanks."""
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]
