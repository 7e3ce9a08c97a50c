from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class GeocoreSettings:
    base_url: Optional[str] = None
    project_id: Optional[str] = None
    default_user_id: Optional[str] = None
    default_user_password: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


def _env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def _timeout_from_env() -> float:
    raw = _env("GEOCORE_TIMEOUT_SECONDS")
    if raw is None:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"GEOCORE_TIMEOUT_SECONDS must be a number, got {raw!r}") from exc


def load_env_config(*, use_dotenv: bool = True) -> GeocoreSettings:
    """Load Geocore settings from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    return GeocoreSettings(
        base_url=_env("GEOCORE_BASE_URL"),
        project_id=_env("GEOCORE_PROJECT_ID"),
        default_user_id=_env("GEOCORE_DEFAULT_USER_ID"),
        default_user_password=_env("GEOCORE_DEFAULT_USER_PASSWORD"),
        timeout_seconds=_timeout_from_env(),
    )


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "GeocoreSettings", "load_env_config"]
