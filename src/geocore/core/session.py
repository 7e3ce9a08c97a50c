"""Session state shared by every request made through one client."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Optional

from .config import load_env_config


class SessionState(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    AUTHENTICATED = "authenticated"


class Session:
    """
    Holds the base URL, project id, and the logged-in user's id and token.

    ``setup`` may be called any number of times; the last call wins.
    A login holds ``login_lock`` from its /auth request until the token is
    stored, so concurrent logins run one at a time and the last one to
    acquire the lock wins.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        project_id: Optional[str] = None,
    ):
        self._base_url = base_url.rstrip("/") if base_url else None
        self._project_id = project_id
        self._user_id: Optional[str] = None
        self._token: Optional[str] = None
        self._login_lock = asyncio.Lock()

    @classmethod
    def from_env(cls, *, use_dotenv: bool = True) -> "Session":
        settings = load_env_config(use_dotenv=use_dotenv)
        return cls(base_url=settings.base_url, project_id=settings.project_id)

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url

    @property
    def project_id(self) -> Optional[str]:
        return self._project_id

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def state(self) -> SessionState:
        if self._token is not None:
            return SessionState.AUTHENTICATED
        if self._base_url is not None:
            return SessionState.CONFIGURED
        return SessionState.UNCONFIGURED

    def setup(self, base_url: str, project_id: str) -> "Session":
        self._base_url = base_url.rstrip("/")
        self._project_id = project_id
        return self

    def url_for(self, path: str) -> Optional[str]:
        """Absolute URL for a service path, or None while unconfigured."""
        if self._base_url is None:
            return None
        return self._base_url + path

    @property
    def login_lock(self) -> asyncio.Lock:
        return self._login_lock

    def authenticate(self, user_id: str, token: str) -> None:
        self._user_id = user_id
        self._token = token

    def clear_credentials(self) -> None:
        self._user_id = None
        self._token = None


__all__ = ["Session", "SessionState"]
