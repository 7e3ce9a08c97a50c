from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from .core.config import DEFAULT_TIMEOUT_SECONDS, load_env_config
from .core.dispatcher import Callback, Dispatcher
from .core.errors import InvalidParameterError, InvalidStateError, ServerError
from .core.nodes import get_str
from .core.observability import log_event
from .core.result import Result
from .core.session import Session
from .core.transport import Transport
from .models import GenericResult, User
from .transports.http import HttpxTransport

AUTH_PATH = "/auth"
REGISTER_PATH = "/register"

# Server error code returned by /auth for an unknown user id.
USER_NOT_REGISTERED = "Auth.0001"


class GeocoreClient(Dispatcher):
    """
    Geocore client: the generic dispatcher plus session login flows.
    - Owns an HttpxTransport unless a transport is injected
    - Login stores the returned token on the session; later requests send it
    """

    def __init__(
        self,
        *,
        session: Optional[Session] = None,
        transport: Optional[Transport] = None,
        default_user: Optional[User] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        self._owns_transport = transport is None
        super().__init__(
            session if session is not None else Session(),
            transport or HttpxTransport(timeout_seconds=timeout_seconds),
            logger=logger or logging.getLogger("geocore.client"),
        )
        self.default_user = default_user

    @classmethod
    def from_env(cls, **kwargs: Any) -> "GeocoreClient":
        settings = load_env_config()
        default_user = None
        if settings.default_user_id and settings.default_user_password:
            default_user = User(
                id=settings.default_user_id, password=settings.default_user_password
            )
        kwargs.setdefault(
            "session",
            Session(base_url=settings.base_url, project_id=settings.project_id),
        )
        kwargs.setdefault("default_user", default_user)
        kwargs.setdefault("timeout_seconds", settings.timeout_seconds)
        return cls(**kwargs)

    def setup(self, base_url: str, project_id: str) -> "GeocoreClient":
        self.session.setup(base_url, project_id)
        return self

    async def aclose(self) -> None:
        if self._owns_transport and isinstance(self.transport, HttpxTransport):
            await self.transport.aclose()

    async def __aenter__(self) -> "GeocoreClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- Async primitives --------------------------------------------------- #

    async def request_login(self, user_id: str, password: str) -> Result[str]:
        project_id = self.session.project_id
        if project_id is None:
            return Result.failure(
                InvalidStateError("Project id is not configured; call setup() first.")
            )

        async with self.session.login_lock:
            result = await self.request(
                "POST",
                AUTH_PATH,
                GenericResult,
                params={"id": user_id, "password": password, "project_id": project_id},
            )
            if result.is_failure:
                return Result.failure(result.error)

            token = get_str(result.value.json, "token")
            if token is None:
                self.session.clear_credentials()
                return Result.failure(
                    InvalidStateError("Login succeeded but no token was returned.")
                )

            self.session.authenticate(user_id, token)
        log_event("login", self.log, user_id=user_id)
        return Result.success(token)

    async def request_register(self, user: User) -> Result[User]:
        project_id = self.session.project_id
        if project_id is None:
            return Result.failure(
                InvalidStateError("Project id is not configured; call setup() first.")
            )
        return await self.request(
            "POST",
            REGISTER_PATH,
            User,
            params={"project_id": project_id},
            body=user.to_dict(),
        )

    async def request_login_with_default_user(
        self, user: Optional[User] = None
    ) -> Result[str]:
        """
        Log in as the default user, registering it first if the server
        reports it unknown. Registration and the second login happen at most once.
        """
        user = user or self.default_user
        if user is None or not user.id or not user.password:
            return Result.failure(
                InvalidParameterError("No default user id/password configured.")
            )

        result = await self.request_login(user.id, user.password)
        error = result.error
        if not (isinstance(error, ServerError) and error.code == USER_NOT_REGISTERED):
            return result

        log_event("register_default_user", self.log, user_id=user.id)
        registered = await self.request_register(user)
        if registered.is_failure:
            return Result.failure(registered.error)
        return await self.request_login(user.id, user.password)

    # --- Callback form ------------------------------------------------------ #

    def login(self, user_id: str, password: str, *, callback: Callback) -> asyncio.Task:
        return self._schedule(self.request_login(user_id, password), callback)

    def register(self, user: User, *, callback: Callback) -> asyncio.Task:
        return self._schedule(self.request_register(user), callback)

    def login_with_default_user(
        self, user: Optional[User] = None, *, callback: Callback
    ) -> asyncio.Task:
        return self._schedule(self.request_login_with_default_user(user), callback)

    # --- Promise form ------------------------------------------------------- #

    def promised_login(self, user_id: str, password: str) -> asyncio.Future:
        return self._promise(self.login, user_id, password)

    def promised_register(self, user: User) -> asyncio.Future:
        return self._promise(self.register, user)

    def promised_login_with_default_user(
        self, user: Optional[User] = None
    ) -> asyncio.Future:
        return self._promise(self.login_with_default_user, user)


def create_client_from_env(**kwargs: Any) -> GeocoreClient:
    """Create a GeocoreClient from environment variables."""
    settings = load_env_config()
    if not settings.base_url or not settings.project_id:
        raise ValueError(
            "Missing GEOCORE_BASE_URL or GEOCORE_PROJECT_ID in environment."
        )
    return GeocoreClient.from_env(**kwargs)


__all__ = [
    "AUTH_PATH",
    "REGISTER_PATH",
    "USER_NOT_REGISTERED",
    "GeocoreClient",
    "create_client_from_env",
]
