"""geocore package exports."""

from .client import (
    USER_NOT_REGISTERED,
    GeocoreClient,
    create_client_from_env,
)
from .core import (
    ACCESS_TOKEN_HEADER,
    GeocoreError,
    InvalidParameterError,
    InvalidServerResponseError,
    InvalidStateError,
    JsonBody,
    MultipartPayload,
    NetworkError,
    RequestDescriptor,
    Result,
    ServerError,
    ServerResponse,
    Session,
    SessionState,
    TokenUndefinedError,
    Transport,
    TransportResponse,
    UnauthorizedAccessError,
    UnexpectedResponseError,
)
from .core.logging import setup_logging
from .models import (
    GenericCountResult,
    GenericResult,
    GeocoreModel,
    Identifiable,
    Point,
    User,
)
from .transports.http import HttpxTransport

__all__ = [
    # Client
    "GeocoreClient",
    "create_client_from_env",
    "Session",
    "SessionState",
    "USER_NOT_REGISTERED",
    "ACCESS_TOKEN_HEADER",
    # Transport
    "Transport",
    "TransportResponse",
    "HttpxTransport",
    "RequestDescriptor",
    "JsonBody",
    "MultipartPayload",
    # Results & exceptions
    "Result",
    "GeocoreError",
    "InvalidStateError",
    "InvalidServerResponseError",
    "UnexpectedResponseError",
    "ServerError",
    "ServerResponse",
    "TokenUndefinedError",
    "UnauthorizedAccessError",
    "InvalidParameterError",
    "NetworkError",
    # Models
    "GeocoreModel",
    "Identifiable",
    "GenericResult",
    "GenericCountResult",
    "Point",
    "User",
    # Logging
    "setup_logging",
]
