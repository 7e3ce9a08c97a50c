"""Core request pipeline for the Geocore client (transport-agnostic)."""

from .config import GeocoreSettings, load_env_config
from .contracts import InitializableFromJSON, SerializableToJSON
from .dispatcher import Callback, Dispatcher
from .errors import (
    GeocoreError,
    InvalidParameterError,
    InvalidServerResponseError,
    InvalidStateError,
    NetworkError,
    ServerError,
    ServerResponse,
    TokenUndefinedError,
    UnauthorizedAccessError,
    UnexpectedResponseError,
)
from .request import (
    ACCESS_TOKEN_HEADER,
    JsonBody,
    MultipartPayload,
    RequestDescriptor,
    build_request,
)
from .response import decode_response
from .result import Result
from .session import Session, SessionState
from .transport import Transport, TransportResponse

__all__ = [
    # Pipeline
    "Dispatcher",
    "Callback",
    "build_request",
    "decode_response",
    "RequestDescriptor",
    "JsonBody",
    "MultipartPayload",
    "ACCESS_TOKEN_HEADER",
    "Transport",
    "TransportResponse",
    # Results & errors
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
    # Session & config
    "Session",
    "SessionState",
    "GeocoreSettings",
    "load_env_config",
    # Contracts
    "InitializableFromJSON",
    "SerializableToJSON",
]
