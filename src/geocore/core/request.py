"""
Request construction: turns (method, parameters, body, token) into a
transport-agnostic RequestDescriptor.

Encoding rules:
- GET/HEAD/DELETE put parameters on the URL query string; other methods
  send them as a JSON body.
- When a body is given, parameters always go on the query string and the
  body goes into the payload (JSON, or multipart/form-data for uploads).
- Query keys are sorted; nested mappings and sequences are flattened with
  bracket notation (``a[b]=1``, ``a[]=1``).
"""

from __future__ import annotations

import json
import secrets
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote, urlsplit, urlunsplit

from .errors import InvalidParameterError

ACCESS_TOKEN_HEADER = "Geocore-Access-Token"

# Sentinel keys marking a plain body mapping as a file upload.
FILE_CONTENTS_KEY = "$fileContents"
FILE_NAME_KEY = "$fileName"
FIELD_NAME_KEY = "$fieldName"
MIME_TYPE_KEY = "$mimeType"

URL_ENCODED_METHODS = frozenset({"GET", "HEAD", "DELETE"})

# Characters left unescaped in query keys and values, besides [A-Za-z0-9_.~-].
_QUERY_SAFE = "/?"

# Would end the quoted-string or the header line in the part headers.
_HEADER_BREAKING_CHARS = ('"', "\r", "\n")


@dataclass(frozen=True)
class MultipartPayload:
    """A single file part for a multipart/form-data upload."""

    file_contents: bytes
    file_name: str
    field_name: str
    mime_type: str

    def __post_init__(self) -> None:
        if not isinstance(self.file_contents, (bytes, bytearray)):
            raise InvalidParameterError("Multipart file contents must be bytes.")
        for label, value in (
            ("file name", self.file_name),
            ("field name", self.field_name),
            ("MIME type", self.mime_type),
        ):
            if not isinstance(value, str) or not value:
                raise InvalidParameterError(f"Multipart {label} must be a non-empty string.")
            if any(ch in value for ch in _HEADER_BREAKING_CHARS):
                raise InvalidParameterError(
                    f"Multipart {label} must not contain quotes or line breaks."
                )

    @classmethod
    def from_mapping(cls, body: Mapping[str, Any]) -> "MultipartPayload":
        missing = [
            key
            for key in (FILE_NAME_KEY, FIELD_NAME_KEY, MIME_TYPE_KEY)
            if body.get(key) is None
        ]
        if missing:
            raise InvalidParameterError(
                "Multipart body is missing required keys: " + ", ".join(missing)
            )
        return cls(
            file_contents=body[FILE_CONTENTS_KEY],
            file_name=body[FILE_NAME_KEY],
            field_name=body[FIELD_NAME_KEY],
            mime_type=body[MIME_TYPE_KEY],
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            FILE_CONTENTS_KEY: bytes(self.file_contents),
            FILE_NAME_KEY: self.file_name,
            FIELD_NAME_KEY: self.field_name,
            MIME_TYPE_KEY: self.mime_type,
        }


@dataclass(frozen=True)
class JsonBody:
    data: Mapping[str, Any]


Body = Union[JsonBody, MultipartPayload]
BodyInput = Union[Body, Mapping[str, Any], None]


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    url: str
    headers: Mapping[str, str]
    body: Optional[bytes] = None
    is_multipart: bool = False


def coerce_body(body: BodyInput) -> Optional[Body]:
    """Classify a body: typed variants pass through, mappings are checked for the upload sentinel."""
    if body is None or isinstance(body, (JsonBody, MultipartPayload)):
        return body
    if not isinstance(body, Mapping):
        raise InvalidParameterError(
            f"Request body must be a mapping, got {type(body).__name__}"
        )
    if FILE_CONTENTS_KEY in body:
        return MultipartPayload.from_mapping(body)
    return JsonBody(dict(body))


# --- Query string ---------------------------------------------------------- #


def escape(value: str) -> str:
    return quote(value, safe=_QUERY_SAFE)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def query_components(key: str, value: Any) -> List[Tuple[str, str]]:
    components: List[Tuple[str, str]] = []
    if isinstance(value, Mapping):
        for nested_key in sorted(value, key=str):
            components += query_components(f"{key}[{nested_key}]", value[nested_key])
    elif isinstance(value, (list, tuple)):
        for item in value:
            components += query_components(f"{key}[]", item)
    else:
        components.append((escape(key), escape(_stringify(value))))
    return components


def query_string(parameters: Mapping[str, Any]) -> str:
    components: List[Tuple[str, str]] = []
    for key in sorted(parameters):
        components += query_components(key, parameters[key])
    return "&".join(f"{k}={v}" for k, v in components)


def append_query(url: str, parameters: Optional[Mapping[str, Any]]) -> str:
    if not parameters:
        return url
    parts = urlsplit(url)
    query = query_string(parameters)
    if parts.query:
        query = f"{parts.query}&{query}"
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


# --- Payloads -------------------------------------------------------------- #


def generate_boundary() -> str:
    return "Boundary+%08X%08X" % (secrets.randbits(32), secrets.randbits(32))


def encode_multipart(
    payload: MultipartPayload, boundary: Optional[str] = None
) -> Tuple[bytes, str]:
    """Returns (body bytes, Content-Type header value) for a single-part upload."""
    boundary = boundary or generate_boundary()
    head = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="{payload.field_name}"; '
        f'filename="{payload.file_name}"\r\n'
        f"Content-Type: {payload.mime_type}\r\n\r\n"
    )
    body = b"".join(
        [
            head.encode("utf-8"),
            bytes(payload.file_contents),
            b"\r\n",
            f"--{boundary}--\r\n".encode("utf-8"),
        ]
    )
    return body, f"multipart/form-data; boundary={boundary}"


def _json_bytes(data: Mapping[str, Any]) -> bytes:
    try:
        return json.dumps(data).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"Request body is not JSON serializable: {exc}") from exc


def build_request(
    method: str,
    url: str,
    *,
    parameters: Optional[Mapping[str, Any]] = None,
    body: BodyInput = None,
    token: Optional[str] = None,
    boundary: Optional[str] = None,
) -> RequestDescriptor:
    """
    Build a RequestDescriptor. Raises InvalidParameterError before any I/O
    when the body cannot be encoded (e.g. an upload missing its file name).
    """
    method = method.upper()
    payload = coerce_body(body)

    headers: Dict[str, str] = {"Accept": "application/json"}
    if token:
        headers[ACCESS_TOKEN_HEADER] = token

    content: Optional[bytes] = None
    is_multipart = False

    if payload is None:
        if parameters is not None:
            if method in URL_ENCODED_METHODS:
                url = append_query(url, parameters)
            else:
                content = _json_bytes(parameters)
                headers["Content-Type"] = "application/json"
    else:
        url = append_query(url, parameters)
        if isinstance(payload, MultipartPayload):
            content, headers["Content-Type"] = encode_multipart(payload, boundary)
            is_multipart = True
        elif method in URL_ENCODED_METHODS:
            url = append_query(url, payload.data)
        else:
            content = _json_bytes(payload.data)
            headers["Content-Type"] = "application/json"

    return RequestDescriptor(
        method=method,
        url=url,
        headers=MappingProxyType(headers),
        body=content,
        is_multipart=is_multipart,
    )


__all__ = [
    "ACCESS_TOKEN_HEADER",
    "FILE_CONTENTS_KEY",
    "FILE_NAME_KEY",
    "FIELD_NAME_KEY",
    "MIME_TYPE_KEY",
    "URL_ENCODED_METHODS",
    "MultipartPayload",
    "JsonBody",
    "Body",
    "BodyInput",
    "RequestDescriptor",
    "coerce_body",
    "escape",
    "query_components",
    "query_string",
    "append_query",
    "generate_boundary",
    "encode_multipart",
    "build_request",
]
