from __future__ import annotations

from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class InitializableFromJSON(Protocol):
    """A type that can be constructed from a parsed JSON node."""

    @classmethod
    def from_json(cls, node: Any) -> Any: ...


@runtime_checkable
class SerializableToJSON(Protocol):
    """A type that can be flattened into a JSON-ready mapping."""

    def to_dict(self) -> Dict[str, Any]: ...


__all__ = ["InitializableFromJSON", "SerializableToJSON"]
