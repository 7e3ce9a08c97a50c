from __future__ import annotations

from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict

M = TypeVar("M", bound="GeocoreModel")


class GeocoreModel(BaseModel):
    """
    Base for objects exchanged with Geocore.
    - ``from_json`` tolerates absent/non-object nodes (treated as ``{}``)
    - ``to_dict`` drops unset fields so partial objects can be posted
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def from_json(cls: Type[M], node: Any) -> M:
        return cls.model_validate(node if isinstance(node, dict) else {})

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Identifiable(GeocoreModel):
    sid: Optional[int] = None
    id: Optional[str] = None


class GenericResult:
    """Raw JSON node returned by the service, kept as-is."""

    def __init__(self, json: Any):
        self.json = json

    @classmethod
    def from_json(cls, node: Any) -> "GenericResult":
        return cls(node)

    def __repr__(self) -> str:
        return f"GenericResult({self.json!r})"


class GenericCountResult(GeocoreModel):
    count: Optional[int] = None


class Point(GeocoreModel):
    """Geographical point in WGS84."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.latitude is None or self.longitude is None:
            return {}
        return {"latitude": self.latitude, "longitude": self.longitude}


class User(Identifiable):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


__all__ = [
    "GeocoreModel",
    "Identifiable",
    "GenericResult",
    "GenericCountResult",
    "Point",
    "User",
]
