"""Transport implementations for the Geocore client."""

from .http import HttpxTransport

__all__ = ["HttpxTransport"]
