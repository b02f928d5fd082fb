from __future__ import annotations


class JsonBindError(Exception):
    """Base class for all jsonbind exceptions."""


class EncodeError(JsonBindError):
    """Raised when a value cannot be serialized into a request body."""


class DecodeError(JsonBindError):
    """Raised when a response body cannot be deserialized."""


class RegistryError(JsonBindError):
    """Raised when looking up a codec name that was never registered."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f'unknown {kind}: {name!r}')
        self.kind = kind
        self.name = name
