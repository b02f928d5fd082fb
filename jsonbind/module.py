"""Extension modules: named bundles of per-type serializers and deserializers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

Serializer = Callable[[Any], Any]
"""Takes a value and returns a JSON-representable replacement."""

Deserializer = Callable[[Any], Any]
"""Takes a decoded JSON value (builtins only) and returns an instance."""


class Module:
    """A named override table consulted before default (de)serialization.

    Serializers may return any value the mapper can itself prepare, so a
    serializer can hand back a plain dict that still contains other objects.
    """

    def __init__(self, name: str, version: tuple[int, ...] = (1, 0, 0)) -> None:
        self.name = name
        self.version = version
        self._serializers: dict[type, Serializer] = {}
        self._deserializers: dict[type, Deserializer] = {}

    @property
    def serializers(self) -> Mapping[type, Serializer]:
        return MappingProxyType(self._serializers)

    @property
    def deserializers(self) -> Mapping[type, Deserializer]:
        return MappingProxyType(self._deserializers)

    def add_serializer(self, cls: type, func: Serializer) -> Module:
        """Serialize every instance of *cls* with *func*."""
        self._check(cls, func)
        self._serializers[cls] = func
        return self

    def add_deserializer(self, cls: type, func: Deserializer) -> Module:
        """Deserialize every value declared as *cls* with *func*."""
        self._check(cls, func)
        self._deserializers[cls] = func
        return self

    @staticmethod
    def _check(cls: Any, func: Any) -> None:
        if not isinstance(cls, type):
            raise TypeError(f'overrides are keyed by class, got {cls!r}')
        if not callable(func):
            raise TypeError(f'{func!r} is not callable')

    @property
    def version_string(self) -> str:
        return '.'.join(map(str, self.version))

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.name!r}, {self.version_string})'
