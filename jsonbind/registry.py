"""Registry helpers that auto-import packages and expose named lookups."""

from __future__ import annotations

from threading import Event, Lock
from typing import Generic, TypeVar

from . import logs
from .utils.path import import_class, import_package

log = logs.get(__name__)

_init_lock = Lock()
_initialized = Event()
_packages: set[str] = set()


def init() -> None:
    """Import every module of the packages that registries live in."""
    with _init_lock:
        if _initialized.is_set():
            return

        for pkgname in sorted(_packages):
            for modname, exc in import_package(pkgname).items():
                log.warning('failed to load %s.%s: %s', pkgname, modname, exc)

        _initialized.set()


T = TypeVar('T')


class Registry(Generic[T]):
    """Keeps a registry of subclasses by name."""

    def __init__(self, pkgname: str, base_type: type[T]) -> None:
        self._base_type = base_type
        self._registry: dict[str, type[T]] = {}

        _packages.add(pkgname)

    def __getitem__(self, name: str) -> type[T]:
        try:
            return self._registry[name]
        except KeyError:
            if '.' not in name:
                raise
        return import_class(self._base_type, name)

    def __setitem__(self, name: str, cls: type[T]) -> None:
        self._registry[name] = cls

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def names(self) -> tuple[str, ...]:
        """Return all registered names in insertion order."""
        return tuple(self._registry.keys())
