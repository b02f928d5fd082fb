from __future__ import annotations

import importlib
import pkgutil
from typing import TypeVar

from .. import logs

log = logs.get(__name__)

T = TypeVar('T')


def import_class(base_type: type[T], name: str) -> type[T]:
    """Import `module.Class` notation and check it subclasses *base_type*."""
    if '.' not in name:
        raise ImportError(f'not a dotted class path: {name!r}')
    mod_name, cls_name = name.rsplit('.', 1)
    log.debug('loading: %s', name)
    mod = importlib.import_module(mod_name)
    try:
        cls = getattr(mod, cls_name)
    except AttributeError:
        raise ImportError(f'cannot import name {cls_name!r} from {mod_name!r}') from None
    if not (isinstance(cls, type) and issubclass(cls, base_type)):
        raise TypeError(f'{name} is not a subclass of {base_type.__name__}')
    return cls


def import_package(pkgname: str) -> dict[str, Exception]:
    """Import all modules in *pkgname* and return any exceptions that occur."""
    exceptions: dict[str, Exception] = {}
    pkg = importlib.import_module(pkgname)
    for _, modname, ispkg in pkgutil.iter_modules(pkg.__path__):
        if ispkg:
            continue
        exc = import_module(modname, pkgname)
        if exc:
            exceptions[modname] = exc
    return exceptions


def import_module(modname: str, pkgname: str | None = None) -> Exception | None:
    """Import a module, optionally relative to *pkgname*."""
    name = '.'.join(filter(None, [pkgname, modname]))
    try:
        log.debug('loading: %s', name)
        if pkgname:
            importlib.import_module(f'.{modname}', pkgname)
        else:
            importlib.import_module(modname)
    except Exception as exc:
        return exc
    return None
