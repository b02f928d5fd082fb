from __future__ import annotations

from typing import Any


def format_type(tp: Any) -> str:
    """Return a readable name for a class or annotation."""
    if isinstance(tp, type) and not getattr(tp, '__args__', None):
        return tp.__qualname__
    return repr(tp).replace('typing.', '')


def elide(value: str, width: int = 100) -> str:
    return value if len(value) <= width else f'{value[: width - 3]}...'
