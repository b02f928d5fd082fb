"""Multi-line JSON rendering in the classic "field : value" style.

Objects put every field on its own line, indented by object nesting depth.
Arrays stay on one line (``[ 1, 2 ]``) and do not add indentation, so an array
of objects reads ``[ {`` ... ``}, {`` ... ``} ]``.
"""

from __future__ import annotations

from typing import Any

from msgspec import json

DEFAULT_INDENT = 2


class PrettyPrinter:
    """Render a tree of builtins (dict, list, scalars) as indented JSON text."""

    def __init__(self, indent: int = DEFAULT_INDENT) -> None:
        if indent < 0:
            raise ValueError(f'indent must be >= 0, got {indent}')
        self.indent = indent
        self._encoder = json.Encoder()

    def format(self, tree: Any) -> str:
        out: list[str] = []
        self._write(tree, 0, out)
        return ''.join(out)

    def _write(self, value: Any, depth: int, out: list[str]) -> None:
        if isinstance(value, dict):
            self._write_object(value, depth, out)
        elif isinstance(value, (list, tuple)):
            self._write_array(value, depth, out)
        else:
            out.append(self._scalar(value))

    def _write_object(self, value: dict[Any, Any], depth: int, out: list[str]) -> None:
        if not value:
            out.append('{ }')
            return

        field_pad = '\n' + ' ' * (self.indent * (depth + 1))
        out.append('{')
        for i, (key, item) in enumerate(value.items()):
            if i:
                out.append(',')
            out.append(field_pad)
            out.append(self._scalar(key if isinstance(key, str) else str(key)))
            out.append(' : ')
            self._write(item, depth + 1, out)
        out.append('\n' + ' ' * (self.indent * depth))
        out.append('}')

    def _write_array(self, value: list[Any] | tuple[Any, ...], depth: int, out: list[str]) -> None:
        if not value:
            out.append('[ ]')
            return

        out.append('[ ')
        for i, item in enumerate(value):
            if i:
                out.append(', ')
            self._write(item, depth, out)
        out.append(' ]')

    def _scalar(self, value: Any) -> str:
        return self._encoder.encode(value).decode('utf-8')
