"""Minimal request and response types the codecs read from and write into.

HTTP clients do not have to use these: any object with a ``body(data)`` method
is a valid sink, and any object with ``status`` and ``body`` attributes can be
decoded.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import msgspec

DEFAULT_CHARSET = 'utf-8'


@runtime_checkable
class BodySink(Protocol):
    def body(self, data: str | bytes | None, charset: str | None = ...) -> Any: ...


@runtime_checkable
class ResponseLike(Protocol):
    status: int
    body: Any


class RequestTemplate:
    """Outgoing request under construction."""

    def __init__(
        self,
        method: str = 'GET',
        url: str = '',
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.method = method
        self.url = url
        self.headers: dict[str, str] = dict(headers or {})
        self._body: bytes | None = None
        self._charset: str | None = None

    def body(self, data: str | bytes | None, charset: str | None = None) -> RequestTemplate:
        """Replace the body. Text is encoded with *charset* (UTF-8 by default)."""
        if data is None:
            self._body = self._charset = None
            self.headers.pop('Content-Length', None)
            return self

        if isinstance(data, str):
            charset = charset or DEFAULT_CHARSET
            self._body = data.encode(charset)
        else:
            self._body = bytes(data)
        self._charset = charset
        self.headers['Content-Length'] = str(len(self._body))
        return self

    @property
    def body_bytes(self) -> bytes | None:
        return self._body

    @property
    def charset(self) -> str | None:
        return self._charset

    @property
    def body_text(self) -> str | None:
        if self._body is None:
            return None
        return self._body.decode(self._charset or DEFAULT_CHARSET)

    def __repr__(self) -> str:
        size = 0 if self._body is None else len(self._body)
        return f'{self.__class__.__name__}({self.method} {self.url!r}, body={size} bytes)'


class Response(msgspec.Struct, frozen=True):
    """Received response. The body stays None when the server sent none."""

    status: int
    reason: str = ''
    headers: dict[str, list[str]] = msgspec.field(default_factory=dict)
    body: bytes | None = None

    @classmethod
    def create(
        cls,
        status: int,
        reason: str = '',
        headers: Mapping[str, list[str]] | None = None,
        body: str | bytes | None = None,
        charset: str = DEFAULT_CHARSET,
    ) -> Response:
        if isinstance(body, str):
            body = body.encode(charset)
        return cls(status, reason, dict(headers or {}), body)


def read_body(body: Any) -> bytes | None:
    """Return the full payload of *body*, reading and closing streams."""
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode(DEFAULT_CHARSET)

    read = getattr(body, 'read', None)
    if read is None:
        raise TypeError(f'unreadable body: {type(body).__name__}')
    try:
        data = read()
    finally:
        close = getattr(body, 'close', None)
        if close is not None:
            close()
    return data.encode(DEFAULT_CHARSET) if isinstance(data, str) else bytes(data)
