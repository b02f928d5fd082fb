"""Codec base classes and helpers."""

from __future__ import annotations

import abc
from typing import Any

from .. import errors, registry
from ..http import BodySink, ResponseLike
from ..registry import Registry


def create_encoder(name: str | Encoder, **kwargs: Any) -> Encoder:
    """Return an encoder by name or pass through existing instances."""
    if isinstance(name, Encoder):
        return name
    return _lookup(ENCODERS, 'encoder', name)(**kwargs)


def create_decoder(name: str | Decoder, **kwargs: Any) -> Decoder:
    """Return a decoder by name or pass through existing instances."""
    if isinstance(name, Decoder):
        return name
    return _lookup(DECODERS, 'decoder', name)(**kwargs)


def _lookup(reg: Registry[Any], kind: str, name: str) -> Any:
    registry.init()
    try:
        return reg[name]
    except KeyError:
        raise errors.RegistryError(kind, name) from None
    except ImportError as exc:
        raise errors.RegistryError(kind, name) from exc


class Encoder(abc.ABC):
    """Writes a value into the body of an outgoing request."""

    NAME: str

    def __init_subclass__(cls) -> None:
        ENCODERS[cls.NAME] = cls

    @abc.abstractmethod
    def encode(self, value: Any, body_type: Any, template: BodySink) -> None:
        """Serialize *value*, declared as *body_type*, into *template*.

        Raises `EncodeError` without touching *template* on failure.
        """
        raise NotImplementedError('abstract')


class Decoder(abc.ABC):
    """Reads the body of a response into a value."""

    NAME: str

    def __init_subclass__(cls) -> None:
        DECODERS[cls.NAME] = cls

    @abc.abstractmethod
    def decode(self, response: ResponseLike, body_type: Any) -> Any:
        """Deserialize the body of *response* as *body_type*.

        Raises `DecodeError` on failure.
        """
        raise NotImplementedError('abstract')


ENCODERS: Registry[Encoder] = Registry(__name__, Encoder)
DECODERS: Registry[Decoder] = Registry(__name__, Decoder)
