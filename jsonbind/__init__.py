"""JSON request/response body codecs for HTTP clients, backed by msgspec."""

from __future__ import annotations

from .codec import Decoder, Encoder, create_decoder, create_encoder
from .codec.json import JsonDecoder, JsonEncoder
from .errors import DecodeError, EncodeError, JsonBindError, RegistryError
from .http import BodySink, RequestTemplate, Response, ResponseLike
from .mapper import MapperConfig, ObjectMapper
from .module import Module
from .types import TypeRef, empty_value_of, resolve

__version__ = '0.1.0'

__all__ = [
    '__version__',
    'BodySink',
    'DecodeError',
    'Decoder',
    'EncodeError',
    'Encoder',
    'JsonBindError',
    'JsonDecoder',
    'JsonEncoder',
    'MapperConfig',
    'Module',
    'ObjectMapper',
    'RegistryError',
    'RequestTemplate',
    'Response',
    'ResponseLike',
    'TypeRef',
    'create_decoder',
    'create_encoder',
    'empty_value_of',
    'resolve',
]
