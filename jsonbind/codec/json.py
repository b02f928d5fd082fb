"""JSON codec backed by an `ObjectMapper`."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .. import errors, logs
from ..http import BodySink, ResponseLike, read_body
from ..mapper import MapperConfig, ObjectMapper
from ..module import Module
from ..types import empty_value_of
from ..utils.format import elide, format_type
from . import Decoder, Encoder

NOT_FOUND = 404

log = logs.get(__name__)


def _mapper(
    modules: Iterable[Module] | None,
    mapper: ObjectMapper | None,
    config: MapperConfig | None,
) -> ObjectMapper:
    if mapper is None:
        return ObjectMapper(config, modules or ())
    if modules is not None or config is not None:
        raise ValueError('a prebuilt mapper cannot be combined with modules or config')
    return mapper


class JsonEncoder(Encoder):
    """Encodes request bodies as JSON.

    By default None fields are left out and output is pretty-printed with two
    space indentation. Pass *modules* to add custom serializers on top of the
    defaults, or a fully configured *mapper* to replace them.
    """

    NAME = 'json'

    def __init__(
        self,
        modules: Iterable[Module] | None = None,
        mapper: ObjectMapper | None = None,
        config: MapperConfig | None = None,
    ) -> None:
        self.mapper = _mapper(modules, mapper, config)

    def encode(self, value: Any, body_type: Any, template: BodySink) -> None:
        try:
            text = self.mapper.write_value_as_string(value, body_type)
        except Exception as exc:
            raise errors.EncodeError(f'{exc}: value={elide(repr(value))}') from exc
        template.body(text)


class JsonDecoder(Decoder):
    """Decodes JSON response bodies.

    A 404, a missing body or an empty body decode to `empty_value_of` the
    declared type instead of failing. A 404 also gives empty collections.
    """

    NAME = 'json'

    def __init__(
        self,
        modules: Iterable[Module] | None = None,
        mapper: ObjectMapper | None = None,
        config: MapperConfig | None = None,
    ) -> None:
        self.mapper = _mapper(modules, mapper, config)

    def decode(self, response: ResponseLike, body_type: Any) -> Any:
        if response.status == NOT_FOUND:
            log.debug('not found, decoding as empty: %s', format_type(body_type))
            return empty_value_of(body_type, empty_collections=True)

        try:
            data = read_body(response.body)
        except (OSError, ValueError, TypeError) as exc:
            raise errors.DecodeError(f'error reading body: {exc}') from exc
        if not data:
            log.debug('empty body, decoding as empty: %s', format_type(body_type))
            return empty_value_of(body_type)

        try:
            return self.mapper.read_value(data, body_type)
        except Exception as exc:
            raise errors.DecodeError(f'{exc}: data={elide(repr(data))}') from exc
