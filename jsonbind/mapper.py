"""The mapping engine: msgspec configured with a null policy, layout and overrides.

Encoding first prepares a tree of builtins by walking the value alongside its
declared type, consulting registered serializers before anything else. The tree
is then rendered compactly by msgspec or by the `PrettyPrinter`.

Decoding parses the text into builtins and walks the declared type back down,
consulting registered deserializers at every level. While deserializers are
registered, struct and dataclass fields are walked too; the remaining leaves
(datetimes, enums, plain classes, ...) are handed to `msgspec.convert`.
"""

from __future__ import annotations

import collections
import dataclasses
import functools
import operator
import typing
from collections.abc import Iterable, Mapping, Set
from typing import Any

import msgspec
from msgspec import json

from . import logs
from .module import Deserializer, Module, Serializer
from .pretty import DEFAULT_INDENT, PrettyPrinter
from .types import (
    ANY,
    CLASS_KIND,
    MAPPING_KIND,
    SEQUENCE_KIND,
    SET_KIND,
    TUPLE_KIND,
    UNION_KIND,
    ResolvedType,
    resolve,
)
from .utils.format import format_type

log = logs.get(__name__)

_PRIMITIVES = frozenset((str, int, float, bool))
_ARRAY_TYPES = (list, tuple, Set, collections.deque)


class MapperConfig(msgspec.Struct, frozen=True):
    """Serialization policy shared by a mapper's encode and decode paths."""

    omit_none: bool = True
    """Leave out object fields whose value is None. Mapping entries are kept."""

    indent: int | None = DEFAULT_INDENT
    """Pretty-print with this many spaces per level, or compact when None."""

    sort_keys: bool = False

    strict: bool = True
    """Reject lossy coercions (such as ``"1"`` to ``1``) when decoding."""


class _Field(typing.NamedTuple):
    attr: str
    key: str
    type: ResolvedType


@functools.lru_cache(maxsize=None)
def _struct_fields(cls: type[msgspec.Struct]) -> tuple[_Field, ...]:
    return tuple(
        _Field(field.name, field.encode_name, resolve(field.type))
        for field in msgspec.structs.fields(cls)
    )


@functools.lru_cache(maxsize=None)
def _dataclass_fields(cls: type) -> tuple[_Field, ...]:
    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError):
        hints = {}
    return tuple(
        _Field(field.name, field.name, resolve(hints.get(field.name, Any)))
        for field in dataclasses.fields(cls)
    )


def _json_type(raw: Any) -> str:
    if raw is None:
        return 'null'
    if isinstance(raw, dict):
        return 'object'
    if isinstance(raw, list):
        return 'array'
    return type(raw).__name__


class ObjectMapper:
    """Serializes values to JSON text and back, guided by declared types.

    Register modules while setting a mapper up; once a mapper is handed to an
    encoder or decoder it is only read, and may be shared between threads.
    """

    def __init__(
        self,
        config: MapperConfig | None = None,
        modules: Iterable[Module] = (),
    ) -> None:
        self.config = config or MapperConfig()
        self._modules: list[Module] = []
        self._serializers: dict[type, Serializer] = {}
        self._deserializers: dict[type, Deserializer] = {}

        indent = self.config.indent
        self._printer = PrettyPrinter(indent) if indent is not None else None
        self._encoder = json.Encoder()
        self._decoder = json.Decoder()

        for module in modules:
            self.register_module(module)

    @property
    def modules(self) -> tuple[Module, ...]:
        return tuple(self._modules)

    def register_module(self, module: Module) -> ObjectMapper:
        """Merge *module* into the override tables. Later modules win."""
        self._modules.append(module)
        self._serializers.update(module.serializers)
        self._deserializers.update(module.deserializers)
        log.debug(
            'registered module: %r (serializers=%d, deserializers=%d)',
            module,
            len(module.serializers),
            len(module.deserializers),
        )
        return self

    def construct_type(self, declared: Any) -> ResolvedType:
        return resolve(declared)

    ##
    ## encoding
    ##

    def write_value_as_string(self, value: Any, declared_type: Any = None) -> str:
        """Serialize *value* completely, as declared by *declared_type*."""
        tree = self.to_builtins(value, declared_type)
        if self._printer is not None:
            return self._printer.format(tree)
        return self._encoder.encode(tree).decode('utf-8')

    def write_value_as_bytes(self, value: Any, declared_type: Any = None) -> bytes:
        return self.write_value_as_string(value, declared_type).encode('utf-8')

    def to_builtins(self, value: Any, declared_type: Any = None) -> Any:
        """Return the tree of dicts, lists and scalars that *value* encodes to."""
        return self._prepare(value, self.construct_type(declared_type))

    def _prepare(self, value: Any, rtype: ResolvedType, overrides: bool = True) -> Any:
        if value is None:
            return None
        if rtype.kind == UNION_KIND:
            rtype = self._narrow(rtype, value)

        cls = type(value)
        if overrides:
            serializer = self._find_serializer(rtype, cls)
            if serializer is not None:
                result = serializer(value)
                # a result of the same class is not fed back to its serializer
                return self._prepare(result, ANY, overrides=type(result) is not cls)

        if cls in _PRIMITIVES:
            return value
        if isinstance(value, msgspec.Struct):
            return self._prepare_struct(value)
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return self._prepare_fields(value, _dataclass_fields(cls))
        if isinstance(value, Mapping):
            return self._prepare_mapping(value, rtype)
        if isinstance(value, _ARRAY_TYPES):
            return [self._prepare(item, rtype.element_type(i)) for i, item in enumerate(value)]
        return msgspec.to_builtins(value, enc_hook=self._enc_hook, str_keys=True)

    def _prepare_struct(self, value: msgspec.Struct) -> Any:
        struct_config = value.__struct_config__
        fields = _struct_fields(type(value))
        if struct_config.array_like:
            items = [self._prepare(getattr(value, f.attr), f.type) for f in fields]
            return items if struct_config.tag_field is None else [struct_config.tag, *items]

        out = self._prepare_fields(value, fields)
        if struct_config.tag_field is not None:
            out = {struct_config.tag_field: struct_config.tag, **out}
        return out

    def _prepare_fields(self, value: Any, fields: tuple[_Field, ...]) -> dict[str, Any]:
        omit_none = self.config.omit_none
        items = []
        for field in fields:
            item = getattr(value, field.attr)
            if item is None and omit_none:
                continue
            items.append((field.key, self._prepare(item, field.type)))
        if self.config.sort_keys:
            items.sort(key=operator.itemgetter(0))
        return dict(items)

    def _prepare_mapping(self, value: Mapping[Any, Any], rtype: ResolvedType) -> dict[str, Any]:
        value_type = rtype.content_type if rtype.kind == MAPPING_KIND else ANY
        items = [(self._prepare_key(key), self._prepare(item, value_type)) for key, item in value.items()]
        if self.config.sort_keys:
            items.sort(key=operator.itemgetter(0))
        return dict(items)

    def _prepare_key(self, key: Any) -> str:
        if type(key) is str:
            return key
        converted = msgspec.to_builtins(key, enc_hook=self._enc_hook, str_keys=True)
        if isinstance(converted, str):
            return converted
        if isinstance(converted, (int, float)) and not isinstance(converted, bool):
            return str(converted)
        raise TypeError(f'unsupported mapping key type: {format_type(type(key))}')

    def _narrow(self, rtype: ResolvedType, value: Any) -> ResolvedType:
        """Pick the union member that *value* is an instance of."""
        for arg in rtype.args:
            cls = arg.cls
            if cls is not None and isinstance(value, cls):
                return arg
        return ANY

    def _find_serializer(self, rtype: ResolvedType, cls: type) -> Serializer | None:
        if not self._serializers:
            return None
        declared = rtype.cls
        if declared is not None and declared in self._serializers and issubclass(cls, declared):
            return self._serializers[declared]
        for base in cls.__mro__:
            if base in self._serializers:
                return self._serializers[base]
        return None

    def _enc_hook(self, obj: Any) -> Any:
        serializer = self._find_serializer(ANY, type(obj))
        if serializer is None:
            raise TypeError(f'unsupported type: {format_type(type(obj))}')
        return serializer(obj)

    ##
    ## decoding
    ##

    def read_value(self, data: bytes | str, declared_type: Any = None) -> Any:
        """Parse JSON *data* into an instance of *declared_type*."""
        rtype = self.construct_type(declared_type)
        return self._convert(self._decoder.decode(data), rtype)

    def convert(self, raw: Any, declared_type: Any = None) -> Any:
        """Convert already parsed JSON builtins into *declared_type*."""
        return self._convert(raw, self.construct_type(declared_type))

    def _convert(self, raw: Any, rtype: ResolvedType) -> Any:
        if rtype.is_any:
            return raw

        deserializer = self._find_deserializer(rtype)
        if deserializer is not None:
            return deserializer(raw)

        kind = rtype.kind
        if kind == UNION_KIND:
            return self._convert_union(raw, rtype)
        if kind in (SEQUENCE_KIND, SET_KIND, TUPLE_KIND):
            if not isinstance(raw, list):
                raise msgspec.ValidationError(f'Expected `array`, got `{_json_type(raw)}`')
            if kind == TUPLE_KIND and len(raw) != len(rtype.args):
                raise msgspec.ValidationError(
                    f'Expected `array` of length {len(rtype.args)}, got {len(raw)}'
                )
            return rtype.build(self._convert(item, rtype.element_type(i)) for i, item in enumerate(raw))
        if kind == MAPPING_KIND:
            if not isinstance(raw, dict):
                raise msgspec.ValidationError(f'Expected `object`, got `{_json_type(raw)}`')
            key_type, value_type = rtype.key_type, rtype.content_type
            return rtype.build(
                (self._convert_key(key, key_type), self._convert(item, value_type))
                for key, item in raw.items()
            )
        cls = rtype.cls
        if self._deserializers and cls is not None:
            # fields of natively supported types never reach dec_hook
            if issubclass(cls, msgspec.Struct):
                return self._convert_struct(raw, cls)
            if dataclasses.is_dataclass(cls):
                return self._convert_dataclass(raw, cls)
        return msgspec.convert(raw, rtype.raw, strict=self.config.strict, dec_hook=self._dec_hook)

    def _convert_struct(self, raw: Any, cls: type[msgspec.Struct]) -> Any:
        struct_config = cls.__struct_config__
        fields = _struct_fields(cls)
        tag_field = struct_config.tag_field

        if struct_config.array_like:
            if not isinstance(raw, list):
                raise msgspec.ValidationError(f'Expected `array`, got `{_json_type(raw)}`')
            if tag_field is not None:
                if not raw or raw[0] != struct_config.tag:
                    raise msgspec.ValidationError(f'Invalid value for tag of `{cls.__qualname__}`')
                raw = raw[1:]
            if len(raw) > len(fields):
                raise msgspec.ValidationError(
                    f'Expected `array` of at most length {len(fields)}, got {len(raw)}'
                )
            values = {f.attr: self._convert(item, f.type) for f, item in zip(fields, raw)}
            return self._construct(cls, values)

        if not isinstance(raw, dict):
            raise msgspec.ValidationError(f'Expected `object`, got `{_json_type(raw)}`')
        if tag_field is not None and tag_field in raw and raw[tag_field] != struct_config.tag:
            raise msgspec.ValidationError(f'Invalid value {raw[tag_field]!r} - at `$.{tag_field}`')
        return self._construct(cls, self._convert_fields(raw, fields))

    def _convert_dataclass(self, raw: Any, cls: type) -> Any:
        if not isinstance(raw, dict):
            raise msgspec.ValidationError(f'Expected `object`, got `{_json_type(raw)}`')
        init_names = {field.name for field in dataclasses.fields(cls) if field.init}
        fields = tuple(f for f in _dataclass_fields(cls) if f.attr in init_names)
        return self._construct(cls, self._convert_fields(raw, fields))

    def _convert_fields(self, raw: dict[str, Any], fields: tuple[_Field, ...]) -> dict[str, Any]:
        return {f.attr: self._convert(raw[f.key], f.type) for f in fields if f.key in raw}

    def _construct(self, cls: type, values: dict[str, Any]) -> Any:
        try:
            return cls(**values)
        except TypeError as exc:
            # missing required fields
            raise msgspec.ValidationError(f'{exc} - building `{cls.__qualname__}`') from exc

    def _convert_key(self, key: str, key_type: ResolvedType) -> Any:
        if key_type.is_any or key_type.origin is str:
            return key
        # JSON keys are always strings, so numeric keys need lax conversion
        return msgspec.convert(key, key_type.raw, strict=False, dec_hook=self._dec_hook)

    def _convert_union(self, raw: Any, rtype: ResolvedType) -> Any:
        if raw is None and rtype.nullable:
            return None

        members = [arg for arg in rtype.args if arg.origin is not type(None)]
        if len(members) == 1:
            return self._convert(raw, members[0])

        error: Exception | None = None
        for member in members:
            try:
                return self._convert(raw, member)
            except (msgspec.ValidationError, TypeError, ValueError) as exc:
                error = exc
        raise msgspec.ValidationError(f'Expected `{format_type(rtype.raw)}`: {error}')

    def _find_deserializer(self, rtype: ResolvedType) -> Deserializer | None:
        if not self._deserializers:
            return None
        cls = rtype.cls
        return None if cls is None else self._deserializers.get(cls)

    def _dec_hook(self, tp: Any, obj: Any) -> Any:
        rtype = resolve(tp)
        deserializer = self._find_deserializer(rtype)
        if deserializer is not None:
            return deserializer(obj)
        if rtype.kind != CLASS_KIND:
            # containers nested in structs, such as mapping subclasses
            return self._convert(obj, rtype)
        raise TypeError(f'unsupported type: {format_type(tp)}')
