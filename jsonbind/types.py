"""Resolution of declared type descriptors.

Callers describe the shape of a body with ordinary annotations such as
``list[Zone]`` or ``dict[str, Any]``. A bare runtime class cannot tell a list of
zones from a list of anything, so both the encoder and the decoder resolve the
declared annotation into a `ResolvedType` first and walk that instead.
"""

from __future__ import annotations

import collections.abc as abc
import types
import typing
from typing import Any, Generic, TypeVar

import msgspec

T = TypeVar('T')

ANY_KIND = 'any'
UNION_KIND = 'union'
SEQUENCE_KIND = 'sequence'
TUPLE_KIND = 'tuple'
SET_KIND = 'set'
MAPPING_KIND = 'mapping'
CLASS_KIND = 'class'

_ABSTRACT_CONCRETE: dict[Any, type] = {
    abc.Iterable: list,
    abc.Collection: list,
    abc.Sequence: list,
    abc.MutableSequence: list,
    abc.Set: frozenset,
    abc.MutableSet: set,
    abc.Mapping: dict,
    abc.MutableMapping: dict,
}

_TEXT_TYPES = (str, bytes, bytearray, memoryview)


class TypeRef(Generic[T]):
    """A type reference that can be passed around as a value.

    Both ``TypeRef[list[Zone]]`` and ``TypeRef(list[Zone])`` resolve to
    ``list[Zone]``.
    """

    __slots__ = ('type',)

    def __init__(self, tp: Any = Any) -> None:
        self.type = tp

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TypeRef):
            return self.type == other.type
        return NotImplemented

    def __hash__(self) -> int:
        return hash((TypeRef, self.type))

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.type!r})'


class ResolvedType(msgspec.Struct, frozen=True):
    """A declared type broken down into its origin class and parameters."""

    kind: str
    raw: Any
    origin: Any = Any
    args: tuple[ResolvedType, ...] = ()

    @property
    def is_any(self) -> bool:
        return self.kind == ANY_KIND

    @property
    def cls(self) -> type | None:
        """The origin when it is a real class, else None."""
        return self.origin if isinstance(self.origin, type) else None

    @property
    def nullable(self) -> bool:
        if self.kind == ANY_KIND:
            return True
        if self.kind == UNION_KIND:
            return any(arg.origin is type(None) for arg in self.args)
        return self.origin is type(None)

    @property
    def content_type(self) -> ResolvedType:
        """Element type of a collection, value type of a mapping."""
        if self.kind == MAPPING_KIND:
            return self.args[1]
        if self.kind in (SEQUENCE_KIND, SET_KIND) and self.args:
            return self.args[0]
        return ANY

    @property
    def key_type(self) -> ResolvedType:
        return self.args[0] if self.kind == MAPPING_KIND else ANY

    def element_type(self, index: int) -> ResolvedType:
        """Type of the item at *index* of a collection."""
        if self.kind == TUPLE_KIND:
            return self.args[index] if index < len(self.args) else ANY
        return self.content_type

    def build(self, items: Any) -> Any:
        """Build the concrete container for *items*."""
        cls = _ABSTRACT_CONCRETE.get(self.origin, self.origin)
        if self.kind == MAPPING_KIND:
            if cls is dict:
                return dict(items)
            # mapping subclasses are built empty, then filled
            inst = cls()
            inst.update(items)
            return inst
        if cls is list:
            return list(items)
        return cls(items)


ANY = ResolvedType(ANY_KIND, Any)


def resolve(declared: Any) -> ResolvedType:
    """Resolve *declared* into a `ResolvedType`.

    ``None`` stands for an undeclared type and resolves like `Any`.
    """
    if declared is None or declared is Any or declared is object:
        return ANY
    if isinstance(declared, ResolvedType):
        return declared
    if isinstance(declared, TypeRef):
        return resolve(declared.type)
    if isinstance(declared, TypeVar):
        bound = declared.__bound__
        return resolve(bound) if bound is not None else ANY
    if isinstance(declared, str):
        raise TypeError(f'cannot resolve forward reference: {declared!r}')

    origin = typing.get_origin(declared)
    args = typing.get_args(declared)

    if origin is TypeRef:
        return resolve(args[0] if args else Any)
    if origin is typing.Annotated:
        inner = resolve(args[0])
        if inner.kind == CLASS_KIND:
            # keep the metadata, msgspec.convert enforces constraints on leaves
            return ResolvedType(CLASS_KIND, declared, inner.origin)
        return inner
    if origin is typing.Union or origin is types.UnionType:
        return ResolvedType(UNION_KIND, declared, typing.Union, tuple(map(resolve, args)))
    if origin is typing.Literal:
        return ResolvedType(CLASS_KIND, declared, typing.Literal)
    if origin is None:
        origin = declared
    if not isinstance(origin, type):
        # NewType, Final and friends are left to msgspec
        return ResolvedType(CLASS_KIND, declared, origin)

    if issubclass(origin, _TEXT_TYPES) or issubclass(origin, msgspec.Struct):
        return ResolvedType(CLASS_KIND, declared, origin)
    if issubclass(origin, tuple) and not hasattr(origin, '_fields'):
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            return ResolvedType(SEQUENCE_KIND, declared, origin, (resolve(args[0]) if args else ANY,))
        return ResolvedType(TUPLE_KIND, declared, origin, tuple(map(resolve, args)))
    if issubclass(origin, abc.Mapping):
        key_type, value_type = args if len(args) == 2 else (Any, Any)
        return ResolvedType(MAPPING_KIND, declared, origin, (resolve(key_type), resolve(value_type)))
    if issubclass(origin, abc.Set):
        return ResolvedType(SET_KIND, declared, origin, (resolve(args[0]) if args else ANY,))
    if origin in _ABSTRACT_CONCRETE or issubclass(origin, (list, abc.MutableSequence)):
        return ResolvedType(SEQUENCE_KIND, declared, origin, (resolve(args[0]) if args else ANY,))
    return ResolvedType(CLASS_KIND, declared, origin)


def empty_value_of(declared: Any, empty_collections: bool = False) -> Any:
    """Value used for absent bodies: empty for byte sequences, else None.

    With *empty_collections*, sequences, sets and mappings are built empty too.
    """
    rtype = resolve(declared)
    if rtype.origin is bytes:
        return b''
    if rtype.origin is bytearray:
        return bytearray()
    if empty_collections and rtype.kind in (SEQUENCE_KIND, SET_KIND, MAPPING_KIND):
        return rtype.build(())
    return None
