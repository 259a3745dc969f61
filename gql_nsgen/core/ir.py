"""Intermediate Representation (IR) for GraphQL schemas.

This module defines the immutable schema model the generation pipeline works
from. It is built once per generation run by the parser and never mutated
afterwards; every derived structure refers back into it by type name.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

BUILTIN_SCALARS = ("String", "Int", "Float", "Boolean", "ID")


class TypeKind(Enum):
    """Wrapper kinds of a type reference."""
    NAMED = "named"
    LIST = "list"
    NON_NULL = "non_null"


@dataclass(frozen=True)
class TypeRef:
    """A (possibly wrapped) reference to a named type, e.g. ``[ID!]!``."""
    kind: TypeKind
    name: str | None = None
    of_type: "TypeRef | None" = None

    @classmethod
    def named(cls, name: str) -> "TypeRef":
        return cls(TypeKind.NAMED, name=name)

    @classmethod
    def list_of(cls, inner: "TypeRef") -> "TypeRef":
        return cls(TypeKind.LIST, of_type=inner)

    @classmethod
    def non_null(cls, inner: "TypeRef") -> "TypeRef":
        return cls(TypeKind.NON_NULL, of_type=inner)

    @property
    def named_type(self) -> str:
        """The innermost type name."""
        ref = self
        while ref.of_type is not None:
            ref = ref.of_type
        return ref.name

    @property
    def is_optional(self) -> bool:
        return self.kind is not TypeKind.NON_NULL

    @property
    def nullable(self) -> "TypeRef":
        """This reference without its outer non-null wrapper."""
        return self.of_type if self.kind is TypeKind.NON_NULL else self

    @property
    def is_list(self) -> bool:
        return self.nullable.kind is TypeKind.LIST

    def __str__(self) -> str:
        if self.kind is TypeKind.NON_NULL:
            return f"{self.of_type}!"
        if self.kind is TypeKind.LIST:
            return f"[{self.of_type}]"
        return self.name


@dataclass(frozen=True)
class InputValue:
    """An argument of a field, or a field of an input object type."""
    name: str
    type: TypeRef
    default_value: str | None = None
    description: str | None = None

    @property
    def is_required(self) -> bool:
        """True if the value must be supplied (non-null without a default)."""
        return not self.type.is_optional and self.default_value is None


@dataclass(frozen=True)
class Field:
    """A field of an object or interface type, or a root operation field."""
    name: str
    type: TypeRef
    arguments: tuple[InputValue, ...] = ()
    description: str | None = None

    def argument(self, name: str) -> InputValue | None:
        return next((arg for arg in self.arguments if arg.name == name), None)

    @property
    def has_required_arguments(self) -> bool:
        return any(arg.is_required for arg in self.arguments)


@dataclass(frozen=True)
class ObjectType:
    """A GraphQL object or interface type."""
    name: str
    fields: tuple[Field, ...]
    interfaces: tuple[str, ...] = ()
    description: str | None = None
    is_interface: bool = False
    # Structural pagination wrapper (connection, edge or page-info type)
    is_connection: bool = False
    # Node type of a connection returned by a query field with arguments
    is_filterable: bool = False

    def field(self, name: str) -> Field | None:
        return next((f for f in self.fields if f.name == name), None)


@dataclass(frozen=True)
class InputType:
    """A GraphQL input object type."""
    name: str
    fields: tuple[InputValue, ...]
    description: str | None = None


@dataclass(frozen=True)
class EnumType:
    """A GraphQL enum type."""
    name: str
    values: tuple[str, ...]
    description: str | None = None


@dataclass(frozen=True)
class ConnectionShape:
    """The pagination shape discovered for one connection type."""
    name: str
    edge_type: str
    node_type: str
    edges_field: str = "edges"
    node_field: str = "node"
    edge_cursor_field: str | None = None
    page_info_type: str | None = None
    page_info_field: str | None = None
    has_next_field: str | None = None
    end_cursor_field: str | None = None

    @property
    def supports_cursor(self) -> bool:
        """True if pages and edges expose everything cursor paging needs."""
        return bool(
            self.page_info_field
            and self.has_next_field
            and self.end_cursor_field
            and self.edge_cursor_field
        )


def frozen_mapping(mapping: dict | None = None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class SchemaModel:
    """Complete, fully resolved representation of a GraphQL schema.

    Mappings preserve schema declaration order.
    """
    object_types: Mapping[str, ObjectType] = field(default_factory=frozen_mapping)
    interface_types: Mapping[str, ObjectType] = field(default_factory=frozen_mapping)
    input_types: Mapping[str, InputType] = field(default_factory=frozen_mapping)
    enum_types: Mapping[str, EnumType] = field(default_factory=frozen_mapping)
    scalar_types: tuple[str, ...] = ()
    union_types: Mapping[str, tuple[str, ...]] = field(default_factory=frozen_mapping)
    connections: Mapping[str, ConnectionShape] = field(default_factory=frozen_mapping)
    query_fields: tuple[Field, ...] = ()
    mutation_fields: tuple[Field, ...] = ()
    query_type: str = "Query"
    mutation_type: str | None = None

    @property
    def connection_types(self) -> dict[str, ObjectType]:
        """Object types recognised as connection, edge or page-info wrappers."""
        return {name: t for name, t in self.object_types.items() if t.is_connection}

    def get_composite(self, name: str) -> ObjectType | None:
        """Look up a type that has a selection set (object or interface)."""
        return self.object_types.get(name) or self.interface_types.get(name)

    def is_leaf(self, name: str) -> bool:
        """True for scalars and enums (no selection set)."""
        return name in BUILTIN_SCALARS or name in self.scalar_types or name in self.enum_types

    def mutation_field(self, name: str) -> Field | None:
        return next((f for f in self.mutation_fields if f.name == name), None)
