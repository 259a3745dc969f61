"""GraphQL schema parser using graphql-core.

Parses schema definition text and produces a fully resolved SchemaModel.
Duplicate definitions and references to undeclared types are fatal.
"""

import logging
from dataclasses import replace

from graphql import (
    EnumTypeDefinitionNode,
    GraphQLSyntaxError,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    OperationType,
    ScalarTypeDefinitionNode,
    SchemaDefinitionNode,
    TypeNode,
    UnionTypeDefinitionNode,
    parse,
    print_ast,
)

from .errors import (
    DuplicateFieldError,
    DuplicateTypeError,
    SchemaSyntaxError,
    UnresolvedReferenceError,
)
from .ir import (
    BUILTIN_SCALARS,
    EnumType,
    Field,
    InputType,
    InputValue,
    ObjectType,
    SchemaModel,
    TypeRef,
    frozen_mapping,
)
from .shapes import detect_connection, wrapper_types

logger = logging.getLogger(__name__)


def _description(node) -> str | None:
    return node.description.value if getattr(node, "description", None) else None


class SchemaParser:
    """Parses GraphQL schema text into a SchemaModel.

    A parser instance is scoped to one generation run: each call to
    :meth:`parse` starts from an empty state.
    """

    def __init__(self, source: str = "<schema>"):
        self.source = source
        self._reset()

    def _reset(self):
        self._declared: set[str] = set()
        self._objects: dict[str, ObjectType] = {}
        self._interfaces: dict[str, ObjectType] = {}
        self._inputs: dict[str, InputType] = {}
        self._enums: dict[str, EnumType] = {}
        self._scalars: list[str] = []
        self._unions: dict[str, tuple[str, ...]] = {}
        self._extensions: list = []
        self._query_type = "Query"
        self._mutation_type = "Mutation"
        self._subscription_type = "Subscription"

    def parse(self, text: str) -> SchemaModel:
        """Parse schema text and return the resolved model."""
        self._reset()
        try:
            document = parse(text, no_location=True)
        except GraphQLSyntaxError as e:
            raise SchemaSyntaxError(self.source, e) from e

        for definition in document.definitions:
            self._process_definition(definition)
        for extension in self._extensions:
            self._merge_extension(extension)

        self._check_references()
        model = self._build_model()
        logger.debug(
            "Parsed %s: %d object types, %d inputs, %d enums, %d queries, %d mutations",
            self.source,
            len(model.object_types),
            len(model.input_types),
            len(model.enum_types),
            len(model.query_fields),
            len(model.mutation_fields),
        )
        return model

    # -------------------------------------------------------------------------
    # Definitions
    # -------------------------------------------------------------------------

    def _process_definition(self, definition):
        if isinstance(definition, SchemaDefinitionNode):
            self._process_schema_definition(definition)
        elif isinstance(definition, ScalarTypeDefinitionNode):
            name = definition.name.value
            if name in BUILTIN_SCALARS:
                return
            self._declare(name)
            self._scalars.append(name)
        elif isinstance(definition, EnumTypeDefinitionNode):
            name = definition.name.value
            self._declare(name)
            self._enums[name] = EnumType(
                name=name,
                values=tuple(v.name.value for v in definition.values or ()),
                description=_description(definition),
            )
        elif isinstance(definition, InterfaceTypeDefinitionNode):
            name = definition.name.value
            self._declare(name)
            self._interfaces[name] = self._object_type(definition, is_interface=True)
        elif isinstance(definition, ObjectTypeDefinitionNode):
            name = definition.name.value
            self._declare(name)
            self._objects[name] = self._object_type(definition)
        elif isinstance(definition, InputObjectTypeDefinitionNode):
            name = definition.name.value
            self._declare(name)
            self._inputs[name] = InputType(
                name=name,
                fields=self._input_values(name, definition.fields),
                description=_description(definition),
            )
        elif isinstance(definition, UnionTypeDefinitionNode):
            name = definition.name.value
            self._declare(name)
            self._unions[name] = tuple(t.name.value for t in definition.types or ())
        elif isinstance(
            definition,
            (ObjectTypeExtensionNode, InterfaceTypeExtensionNode, InputObjectTypeExtensionNode),
        ):
            # Applied once every base definition is known
            self._extensions.append(definition)

    def _process_schema_definition(self, node: SchemaDefinitionNode):
        for op in node.operation_types:
            name = op.type.name.value
            if op.operation == OperationType.QUERY:
                self._query_type = name
            elif op.operation == OperationType.MUTATION:
                self._mutation_type = name
            else:
                self._subscription_type = name

    def _declare(self, name: str):
        if name in self._declared:
            raise DuplicateTypeError(name)
        self._declared.add(name)

    def _object_type(self, node, is_interface: bool = False) -> ObjectType:
        name = node.name.value
        return ObjectType(
            name=name,
            fields=self._fields(name, node.fields),
            interfaces=tuple(i.name.value for i in node.interfaces or ()),
            description=_description(node),
            is_interface=is_interface,
        )

    def _fields(self, type_name: str, nodes, existing=()) -> tuple[Field, ...]:
        fields = list(existing)
        seen = {f.name for f in fields}
        for node in nodes or ():
            name = node.name.value
            if name in seen:
                raise DuplicateFieldError(type_name, name)
            seen.add(name)
            fields.append(
                Field(
                    name=name,
                    type=self._type_ref(node.type),
                    arguments=self._input_values(f"{type_name}.{name}", node.arguments),
                    description=_description(node),
                )
            )
        return tuple(fields)

    def _input_values(self, owner: str, nodes, existing=()) -> tuple[InputValue, ...]:
        values = list(existing)
        seen = {v.name for v in values}
        for node in nodes or ():
            name = node.name.value
            if name in seen:
                raise DuplicateFieldError(owner, name)
            seen.add(name)
            values.append(
                InputValue(
                    name=name,
                    type=self._type_ref(node.type),
                    default_value=print_ast(node.default_value) if node.default_value else None,
                    description=_description(node),
                )
            )
        return tuple(values)

    def _merge_extension(self, node):
        """Merge an ``extend`` definition into its base type."""
        name = node.name.value
        if isinstance(node, InputObjectTypeExtensionNode):
            base = self._inputs.get(name)
            if base is None:
                raise UnresolvedReferenceError(f"extend input {name}", name)
            self._inputs[name] = replace(
                base, fields=self._input_values(name, node.fields, base.fields)
            )
            return

        store = self._interfaces if isinstance(node, InterfaceTypeExtensionNode) else self._objects
        base = store.get(name)
        if base is None:
            raise UnresolvedReferenceError(f"extend type {name}", name)
        interfaces = base.interfaces + tuple(
            i.name.value for i in node.interfaces or () if i.name.value not in base.interfaces
        )
        store[name] = replace(
            base,
            fields=self._fields(name, node.fields, base.fields),
            interfaces=interfaces,
        )

    @staticmethod
    def _type_ref(type_node: TypeNode) -> TypeRef:
        """Convert a graphql-core type node into a TypeRef."""
        if isinstance(type_node, NonNullTypeNode):
            return TypeRef.non_null(SchemaParser._type_ref(type_node.type))
        if isinstance(type_node, ListTypeNode):
            return TypeRef.list_of(SchemaParser._type_ref(type_node.type))
        assert isinstance(type_node, NamedTypeNode), f"Expected NamedTypeNode, got {type(type_node)}"
        return TypeRef.named(type_node.name.value)

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def _is_known(self, name: str) -> bool:
        return name in BUILTIN_SCALARS or name in self._declared

    def _require(self, from_: str, name: str):
        if not self._is_known(name):
            raise UnresolvedReferenceError(from_, name)

    def _check_references(self):
        """Every reference must name a declared type or a built-in scalar."""
        for store in (self._objects, self._interfaces):
            for obj in store.values():
                for interface in obj.interfaces:
                    if interface not in self._interfaces:
                        raise UnresolvedReferenceError(obj.name, interface)
                for f in obj.fields:
                    self._require(f"{obj.name}.{f.name}", f.type.named_type)
                    for arg in f.arguments:
                        self._require(f"{obj.name}.{f.name}({arg.name})", arg.type.named_type)
        for input_type in self._inputs.values():
            for value in input_type.fields:
                self._require(f"{input_type.name}.{value.name}", value.type.named_type)
        for union, members in self._unions.items():
            for member in members:
                if member not in self._objects:
                    raise UnresolvedReferenceError(union, member)
        if self._query_type not in self._objects and self._query_type != "Query":
            raise UnresolvedReferenceError("schema.query", self._query_type)
        if self._mutation_type not in self._objects and self._mutation_type != "Mutation":
            raise UnresolvedReferenceError("schema.mutation", self._mutation_type)

    def _build_model(self) -> SchemaModel:
        roots = {self._query_type, self._mutation_type, self._subscription_type}
        objects = {name: obj for name, obj in self._objects.items() if name not in roots}
        query = self._objects.get(self._query_type)
        mutation = self._objects.get(self._mutation_type)
        query_fields = query.fields if query else ()

        connections = {}
        wrappers: set[str] = set()
        for obj in objects.values():
            shape = detect_connection(obj, objects, self._interfaces)
            if shape is not None:
                connections[obj.name] = shape
                wrappers |= wrapper_types(shape)

        filterable = {
            connections[q.type.named_type].node_type
            for q in query_fields
            if q.arguments and q.type.named_type in connections
        }
        objects = {
            name: replace(
                obj,
                is_connection=name in wrappers,
                is_filterable=name in filterable,
            )
            for name, obj in objects.items()
        }

        return SchemaModel(
            object_types=frozen_mapping(objects),
            interface_types=frozen_mapping(self._interfaces),
            input_types=frozen_mapping(self._inputs),
            enum_types=frozen_mapping(self._enums),
            scalar_types=tuple(self._scalars),
            union_types=frozen_mapping(self._unions),
            connections=frozen_mapping(connections),
            query_fields=query_fields,
            mutation_fields=mutation.fields if mutation else (),
            query_type=self._query_type,
            mutation_type=self._mutation_type if mutation else None,
        )


def parse_schema(text: str, source: str = "<schema>") -> SchemaModel:
    """Parse schema text into a fresh SchemaModel."""
    return SchemaParser(source).parse(text)
