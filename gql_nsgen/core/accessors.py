"""Accessor descriptors for grouped models.

For every model the generator derives a closed set of operations:

- LIST: the first query field returning a connection over the model; its
  parameters mirror the query arguments in declared order and nullability.
- GET_BY_ID: alongside LIST when the query takes an ``id``/``ids`` argument.
- PAGINATE: whenever LIST exists (see :mod:`gql_nsgen.core.pagination`).
- CREATE / UPDATE / UPSERT / DELETE: when a mutation named after the model
  exists and its input and return shapes can be mapped.

A mutation that matches by name but cannot be mapped is skipped with a
GenerationWarning; generation carries on for everything else.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from .errors import GenerationWarning
from .grouping import ModelEntry, NamespaceGroup
from .ir import Field, InputValue, SchemaModel, TypeRef
from .pagination import PaginatorDescriptor, build_paginator
from .shapes import (
    DATA_ARGUMENTS,
    find_list_query,
    find_mutation,
    id_argument,
    payload_object_field,
    payload_ok_field,
)

logger = logging.getLogger(__name__)


class OperationKind(Enum):
    LIST = "list"
    GET_BY_ID = "get_by_id"
    PAGINATE = "paginate"
    CREATE = "create"
    UPDATE = "update"
    UPSERT = "upsert"
    DELETE = "delete"

    @property
    def is_mutation(self) -> bool:
        return self in MUTATION_KINDS

    @property
    def suffix(self) -> str:
        """Mutation name suffix, e.g. ``Create``."""
        return self.value.capitalize()


MUTATION_KINDS = (
    OperationKind.CREATE,
    OperationKind.UPDATE,
    OperationKind.UPSERT,
    OperationKind.DELETE,
)


@dataclass(frozen=True)
class Parameter:
    """One parameter of a generated accessor.

    ``name`` is the GraphQL argument or input field name; the emitter derives
    the Python name from it.
    """
    name: str
    type: TypeRef
    required: bool = False
    is_branch: bool = False


REQUEST_BRANCH = Parameter("request_branch", TypeRef.named("String"), is_branch=True)


@dataclass(frozen=True)
class ListPayload:
    connection: str


@dataclass(frozen=True)
class LookupPayload:
    id_argument: str
    id_is_list: bool


@dataclass(frozen=True)
class PagePayload:
    paginator: PaginatorDescriptor


@dataclass(frozen=True)
class MutationPayload:
    data_argument: str
    input_type: str
    # Payload field holding the object ("" when returned directly); for
    # DELETE the field holding the success flag
    result_field: str


@dataclass(frozen=True)
class OperationDescriptor:
    """A single generated accessor."""
    kind: OperationKind
    field: str  # root query or mutation field the accessor calls
    parameters: tuple[Parameter, ...]
    return_type: str
    payload: ListPayload | LookupPayload | PagePayload | MutationPayload

    @property
    def filter_parameters(self) -> tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if not p.is_branch)


@dataclass
class DescriptorTree:
    """Everything the emitter needs for one generation run."""
    schema: SchemaModel
    namespaces: dict[str, NamespaceGroup]
    warnings: list[GenerationWarning] = field(default_factory=list)

    def models(self):
        for group in self.namespaces.values():
            yield from group.models


def _input_parameters(values: tuple[InputValue, ...]) -> tuple[Parameter, ...]:
    return tuple(Parameter(v.name, v.type, required=v.is_required) for v in values)


class AccessorGenerator:
    """Builds operation descriptors for grouped models."""

    def __init__(self, schema: SchemaModel):
        self.schema = schema
        self.warnings: list[GenerationWarning] = []

    def build(self, groups: dict[str, NamespaceGroup]) -> DescriptorTree:
        """Return a descriptor tree with operations attached to every model."""
        namespaces = {}
        for key, group in groups.items():
            models = [replace(entry, operations=self.operations_for(entry)) for entry in group.models]
            namespaces[key] = NamespaceGroup(key=group.key, label=group.label, models=models)
        return DescriptorTree(schema=self.schema, namespaces=namespaces, warnings=list(self.warnings))

    def operations_for(self, entry: ModelEntry) -> tuple[OperationDescriptor, ...]:
        operations = list(self._query_operations(entry))
        for kind in MUTATION_KINDS:
            op = self._mutation_operation(entry, kind)
            if op is not None:
                operations.append(op)
        return tuple(operations)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def _query_operations(self, entry: ModelEntry):
        query = find_list_query(self.schema, entry.type_name)
        if query is None:
            return
        shape = self.schema.connections[query.type.named_type]
        filters = _input_parameters(query.arguments)

        yield OperationDescriptor(
            kind=OperationKind.LIST,
            field=query.name,
            parameters=filters + (REQUEST_BRANCH,),
            return_type=entry.type_name,
            payload=ListPayload(connection=shape.name),
        )

        lookup = self._lookup(query)
        if lookup is not None:
            yield lookup

        paginator = build_paginator(query, shape)
        controlled = set(paginator.control_arguments)
        yield OperationDescriptor(
            kind=OperationKind.PAGINATE,
            field=query.name,
            parameters=tuple(p for p in filters if p.name not in controlled) + (REQUEST_BRANCH,),
            return_type=entry.type_name,
            payload=PagePayload(paginator=paginator),
        )

    def _lookup(self, query: Field) -> OperationDescriptor | None:
        arg = id_argument(query)
        if arg is None:
            return None
        if any(other.is_required for other in query.arguments if other.name != arg.name):
            return None
        element = arg.type.nullable
        if element.is_list:
            element = element.of_type.nullable
        return OperationDescriptor(
            kind=OperationKind.GET_BY_ID,
            field=query.name,
            parameters=(Parameter("id", element, required=True), REQUEST_BRANCH),
            return_type=self.schema.connections[query.type.named_type].node_type,
            payload=LookupPayload(id_argument=arg.name, id_is_list=arg.type.is_list),
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _mutation_operation(self, entry: ModelEntry, kind: OperationKind) -> OperationDescriptor | None:
        mutation = find_mutation(self.schema, entry.type_name, kind.suffix)
        if mutation is None:
            return None

        data = next((mutation.argument(name) for name in DATA_ARGUMENTS if mutation.argument(name)), None)
        if data is None or data.type.named_type not in self.schema.input_types:
            return self._skip(entry, mutation, "no input-object argument named 'data' or 'input'")
        if data.type.is_list:
            return self._skip(entry, mutation, f"input argument '{data.name}' is a list")
        for arg in mutation.arguments:
            if arg.name != data.name and arg.is_required:
                return self._skip(entry, mutation, f"unsupported required argument '{arg.name}'")

        return_type = mutation.type.named_type
        if kind is OperationKind.DELETE:
            result_field = payload_ok_field(self.schema, return_type)
            if result_field is None:
                return self._skip(entry, mutation, f"return type '{return_type}' has no 'ok' flag")
        else:
            result_field = payload_object_field(self.schema, return_type, entry.type_name)
            if result_field is None:
                return self._skip(
                    entry, mutation, f"return type '{return_type}' does not carry '{entry.type_name}'"
                )

        input_type = self.schema.input_types[data.type.named_type]
        return OperationDescriptor(
            kind=kind,
            field=mutation.name,
            parameters=_input_parameters(input_type.fields) + (REQUEST_BRANCH,),
            return_type="Boolean" if kind is OperationKind.DELETE else entry.type_name,
            payload=MutationPayload(
                data_argument=data.name,
                input_type=input_type.name,
                result_field=result_field,
            ),
        )

    def _skip(self, entry: ModelEntry, mutation: Field, reason: str) -> None:
        warning = GenerationWarning(
            namespace=entry.namespace,
            model=entry.name,
            mutation=mutation.name,
            reason=reason,
        )
        logger.warning("%s", warning)
        self.warnings.append(warning)
        return None
