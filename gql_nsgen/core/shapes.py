"""Structural shape-matching rules.

The generator recognises pagination wrappers and model mutations by naming and
field conventions rather than schema annotations. All of those rules live here
so they can be tested on their own:

Connection
    An object type with an ``edges`` field typed as a list of object type E,
    where E has a ``node`` field naming an object or interface type. If the
    connection also has a ``pageInfo`` field naming an object type, that type
    is its page-info type.

Cursor support
    The page-info type has ``hasNextPage`` and ``endCursor`` fields and the
    edge type has a ``cursor`` field.

Model mutation
    For model type ``T`` and kind ``Create``, a mutation field named
    ``TCreate`` or ``createT``; likewise for the other kinds.
"""

from typing import Mapping

from .ir import ConnectionShape, Field, ObjectType, SchemaModel

EDGES_FIELD = "edges"
NODE_FIELD = "node"
CURSOR_FIELD = "cursor"
PAGE_INFO_FIELD = "pageInfo"
HAS_NEXT_FIELD = "hasNextPage"
END_CURSOR_FIELD = "endCursor"

ID_ARGUMENTS = ("id", "ids")
DATA_ARGUMENTS = ("data", "input")
PAYLOAD_OBJECT_FIELD = "object"
PAYLOAD_OK_FIELD = "ok"


def detect_connection(
    obj: ObjectType,
    objects: Mapping[str, ObjectType],
    interfaces: Mapping[str, ObjectType],
) -> ConnectionShape | None:
    """Return the connection shape of ``obj``, or None if it is not one."""
    edges = obj.field(EDGES_FIELD)
    if edges is None or not edges.type.is_list:
        return None
    edge = objects.get(edges.type.named_type)
    if edge is None:
        return None
    node = edge.field(NODE_FIELD)
    if node is None or node.type.is_list:
        return None
    node_type = node.type.named_type
    if node_type not in objects and node_type not in interfaces:
        return None

    cursor = edge.field(CURSOR_FIELD)
    page_info_type = page_info_field = has_next = end_cursor = None
    page_info = obj.field(PAGE_INFO_FIELD)
    if page_info is not None and page_info.type.named_type in objects:
        page_info_type = page_info.type.named_type
        page_info_field = page_info.name
        info = objects[page_info_type]
        has_next = HAS_NEXT_FIELD if info.field(HAS_NEXT_FIELD) else None
        end_cursor = END_CURSOR_FIELD if info.field(END_CURSOR_FIELD) else None

    return ConnectionShape(
        name=obj.name,
        edge_type=edge.name,
        node_type=node_type,
        edges_field=EDGES_FIELD,
        node_field=NODE_FIELD,
        edge_cursor_field=cursor.name if cursor else None,
        page_info_type=page_info_type,
        page_info_field=page_info_field,
        has_next_field=has_next,
        end_cursor_field=end_cursor,
    )


def wrapper_types(shape: ConnectionShape) -> set[str]:
    """Names of every structural type a connection is built from."""
    names = {shape.name, shape.edge_type}
    if shape.page_info_type:
        names.add(shape.page_info_type)
    return names


def find_list_query(schema: SchemaModel, type_name: str) -> Field | None:
    """First query field returning a connection over ``type_name``."""
    for query in schema.query_fields:
        shape = schema.connections.get(query.type.named_type)
        if shape is not None and shape.node_type == type_name:
            return query
    return None


def id_argument(query: Field):
    """The identifier-keyed filter argument of a list query, if any."""
    for name in ID_ARGUMENTS:
        arg = query.argument(name)
        if arg is not None:
            return arg
    return None


def mutation_names(type_name: str, kind: str) -> tuple[str, str]:
    """Candidate mutation field names for a model and an operation kind.

    >>> mutation_names("ProcurementContract", "Create")
    ('ProcurementContractCreate', 'createProcurementContract')
    """
    return f"{type_name}{kind}", f"{kind.lower()}{type_name}"


def find_mutation(schema: SchemaModel, type_name: str, kind: str) -> Field | None:
    for name in mutation_names(type_name, kind):
        mutation = schema.mutation_field(name)
        if mutation is not None:
            return mutation
    return None


def payload_object_field(schema: SchemaModel, return_type: str, type_name: str) -> str | None:
    """Field of a mutation payload that carries the affected object.

    Returns an empty string when the mutation returns the object itself and
    None when no such field exists.
    """
    if return_type == type_name:
        return ""
    payload = schema.object_types.get(return_type)
    if payload is None:
        return None
    preferred = payload.field(PAYLOAD_OBJECT_FIELD)
    if preferred is not None and preferred.type.named_type == type_name:
        return preferred.name
    for candidate in payload.fields:
        if candidate.type.named_type == type_name and not candidate.type.is_list:
            return candidate.name
    return None


def payload_ok_field(schema: SchemaModel, return_type: str) -> str | None:
    """Field of a delete payload reporting success.

    Returns an empty string when the mutation returns a Boolean directly.
    """
    if return_type == "Boolean":
        return ""
    payload = schema.object_types.get(return_type)
    if payload is not None and payload.field(PAYLOAD_OK_FIELD) is not None:
        return PAYLOAD_OK_FIELD
    return None
