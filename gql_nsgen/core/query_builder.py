"""Query builder for generated accessors.

Constructs the GraphQL query and mutation documents embedded in generated
namespace modules from operation descriptors, and the per-root-field
documents of the full-surface client.
"""

from .accessors import (
    ListPayload,
    LookupPayload,
    MutationPayload,
    OperationDescriptor,
    OperationKind,
    PagePayload,
)
from .ir import Field, InputValue, SchemaModel
from .pagination import PaginationMode
from .tokens import pascal_case

INDENT = "  "


class QueryBuilder:
    """Builds GraphQL document strings from operation descriptors."""

    # Object nesting below the selected root object
    MAX_DEPTH = 3

    def __init__(self, schema: SchemaModel, max_depth: int = MAX_DEPTH):
        self.schema = schema
        self.max_depth = max_depth
        self._query_cache: dict[tuple, str] = {}

    def build(self, operation: OperationDescriptor) -> str:
        """Build the document for one accessor."""
        cache_key = (operation.field, operation.kind)
        if cache_key in self._query_cache:
            return self._query_cache[cache_key]

        payload = operation.payload
        if isinstance(payload, MutationPayload):
            document = self._mutation_document(operation, payload)
        elif isinstance(payload, PagePayload):
            document = self._page_document(operation, payload)
        elif isinstance(payload, LookupPayload):
            query = self._query_field(operation.field)
            arg = query.argument(payload.id_argument)
            document = self._connection_document(operation, [arg], edge_lines=[])
        else:
            assert isinstance(payload, ListPayload)
            query = self._query_field(operation.field)
            document = self._connection_document(operation, list(query.arguments), edge_lines=[])

        self._query_cache[cache_key] = document
        return document

    def operation_name(self, operation: OperationDescriptor) -> str:
        """``ProcurementContract`` + ``list`` gives ``ProcurementContractList``."""
        if operation.kind.is_mutation:
            return pascal_case(operation.field)
        return pascal_case(operation.field) + pascal_case(operation.kind.value)

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def root_field_document(self, field: Field, is_mutation: bool = False) -> str:
        """Document calling one root field with every argument it declares.

        ``tags(first: Int)`` gives ``query Tags($first: Int) { tags(first: $first) { ... } }``.
        """
        cache_key = (field.name, "mutation" if is_mutation else "query")
        if cache_key in self._query_cache:
            return self._query_cache[cache_key]

        arguments = list(field.arguments)
        operation = "mutation" if is_mutation else "query"
        lines = [f"{operation} {pascal_case(field.name)}{self._variable_declarations(arguments)} {{"]
        head = f"{INDENT}{field.name}{self._field_arguments(arguments)}"

        return_type = field.type.named_type
        if self.schema.is_leaf(return_type):
            lines.append(head)
        elif return_type in self.schema.union_types:
            lines.append(f"{head} {{ __typename }}")
        else:
            lines.append(f"{head} {{")
            lines.extend(self.selection(return_type, 2))
            lines.append(f"{INDENT}}}")
        lines.append("}")

        document = "\n".join(lines)
        self._query_cache[cache_key] = document
        return document

    def _query_field(self, name: str) -> Field:
        return next(q for q in self.schema.query_fields if q.name == name)

    def _connection_document(
        self,
        operation: OperationDescriptor,
        arguments: list[InputValue],
        edge_lines: list[str],
        page_lines: list[str] | None = None,
    ) -> str:
        query = self._query_field(operation.field)
        shape = self.schema.connections[query.type.named_type]
        depth = 4
        lines = [f"query {self.operation_name(operation)}{self._variable_declarations(arguments)} {{"]
        lines.append(f"{INDENT}{query.name}{self._field_arguments(arguments)} {{")
        lines.extend(page_lines or [])
        lines.append(f"{INDENT * 2}{shape.edges_field} {{")
        lines.extend(edge_lines)
        lines.append(f"{INDENT * 3}{shape.node_field} {{")
        lines.extend(self.selection(shape.node_type, depth))
        lines.append(f"{INDENT * 3}}}")
        lines.append(f"{INDENT * 2}}}")
        lines.append(f"{INDENT}}}")
        lines.append("}")
        return "\n".join(lines)

    def _page_document(self, operation: OperationDescriptor, payload: PagePayload) -> str:
        paginator = payload.paginator
        query = self._query_field(operation.field)
        # Caller filters first, then the arguments driven by the paginator
        filters = [p.name for p in operation.filter_parameters]
        names = filters + [n for n in paginator.control_arguments if n not in filters]
        arguments = [query.argument(name) for name in names]

        edge_lines, page_lines = [], []
        if paginator.mode is PaginationMode.CURSOR:
            edge_lines.append(f"{INDENT * 3}{paginator.edge_cursor_field}")
            page_lines = [
                f"{INDENT * 2}{paginator.page_info_field} {{",
                f"{INDENT * 3}{paginator.has_next_field}",
                f"{INDENT * 3}{paginator.end_cursor_field}",
                f"{INDENT * 2}}}",
            ]
        return self._connection_document(operation, arguments, edge_lines, page_lines)

    def _mutation_document(self, operation: OperationDescriptor, payload: MutationPayload) -> str:
        mutation = self.schema.mutation_field(operation.field)
        arguments = list(mutation.arguments)
        lines = [f"mutation {self.operation_name(operation)}{self._variable_declarations(arguments)} {{"]
        head = f"{INDENT}{mutation.name}{self._field_arguments(arguments)}"

        return_type = mutation.type.named_type
        if self.schema.is_leaf(return_type):
            lines.append(head)
        elif payload.result_field == "":
            lines.append(f"{head} {{")
            lines.extend(self.selection(return_type, 2))
            lines.append(f"{INDENT}}}")
        else:
            lines.append(f"{head} {{")
            lines.extend(self._payload_selection(operation, payload, return_type))
            lines.append(f"{INDENT}}}")
        lines.append("}")
        return "\n".join(lines)

    def _payload_selection(
        self, operation: OperationDescriptor, payload: MutationPayload, return_type: str
    ) -> list[str]:
        indent = INDENT * 2
        payload_type = self.schema.get_composite(return_type)
        lines = []
        ok = payload_type.field("ok")
        if ok is not None and self.schema.is_leaf(ok.type.named_type):
            lines.append(f"{indent}ok")
        if operation.kind is not OperationKind.DELETE:
            lines.append(f"{indent}{payload.result_field} {{")
            lines.extend(self.selection(operation.return_type, 3))
            lines.append(f"{indent}}}")
        elif payload.result_field and payload.result_field != "ok":
            lines.append(f"{indent}{payload.result_field}")
        return lines

    def _variable_declarations(self, arguments: list[InputValue]) -> str:
        """Build ``($ids: [ID], $limit: Int! = 10, $data: ContractCreateInput!)``.

        Declared defaults are repeated on the variable, so an omitted
        variable falls back to the schema default instead of failing the
        non-null check.
        """
        if not arguments:
            return ""
        declarations = []
        for arg in arguments:
            declaration = f"${arg.name}: {arg.type}"
            if arg.default_value is not None:
                declaration += f" = {arg.default_value}"
            declarations.append(declaration)
        return "(" + ", ".join(declarations) + ")"

    def _field_arguments(self, arguments: list[InputValue]) -> str:
        if not arguments:
            return ""
        return "(" + ", ".join(f"{arg.name}: ${arg.name}" for arg in arguments) + ")"

    # -------------------------------------------------------------------------
    # Selections
    # -------------------------------------------------------------------------

    def selection(self, type_name: str, indent_level: int) -> list[str]:
        """Selection lines for every field of an object or interface type."""
        return self._build_all_fields(type_name, indent_level, depth=1, visited=frozenset())

    def _build_all_fields(
        self, type_name: str, indent_level: int, depth: int, visited: frozenset
    ) -> list[str]:
        indent = INDENT * indent_level
        type_def = self.schema.get_composite(type_name)
        if type_def is None:
            return [f"{indent}__typename"]
        visited = visited | {type_name}

        lines = []
        for field in type_def.fields:
            if field.has_required_arguments:
                continue
            nested = field.type.named_type
            if self.schema.is_leaf(nested):
                lines.append(f"{indent}{field.name}")
            elif nested in self.schema.union_types:
                lines.append(f"{indent}{field.name} {{ __typename }}")
            elif nested in visited or depth >= self.max_depth:
                lines.append(f"{indent}{field.name} {{ {self._collapsed(nested)} }}")
            else:
                lines.append(f"{indent}{field.name} {{")
                lines.extend(self._build_all_fields(nested, indent_level + 1, depth + 1, visited))
                lines.append(f"{indent}}}")
        return lines or [f"{indent}__typename"]

    def _collapsed(self, type_name: str) -> str:
        type_def = self.schema.get_composite(type_name)
        if type_def is not None and type_def.field("id") is not None:
            return "id"
        return "__typename"
