"""Code generator for grouped GraphQL clients.

Renders Jinja2 templates to produce a Python package from a descriptor tree:

    <output>/<package>/__init__.py
    <output>/<package>/models.py           enums, inputs, objects
    <output>/<package>/api/__init__.py     root ``Api`` entry point
    <output>/<package>/api/generated.py    ``GeneratedClient``: one method per root field
    <output>/<package>/api/<namespace>.py  namespace entry point + model clients
    <output>/pyproject.toml                only when a project name is set

Supports custom templates via the template_dir parameter:
    generator = CodeGenerator(tree, output_dir, template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates

Every file is rendered and validated in memory before anything touches the
output directory, and the tree is then moved into place from a staging
directory, so a failed run never leaves a half-written package behind.
"""

import ast
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from .accessors import (
    DescriptorTree,
    LookupPayload,
    MutationPayload,
    OperationDescriptor,
    OperationKind,
    PagePayload,
)
from .errors import InvalidGeneratedCodeError, NamespaceCollisionError, OutputWriteError
from .grouping import ModelEntry, NamespaceGroup
from .hooks import HookRunner
from .ir import ObjectType, SchemaModel, TypeKind, TypeRef
from .pagination import PaginationMode
from .query_builder import QueryBuilder
from .scalars import ScalarRegistry
from .tokens import join_words, pascal_case, python_identifier, snake_case

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50

# Module and ``Api`` attribute of the full-surface client
GENERATED_MODULE = "generated"

# Names generated methods use for their own parameters
RESERVED_PARAMETERS = {"self", "request_branch", "page_size"}

# Attributes of pydantic.BaseModel a generated field must not shadow
BASE_MODEL_ATTRIBUTES = {
    "construct", "copy", "dict", "fields", "from_orm", "json", "parse_file",
    "parse_obj", "parse_raw", "schema", "schema_json", "update_forward_refs",
    "validate",
}

# Builtins used unaliased in generated annotations
ANNOTATION_BUILTINS = {"str", "int", "float", "bool"}

RESERVED_ENUM_MEMBERS = {"name", "value", "mro"}


def safe_docstring(text: str) -> str:
    """Escape text for use in docstrings."""
    if not text:
        return ""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


def safe_comment(text: str) -> str:
    """Collapse text onto a single line for use as a ``#`` comment."""
    if not text:
        return ""
    text = " ".join(text.split())
    if len(text) > 120:
        text = text[:117] + "..."
    return text


def unique_name(base: str, taken: set) -> str:
    """``base``, or ``base_2``, ``base_3``... whichever is free first."""
    name = base
    counter = 2
    while name in taken:
        name = f"{base}_{counter}"
        counter += 1
    taken.add(name)
    return name


def attribute_name(graphql_name: str) -> str:
    """Python attribute name for a GraphQL field, argument or model."""
    name = python_identifier(snake_case(graphql_name))
    if name.startswith("model_") or name in BASE_MODEL_ATTRIBUTES or name in ANNOTATION_BUILTINS:
        name = f"{name}_"
    return name


# =============================================================================
# Render views
# =============================================================================


@dataclass
class ParamView:
    graphql_name: str
    name: str
    annotation: str
    required: bool


@dataclass
class MethodView:
    kind: str
    name: str
    field: str
    document_name: str
    document: str
    params: List[ParamView]
    returns: str
    model: str  # class in the generated models module
    signature: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ClientView:
    class_name: str
    type_name: str
    attribute: str
    description: str
    methods: List[MethodView]


@dataclass
class NamespaceView:
    key: str
    module: str
    class_name: str
    root: Optional[ClientView]
    clients: List[ClientView]


@dataclass
class FieldView:
    graphql_name: str
    name: str
    annotation: str
    required: bool
    description: str


@dataclass
class ModelView:
    name: str
    description: str
    fields: List[FieldView]


@dataclass
class EnumView:
    name: str
    description: str
    members: List[tuple]


class CodeGenerator:
    """Generates a Python client package from a descriptor tree.

    Available templates to override:
        - models.py.j2: enums and pydantic models
        - namespace.py.j2: one namespace module with its model clients
        - api_init.py.j2: root ``Api`` entry point
        - generated.py.j2: full-surface ``GeneratedClient``
        - package_init.py.j2: package ``__init__``
        - pyproject.toml.j2: project manifest

    Example:
        generator = CodeGenerator(
            tree,
            output_dir="./generated",
            package_name="infrahub_client",
        )
        generator.generate()
    """

    def __init__(
        self,
        tree: DescriptorTree,
        output_dir: str,
        package_name: str = "generated_client",
        *,
        project_name: Optional[str] = None,
        runtime_requirement: str = "gql-nsgen",
        template_dir: Optional[str] = None,
        hooks: Optional[HookRunner] = None,
        scalars: Optional[ScalarRegistry] = None,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """Initialize the code generator.

        Args:
            tree: Descriptor tree built by the accessor generator
            output_dir: Directory where generated code will be written
            package_name: Import name of the generated package
            project_name: Distribution name; a pyproject.toml is written when set
            runtime_requirement: Requirement string for the runtime library
            template_dir: Optional directory with custom Jinja2 templates.
                          Templates here override the built-in templates.
            hooks: Post-generation hooks applied to every file
            scalars: Custom scalar mapping
            default_page_size: Default ``page_size`` of generated paginators
        """
        self.tree = tree
        self.schema: SchemaModel = tree.schema
        self.output_dir = output_dir
        self.package_name = package_name
        self.project_name = project_name
        self.runtime_requirement = runtime_requirement
        self.template_dir = template_dir
        self.hooks = hooks or HookRunner()
        self.scalars = scalars or ScalarRegistry()
        self.default_page_size = default_page_size
        self.query_builder = QueryBuilder(self.schema)

        # Build template loader - custom templates take precedence
        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_nsgen", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters["snake_case"] = snake_case
        self.env.filters["pascal_case"] = pascal_case
        self.env.filters["safe_docstring"] = safe_docstring
        self.env.filters["safe_comment"] = safe_comment

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def generate(self) -> list[str]:
        """Render, validate and write every file; return the relative paths."""
        files = self.render()
        self.write(files)
        return list(files)

    def render(self) -> dict[str, str]:
        """Render every generated file in memory, keyed by relative path."""
        namespaces = self.namespace_views()
        package = self.package_name
        files: dict[str, str] = {}

        self._render_file(files, "package_init.py.j2", f"{package}/__init__.py", {"package": package})
        self._render_file(files, "models.py.j2", f"{package}/models.py", self._models_context())
        root_methods = self.root_field_views()
        self._render_file(
            files,
            "api_init.py.j2",
            f"{package}/api/__init__.py",
            {"namespaces": namespaces, "root_methods": root_methods},
        )
        self._render_file(
            files,
            "generated.py.j2",
            f"{package}/api/{GENERATED_MODULE}.py",
            {"methods": root_methods, "scalar_imports": self._scalar_imports()},
        )
        for namespace in namespaces:
            self._render_file(
                files,
                "namespace.py.j2",
                f"{package}/api/{namespace.module}.py",
                {
                    "namespace": namespace,
                    "scalar_imports": self._scalar_imports(),
                },
            )
        if self.project_name:
            self._render_file(
                files,
                "pyproject.toml.j2",
                "pyproject.toml",
                {
                    "project_name": self.project_name,
                    "package": package,
                    "runtime_requirement": self.runtime_requirement,
                },
            )
        return files

    def _render_file(self, files: dict, template_name: str, output_path: str, context: Dict[str, Any]):
        """Render a template, run hooks and validate Python syntax."""
        template = self.env.get_template(template_name)
        content = template.render(context)
        content = self.hooks.run_post_hooks(output_path, content)

        if output_path.endswith(".py"):
            try:
                ast.parse(content)
            except SyntaxError as e:
                raise InvalidGeneratedCodeError(output_path, e) from e
        files[output_path] = content

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def write(self, files: dict[str, str]):
        """Write rendered files through a staging directory.

        A fresh output directory is moved into place in one rename; in an
        existing one each generated top-level entry is swapped individually
        and unrelated entries are left alone. If a swap fails, the entries
        already swapped are put back.
        """
        output = Path(self.output_dir).resolve()
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=".nsgen-", dir=output.parent))
        except OSError as e:
            raise OutputWriteError(str(output), e) from e

        keep_staging = False
        try:
            build = staging / "build"
            for rel_path, content in files.items():
                path = build / rel_path
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
                logger.debug("Rendered %s", rel_path)

            if not output.exists():
                os.replace(build, output)
            else:
                swapped: list[tuple[Path, Optional[Path]]] = []
                try:
                    for entry in sorted(build.iterdir()):
                        target = output / entry.name
                        backup = None
                        if target.exists() or target.is_symlink():
                            backup = staging / f"old-{entry.name}"
                            os.replace(target, backup)
                        swapped.append((target, backup))
                        os.replace(entry, target)
                except OSError:
                    keep_staging = not self._restore(swapped)
                    raise
        except OSError as e:
            raise OutputWriteError(str(output), e) from e
        finally:
            if keep_staging:
                logger.error("Previous output could not be fully restored; it is kept in %s", staging)
            else:
                shutil.rmtree(staging, ignore_errors=True)
        logger.debug("Wrote %d files to %s", len(files), output)

    @staticmethod
    def _restore(swapped: list[tuple[Path, Optional[Path]]]) -> bool:
        """Undo entry swaps, newest first; return False if any could not be undone."""
        restored = True
        for target, backup in reversed(swapped):
            try:
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                elif target.exists() or target.is_symlink():
                    target.unlink()
                if backup is not None:
                    os.replace(backup, target)
            except OSError as e:
                logger.error("Cannot restore %s: %s", target, e)
                restored = False
        return restored

    # -------------------------------------------------------------------------
    # Type annotations
    # -------------------------------------------------------------------------

    def annotation(self, ref: TypeRef, models_prefix: str = "", optional: Optional[bool] = None) -> str:
        """Python annotation for a type reference.

        Args:
            ref: The GraphQL type reference
            models_prefix: Qualifier for generated model classes
            optional: Force (or suppress) the outer ``Optional``; defaults
                to the reference's own nullability
        """
        if optional is None:
            optional = ref.is_optional
        inner = ref.nullable
        if inner.kind is TypeKind.LIST:
            base = f"_List[{self.annotation(inner.of_type, models_prefix)}]"
        else:
            base = self._named_annotation(inner.name, models_prefix)
        return f"_Optional[{base}]" if optional else base

    def _named_annotation(self, name: str, models_prefix: str) -> str:
        schema = self.schema
        if name in schema.union_types:
            return "_Any"
        if (
            name in schema.enum_types
            or name in schema.input_types
            or name in schema.object_types
            or name in schema.interface_types
        ):
            return f"{models_prefix}{name}"
        return self.scalars.python_type(name)

    def _scalar_imports(self) -> list[str]:
        return self.scalars.imports_for(self.schema.scalar_types)

    # -------------------------------------------------------------------------
    # models.py
    # -------------------------------------------------------------------------

    def _models_context(self) -> Dict[str, Any]:
        schema = self.schema
        enums = []
        for enum in schema.enum_types.values():
            taken: set = set()
            members = []
            for value in enum.values:
                member = python_identifier(value)
                if member.lower() in RESERVED_ENUM_MEMBERS or member.startswith("_"):
                    member = f"{member.lstrip('_')}_"
                members.append((unique_name(member, taken), value))
            enums.append(EnumView(name=enum.name, description=enum.description or "", members=members))

        inputs = [
            ModelView(
                name=input_type.name,
                description=input_type.description or "",
                fields=self._field_views(
                    [(v.name, v.type, v.is_required, v.description) for v in input_type.fields]
                ),
            )
            for input_type in schema.input_types.values()
        ]
        objects = [
            self._object_view(obj)
            for obj in list(schema.interface_types.values()) + list(schema.object_types.values())
        ]
        return {
            "enums": enums,
            "inputs": inputs,
            "objects": objects,
            "scalar_imports": self._scalar_imports(),
        }

    def _object_view(self, obj: ObjectType) -> ModelView:
        # Selections are depth-limited, so every object field is optional
        return ModelView(
            name=obj.name,
            description=obj.description or "",
            fields=self._field_views([(f.name, f.type, False, f.description) for f in obj.fields]),
        )

    def _field_views(self, fields) -> List[FieldView]:
        taken: set = set()
        views = []
        for graphql_name, ref, required, description in fields:
            views.append(
                FieldView(
                    graphql_name=graphql_name,
                    name=unique_name(attribute_name(graphql_name), taken),
                    annotation=self.annotation(ref, optional=not required),
                    required=required,
                    description=description or "",
                )
            )
        return views

    # -------------------------------------------------------------------------
    # Namespace modules
    # -------------------------------------------------------------------------

    def namespace_views(self) -> List[NamespaceView]:
        """Build the render views for every namespace with operations.

        Raises:
            NamespaceCollisionError: If two generated names clash within a
                namespace module or within the root entry point
        """
        views = []
        modules: Dict[str, str] = {GENERATED_MODULE: "GeneratedClient"}
        for group in self.tree.namespaces.values():
            view = self._namespace_view(group)
            if view is None:
                continue
            if view.module in modules:
                raise NamespaceCollisionError("", view.module, modules[view.module], group.key)
            modules[view.module] = group.key
            views.append(view)
        return views

    def _namespace_view(self, group: NamespaceGroup) -> Optional[NamespaceView]:
        entries = [m for m in group.models if m.operations]
        if not entries:
            return None

        class_name = f"{join_words([group.label or group.key])}Api"
        classes: Dict[str, str] = {class_name: group.key}
        attributes: Dict[str, str] = {}

        root = None
        clients = []
        for entry in entries:
            client = self._client_view(entry)
            if client.class_name in classes:
                raise NamespaceCollisionError(
                    group.key, client.class_name, classes[client.class_name], entry.type_name
                )
            classes[client.class_name] = entry.type_name
            if entry.is_namespace_root:
                root = client
                for method in client.methods:
                    attributes[method.name] = entry.type_name
            else:
                clients.append(client)

        for client in clients:
            if client.attribute in attributes:
                raise NamespaceCollisionError(
                    group.key, client.attribute, attributes[client.attribute], client.type_name
                )
            attributes[client.attribute] = client.type_name

        return NamespaceView(
            key=group.key,
            module=python_identifier(group.key),
            class_name=class_name,
            root=root,
            clients=clients,
        )

    def _client_view(self, entry: ModelEntry) -> ClientView:
        obj = self.schema.object_types[entry.type_name]
        return ClientView(
            class_name=f"{entry.class_stem}Client",
            type_name=entry.type_name,
            attribute=attribute_name(entry.name) if entry.name else "",
            description=obj.description or "",
            methods=[self._method_view(op) for op in entry.operations],
        )

    def _param_views(self, values) -> List[ParamView]:
        """Views for ``(graphql_name, type, required)`` triples, avoiding reserved names."""
        taken = set(RESERVED_PARAMETERS)
        return [
            ParamView(
                graphql_name=graphql_name,
                name=unique_name(attribute_name(graphql_name), taken),
                annotation=self.annotation(ref, "_models.", optional=not required),
                required=required,
            )
            for graphql_name, ref, required in values
        ]

    def _method_view(self, op: OperationDescriptor) -> MethodView:
        params = self._param_views((p.name, p.type, p.required) for p in op.filter_parameters)

        payload = op.payload
        extra: Dict[str, Any] = {}
        if op.kind.is_mutation:
            returns = "bool" if op.kind is OperationKind.DELETE else f"_models.{op.return_type}"
            assert isinstance(payload, MutationPayload)
            extra.update(data_argument=payload.data_argument, result_field=payload.result_field)
        elif op.kind is OperationKind.GET_BY_ID:
            returns = f"_Optional[_models.{op.return_type}]"
            assert isinstance(payload, LookupPayload)
            extra.update(id_argument=payload.id_argument, id_is_list=payload.id_is_list)
        else:
            returns = f"_List[_models.{op.return_type}]"

        if not op.kind.is_mutation:
            query = next(q for q in self.schema.query_fields if q.name == op.field)
            shape = self.schema.connections[query.type.named_type]
            extra.update(edges_field=shape.edges_field, node_field=shape.node_field)

        if isinstance(payload, PagePayload):
            paginator = payload.paginator
            returns = f"_runtime.Paginator[_models.{op.return_type}]"
            extra.update(
                mode=paginator.mode.value,
                sends_page_size=paginator.sends_page_size,
                page_size=self.default_page_size,
                cursor_argument=paginator.cursor_argument,
                offset_argument=paginator.offset_argument,
                size_argument=paginator.size_argument,
                page_info_field=paginator.page_info_field,
                has_next_field=paginator.has_next_field,
                end_cursor_field=paginator.end_cursor_field,
                is_cursor=paginator.mode is PaginationMode.CURSOR,
            )

        return MethodView(
            kind=op.kind.value,
            name=op.kind.value,
            field=op.field,
            document_name=f"_{op.kind.value.upper()}_DOCUMENT",
            document=self.query_builder.build(op),
            params=params,
            returns=returns,
            model=op.return_type,
            signature=self._signature(
                params,
                positional=op.kind is OperationKind.GET_BY_ID,
                page_size=bool(extra.get("sends_page_size")),
            ),
            extra=extra,
        )

    def _signature(self, params: List[ParamView], positional: bool = False, page_size: bool = False) -> str:
        """Parameter list after ``def name(``; filters are keyword-only in schema order."""
        leading = ["self"]
        keyword = []
        for param in params:
            if positional:
                leading.append(f"{param.name}: {param.annotation}")
            elif param.required:
                keyword.append(f"{param.name}: {param.annotation}")
            else:
                keyword.append(f"{param.name}: {param.annotation} = None")
        if page_size:
            keyword.append(f"page_size: _Optional[int] = {self.default_page_size}")
        keyword.append("request_branch: _Optional[str] = None")
        return ", ".join(leading + ["*"] + keyword)

    # -------------------------------------------------------------------------
    # Full-surface client
    # -------------------------------------------------------------------------

    def root_field_views(self) -> List[MethodView]:
        """One ``GeneratedClient`` method per root query field, then per mutation field.

        Unlike namespace accessors these cover every root field, including
        mutations skipped with a warning and queries that return no
        connection. Results are returned as the root field's value.
        """
        roots = [(f, False) for f in self.schema.query_fields]
        roots += [(f, True) for f in self.schema.mutation_fields]
        taken: set = set()
        views = []
        for root, is_mutation in roots:
            name = unique_name(attribute_name(root.name), taken)
            params = self._param_views((arg.name, arg.type, arg.is_required) for arg in root.arguments)
            views.append(
                MethodView(
                    kind="mutation" if is_mutation else "query",
                    name=name,
                    field=root.name,
                    document_name=f"_{name.upper()}_DOCUMENT",
                    document=self.query_builder.root_field_document(root, is_mutation),
                    params=params,
                    returns=self.annotation(root.type, "_models."),
                    model=root.type.named_type,
                    signature=self._signature(params),
                )
            )
        return views
