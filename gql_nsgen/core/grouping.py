"""Namespace grouping of object types.

Each object type is assigned to the namespace named by the first token of its
name; the remaining tokens form the model name. ``ProcurementContract`` lands
in namespace ``procurement`` as model ``contract``; ``Tag`` becomes the
namespace-root model of namespace ``tag``. Connection, edge and page-info
wrappers are not grouped.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .ir import ObjectType, SchemaModel
from .tokens import join_words, split_identifier

if TYPE_CHECKING:
    from .accessors import OperationDescriptor, OperationKind


@dataclass(frozen=True)
class ModelEntry:
    """One object type placed in a namespace."""
    namespace: str
    name: str  # snake_case model name, "" for the namespace root
    type_name: str
    words: tuple[str, ...] = ()  # original-cased tokens after the namespace
    operations: tuple["OperationDescriptor", ...] = ()

    @property
    def is_namespace_root(self) -> bool:
        return not self.name

    @property
    def class_stem(self) -> str:
        """PascalCase stem for generated class names, e.g. ``ProcurementContract``."""
        return join_words(split_identifier(self.type_name))

    def operation(self, kind: "OperationKind") -> "OperationDescriptor | None":
        return next((op for op in self.operations if op.kind is kind), None)


@dataclass
class NamespaceGroup:
    """All models sharing one namespace key, in schema declaration order."""
    key: str
    label: str = ""  # namespace token in its original casing
    models: list[ModelEntry] = field(default_factory=list)

    @property
    def root(self) -> ModelEntry | None:
        return next((m for m in self.models if m.is_namespace_root), None)

    def model(self, name: str) -> ModelEntry | None:
        return next((m for m in self.models if m.name == name), None)


def model_entry(obj: ObjectType) -> ModelEntry:
    """Place a single object type into its namespace."""
    words = split_identifier(obj.name)
    rest = words[1:]
    return ModelEntry(
        namespace=words[0].lower(),
        name="_".join(word.lower() for word in rest),
        type_name=obj.name,
        words=tuple(rest),
    )


def group_models(schema: SchemaModel) -> dict[str, NamespaceGroup]:
    """Group every non-wrapper object type by namespace.

    Returns groups keyed by namespace in sorted key order; models inside a
    group keep schema declaration order.
    """
    groups: dict[str, NamespaceGroup] = {}
    for obj in schema.object_types.values():
        if obj.is_connection:
            continue
        entry = model_entry(obj)
        group = groups.get(entry.namespace)
        if group is None:
            group = groups[entry.namespace] = NamespaceGroup(
                key=entry.namespace, label=split_identifier(obj.name)[0]
            )
        group.models.append(entry)
    return {key: groups[key] for key in sorted(groups)}
