"""Exceptions and warnings raised by the generation pipeline.

Fatal problems are exceptions deriving from NsgenError. Recoverable problems
(a mutation the generator cannot map to an accessor) are collected as
GenerationWarning records and reported once generation has finished.
"""

from dataclasses import dataclass


class NsgenError(Exception):
    """Base exception for all gql-nsgen errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# =============================================================================
# Schema errors
# =============================================================================


class SchemaError(NsgenError):
    """Base exception for schema parse and resolution failures."""


class SchemaLoadError(SchemaError):
    """The schema document could not be read or fetched."""

    def __init__(self, source: str, cause: Exception | str | None = None):
        self.source = source
        self.cause = cause
        message = f"Failed to load schema from '{source}'"
        if cause:
            message += f": {cause}"
        super().__init__(message)


class SchemaSyntaxError(SchemaError):
    """The schema document is not valid GraphQL SDL."""

    def __init__(self, source: str, cause: Exception):
        self.source = source
        self.cause = cause
        super().__init__(f"Invalid schema syntax in '{source}': {cause}")


class DuplicateTypeError(SchemaError):
    """A named type is defined more than once."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Type '{name}' is defined more than once")


class DuplicateFieldError(SchemaError):
    """A field is declared more than once on the same type."""

    def __init__(self, type_name: str, field_name: str):
        self.type_name = type_name
        self.field_name = field_name
        super().__init__(f"Field '{field_name}' is declared more than once on '{type_name}'")


class UnnamableIdentifierError(SchemaError, ValueError):
    """A schema name has no letters or digits to derive Python names from.

    GraphQL accepts names such as ``_``; no namespace, model or attribute
    can be built from them.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Identifier '{name}' contains no letters or digits")


class UnresolvedReferenceError(SchemaError):
    """A schema element refers to a type that is never declared.

    Attributes:
        from_: The referring element, e.g. ``Query.things(filter)``.
        to: The missing type name.
    """

    def __init__(self, from_: str, to: str):
        self.from_ = from_
        self.to = to
        super().__init__(f"'{from_}' references undeclared type '{to}'")


# =============================================================================
# Emit errors
# =============================================================================


class EmitError(NsgenError):
    """Base exception for failures while rendering or writing output."""


class NamespaceCollisionError(EmitError):
    """Two generated names collide inside one generated module."""

    def __init__(self, namespace: str, name: str, first: str, second: str):
        self.namespace = namespace
        self.name = name
        self.first = first
        self.second = second
        super().__init__(
            f"Name '{name}' in namespace '{namespace}' is produced by both "
            f"'{first}' and '{second}'"
        )


class InvalidGeneratedCodeError(EmitError):
    """A rendered Python file failed to parse."""

    def __init__(self, path: str, cause: SyntaxError):
        self.path = path
        self.cause = cause
        super().__init__(f"Generated invalid Python for {path}: {cause}")


class OutputWriteError(EmitError):
    """The output tree could not be written."""

    def __init__(self, path: str, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot write output to '{path}': {cause}")


# =============================================================================
# Warnings
# =============================================================================


@dataclass(frozen=True)
class GenerationWarning:
    """A mutation that could not be mapped to an accessor."""

    namespace: str
    model: str
    mutation: str
    reason: str

    def __str__(self) -> str:
        model = f"{self.namespace}.{self.model}" if self.model else self.namespace
        return f"{model}: skipped mutation '{self.mutation}' ({self.reason})"
