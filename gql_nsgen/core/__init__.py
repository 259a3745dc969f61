"""Core modules for GraphQL client generation."""

from .accessors import (
    AccessorGenerator,
    DescriptorTree,
    OperationDescriptor,
    OperationKind,
    Parameter,
)
from .errors import (
    DuplicateFieldError,
    DuplicateTypeError,
    EmitError,
    GenerationWarning,
    InvalidGeneratedCodeError,
    NamespaceCollisionError,
    NsgenError,
    OutputWriteError,
    SchemaError,
    SchemaLoadError,
    SchemaSyntaxError,
    UnnamableIdentifierError,
    UnresolvedReferenceError,
)
from .generator import CodeGenerator
from .grouping import ModelEntry, NamespaceGroup, group_models
from .hooks import AddHeaderHook, HookRunner, PostGenerateHook
from .ir import (
    ConnectionShape,
    EnumType,
    Field,
    InputType,
    InputValue,
    ObjectType,
    SchemaModel,
    TypeRef,
)
from .loader import SchemaSource, fetch_schema, load_schema, load_schema_file
from .pagination import PaginationMode, PaginatorDescriptor, build_paginator
from .parser import SchemaParser, parse_schema
from .pipeline import GenerationOptions, GenerationReport, build_tree, generate_client
from .query_builder import QueryBuilder
from .scalars import ScalarHandler, ScalarRegistry
from .tokens import split_identifier, tokenize

__all__ = [
    # IR types
    "ConnectionShape",
    "EnumType",
    "Field",
    "InputType",
    "InputValue",
    "ObjectType",
    "SchemaModel",
    "TypeRef",
    # Parser
    "SchemaParser",
    "parse_schema",
    # Tokens and grouping
    "split_identifier",
    "tokenize",
    "ModelEntry",
    "NamespaceGroup",
    "group_models",
    # Accessors and pagination
    "AccessorGenerator",
    "DescriptorTree",
    "OperationDescriptor",
    "OperationKind",
    "Parameter",
    "PaginationMode",
    "PaginatorDescriptor",
    "build_paginator",
    # Emission
    "QueryBuilder",
    "CodeGenerator",
    "ScalarHandler",
    "ScalarRegistry",
    "AddHeaderHook",
    "HookRunner",
    "PostGenerateHook",
    # Pipeline
    "GenerationOptions",
    "GenerationReport",
    "build_tree",
    "generate_client",
    "SchemaSource",
    "fetch_schema",
    "load_schema",
    "load_schema_file",
    # Errors
    "NsgenError",
    "SchemaError",
    "SchemaLoadError",
    "SchemaSyntaxError",
    "DuplicateTypeError",
    "DuplicateFieldError",
    "UnresolvedReferenceError",
    "UnnamableIdentifierError",
    "EmitError",
    "NamespaceCollisionError",
    "InvalidGeneratedCodeError",
    "OutputWriteError",
    "GenerationWarning",
]
