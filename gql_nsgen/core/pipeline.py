"""End-to-end generation: schema text in, client package out.

    text -> SchemaParser -> SchemaModel -> group_models -> AccessorGenerator
         -> DescriptorTree -> CodeGenerator -> files

Each run builds its own SchemaModel; nothing is cached between runs.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .accessors import AccessorGenerator, DescriptorTree
from .errors import GenerationWarning
from .generator import DEFAULT_PAGE_SIZE, CodeGenerator
from .grouping import group_models
from .hooks import AddHeaderHook, HookRunner
from .parser import parse_schema
from .scalars import ScalarRegistry
from .tokens import python_identifier, snake_case

logger = logging.getLogger(__name__)

RUNTIME_DISTRIBUTION = "gql-nsgen"


class GenerationOptions(BaseModel):
    """Options for one generation run."""

    model_config = ConfigDict(extra="forbid")

    output_dir: Path
    package_name: str = "generated_client"
    project_name: Optional[str] = None
    runtime_path: Optional[Path] = None
    template_dir: Optional[Path] = None
    header: Optional[str] = None
    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)

    @field_validator("package_name")
    @classmethod
    def _normalise_package_name(cls, value: str) -> str:
        return python_identifier(snake_case(value))

    @property
    def runtime_requirement(self) -> str:
        """Requirement on the runtime library for the generated project."""
        if self.runtime_path is not None:
            return f"{RUNTIME_DISTRIBUTION} @ {self.runtime_path.resolve().as_uri()}"
        return RUNTIME_DISTRIBUTION


@dataclass
class GenerationReport:
    """Outcome of a successful run."""
    output_dir: Path
    files: list[str] = field(default_factory=list)
    namespaces: int = 0
    models: int = 0
    warnings: list[GenerationWarning] = field(default_factory=list)


def build_tree(schema_text: str, source: str = "<schema>") -> DescriptorTree:
    """Parse, group and derive accessors without rendering anything."""
    schema = parse_schema(schema_text, source)
    groups = group_models(schema)
    return AccessorGenerator(schema).build(groups)


def generate_client(
    schema_text: str,
    options: GenerationOptions,
    source: str = "<schema>",
    scalars: Optional[ScalarRegistry] = None,
) -> GenerationReport:
    """Generate a client package from schema text.

    Raises:
        SchemaError: The schema cannot be parsed or resolved; nothing is written
        EmitError: Rendering or writing failed; no partial output is left
    """
    tree = build_tree(schema_text, source)

    hooks = HookRunner()
    if options.header:
        hooks.add_post_hook(AddHeaderHook(options.header))

    generator = CodeGenerator(
        tree,
        str(options.output_dir),
        options.package_name,
        project_name=options.project_name,
        runtime_requirement=options.runtime_requirement,
        template_dir=str(options.template_dir) if options.template_dir else None,
        hooks=hooks,
        scalars=scalars,
        default_page_size=options.default_page_size,
    )
    files = generator.generate()

    report = GenerationReport(
        output_dir=options.output_dir,
        files=files,
        namespaces=sum(1 for g in tree.namespaces.values() if any(m.operations for m in g.models)),
        models=sum(1 for m in tree.models() if m.operations),
        warnings=list(tree.warnings),
    )
    logger.info(
        "Generated %d namespaces, %d models, %d warnings",
        report.namespaces,
        report.models,
        len(report.warnings),
    )
    return report
