"""Command-line interface for gql-nsgen."""

import logging
from pathlib import Path

import click
from pydantic import ValidationError

from .core.errors import NsgenError
from .core.loader import SchemaSource, load_schema
from .core.pipeline import GenerationOptions, build_tree, generate_client


def _schema_source(schema: str | None, url: str | None, token: str | None, branch: str | None) -> SchemaSource:
    try:
        return SchemaSource(path=Path(schema) if schema else None, url=url, token=token, branch=branch)
    except ValidationError as e:
        raise click.UsageError(e.errors()[0]["msg"]) from e


def _configure_logging(verbose: bool):
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


schema_options = [
    click.option(
        "--schema",
        "-s",
        type=click.Path(exists=True, dir_okay=False),
        help="Path to a GraphQL schema file.",
    ),
    click.option("--url", "-u", help="Server base URL to fetch the schema from."),
    click.option("--token", "-t", help="API token for --url."),
    click.option("--branch", "-b", help="Branch to fetch the schema from (with --url)."),
    click.option("--verbose", "-v", is_flag=True, help="Enable verbose output."),
]


def with_schema_options(func):
    for option in reversed(schema_options):
        func = option(func)
    return func


@click.group()
@click.version_option(package_name="gql-nsgen")
def main():
    """Namespace-grouped GraphQL client generator.

    Generate a typed Python client from a GraphQL schema.
    """
    pass


@main.command()
@with_schema_options
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(file_okay=False),
    help="Output directory for the generated project.",
)
@click.option("--package-name", "-n", default="generated_client", show_default=True, help="Import name of the generated package.")
@click.option("--project-name", help="Distribution name; writes a pyproject.toml when given.")
@click.option(
    "--runtime-path",
    type=click.Path(exists=True, file_okay=False),
    help="Local checkout of gql-nsgen for the generated project to depend on.",
)
@click.option(
    "--template-dir",
    type=click.Path(exists=True, file_okay=False),
    help="Directory with templates overriding the built-in ones.",
)
@click.option("--header", help="Text added as a comment at the top of every generated file.")
@click.option("--page-size", type=click.IntRange(min=1), default=50, show_default=True, help="Default page size of generated paginators.")
def generate(
    schema: str | None,
    url: str | None,
    token: str | None,
    branch: str | None,
    verbose: bool,
    output: str,
    package_name: str,
    project_name: str | None,
    runtime_path: str | None,
    template_dir: str | None,
    header: str | None,
    page_size: int,
):
    """Generate a client package from a GraphQL schema.

    Examples:

        gql-nsgen generate --schema ./schema.graphql --output ./client

        gql-nsgen generate -u http://localhost:8000 -t $TOKEN -b main -o ./client --project-name infrahub-client
    """
    _configure_logging(verbose)
    source = _schema_source(schema, url, token, branch)
    try:
        options = GenerationOptions(
            output_dir=Path(output).resolve(),
            package_name=package_name,
            project_name=project_name,
            runtime_path=Path(runtime_path) if runtime_path else None,
            template_dir=Path(template_dir) if template_dir else None,
            header=header,
            default_page_size=page_size,
        )
    except ValidationError as e:
        raise click.UsageError(e.errors()[0]["msg"]) from e

    try:
        click.echo(f"Loading schema from {source.label}...")
        text = load_schema(source)

        click.echo("Generating code...")
        report = generate_client(text, options, source=source.label)
    except NsgenError as e:
        raise click.ClickException(e.message) from e

    if verbose:
        for path in report.files:
            click.echo(f"  {path}")
    for warning in report.warnings:
        click.echo(f"Warning: {warning}", err=True)

    click.echo(
        f"Done! Generated {report.models} models in {report.namespaces} namespaces "
        f"in {report.output_dir} ({len(report.warnings)} warnings)."
    )


@main.command()
@with_schema_options
def inspect(schema: str | None, url: str | None, token: str | None, branch: str | None, verbose: bool):
    """Show the namespaces, models and accessors a schema would produce.

    Nothing is written.
    """
    _configure_logging(verbose)
    source = _schema_source(schema, url, token, branch)
    try:
        tree = build_tree(load_schema(source), source.label)
    except NsgenError as e:
        raise click.ClickException(e.message) from e

    for key, group in tree.namespaces.items():
        click.echo(key)
        for entry in group.models:
            operations = ", ".join(op.kind.value for op in entry.operations) or "-"
            name = entry.name or "(root)"
            click.echo(f"  {name:<30} {entry.type_name:<40} {operations}")
    for warning in tree.warnings:
        click.echo(f"Warning: {warning}", err=True)


if __name__ == "__main__":
    main()
