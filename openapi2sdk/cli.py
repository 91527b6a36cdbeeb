"""Main CLI for openapi2sdk."""

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .cache import ResourceBox
from .client import create_sdk
from .generator import FacadeGenerator
from .logs import configure_logging
from .parser import OpenAPIParser
from .runtime import VERBS, ServerError

ENV_PREFIX = "OPENAPI2SDK"


def format_output(data, output_format: str) -> None:
    """Print a result as JSON, a rich table, or raw."""
    if isinstance(data, ResourceBox):
        data = data.value

    if output_format == "raw":
        click.echo(data)
    elif output_format == "table":
        console = Console()
        if isinstance(data, list) and data:
            table = Table()
            first = data[0]
            if isinstance(first, dict):
                for key in first.keys():
                    table.add_column(str(key))
                for item in data:
                    if isinstance(item, dict):
                        table.add_row(*[str(item.get(k, "")) for k in first.keys()])
            else:
                table.add_column("value")
                for item in data:
                    table.add_row(str(item))
            console.print(table)
        elif isinstance(data, dict):
            table = Table()
            table.add_column("Key")
            table.add_column("Value")
            for k, v in data.items():
                table.add_row(str(k), str(v))
            console.print(table)
        else:
            console.print(data)
    else:
        click.echo(json.dumps(data, indent=2))


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log requests to stderr")
def main(verbose: bool):
    """openapi2sdk - Call any OpenAPI-described API without generated code.

    Example:

        # See what the API offers
        openapi2sdk inspect https://api.example.com/openapi.json

        # GET /users/42
        openapi2sdk call https://api.example.com/openapi.json users 42
    """
    configure_logging("DEBUG" if verbose else "WARNING")


@main.command()
@click.argument("spec", type=str)
def inspect(spec: str):
    """Inspect an OpenAPI document.

    Shows the declared paths grouped by tag, in matching order.
    """
    try:
        parsed = OpenAPIParser().parse(spec)

        click.echo(f"\n📋 {parsed.title} v{parsed.version}")
        if parsed.description:
            description = parsed.description
            click.echo(f"   {description[:100]}..." if len(description) > 100 else f"   {description}")
        if parsed.base_url:
            click.echo(f"\n🌐 Base URL: {parsed.base_url}")

        if parsed.auth_schemes:
            click.echo("\n🔐 Authentication:")
            for scheme in parsed.auth_schemes:
                click.echo(f"   - {scheme.name}: {scheme.type}")

        grouped = parsed.group_by_tag()
        click.echo(f"\n📡 Paths ({len(parsed.templates)} total):")

        for tag, operations in sorted(grouped.items()):
            click.echo(f"\n   [{tag}]")
            for op in operations:
                click.echo(f"   • {op.method:6} {op.path}")
                params = ", ".join(p.name for p in op.parameters[:3])
                if len(op.parameters) > 3:
                    params += "..."
                if params:
                    click.echo(f"           params: {params}")
                if op.request_body and op.request_body.properties:
                    click.echo(f"           body: {', '.join(op.request_body.properties)}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("spec", type=str)
@click.argument("path", nargs=-1, required=True)
@click.option("--method", "-X", type=click.Choice(VERBS), default="get", show_default=True, help="HTTP verb")
@click.option("--data", "-d", help="JSON payload (query for GET, body otherwise)")
@click.option("--token", envvar=ENV_PREFIX + "_TOKEN", help="Bearer token")
@click.option("--base-url", envvar=ENV_PREFIX + "_BASE_URL", help="API base URL")
@click.option("--output", "-o", type=click.Choice(["json", "table", "raw"]), default="json", help="Output format")
def call(spec: str, path, method: str, data: str, token: str, base_url: str, output: str):
    """Call an endpoint by path.

    PATH is given as segments (users 42) or slash-separated (users/42).

    Examples:

        openapi2sdk call petstore.yaml pet findByStatus -d '{"status": "sold"}'
        openapi2sdk call petstore.yaml pet -X post -d '{"name": "Rex"}'
    """
    try:
        sdk = create_sdk(spec, base_url=base_url, token=token)

        endpoint = sdk
        for part in path:
            for segment in part.split("/"):
                if segment:
                    endpoint = endpoint[segment]

        payload = json.loads(data) if data else None
        result = getattr(endpoint, method)(payload)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if isinstance(result, ServerError):
        click.echo(f"Error: HTTP {result.status} from {result.method.upper()} {result.path}", err=True)
        format_output(result.error, output)
        sys.exit(1)

    format_output(result, output)


@main.command()
@click.argument("spec", type=str)
@click.option("--name", "-n", required=True, help="Name for the generated client")
@click.option("--output", "-o", type=click.Path(), help="Output file path")
@click.option("--stdout", is_flag=True, help="Print to stdout instead of file")
def generate(spec: str, name: str, output: str, stdout: bool):
    """Generate a typed facade module from an OpenAPI document.

    The module has one method per operation and calls the API through
    the dynamic client.

    Examples:

        openapi2sdk generate petstore.yaml --name petstore
        openapi2sdk generate https://api.example.com/openapi.json --name example -o example_client.py
    """
    try:
        parsed = OpenAPIParser().parse(spec)

        click.echo(f"Parsed: {parsed.title} v{parsed.version}", err=True)

        facade = FacadeGenerator().generate(parsed, name=name, source=spec)

        click.echo(f"Generated {len(facade.methods)} methods", err=True)

        if stdout:
            click.echo(facade.to_python())
        else:
            output_path = Path(output) if output else Path(f"{name.replace('-', '_')}_client.py")
            facade.save(output_path)
            click.echo(f"Saved to: {output_path}", err=True)

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
