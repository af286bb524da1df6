"""
MAAS API CLI.

Usage:
    maasapi --url http://maas:5240/MAAS probe
    maasapi --url http://maas:5240/MAAS get machines/ --op list_allocated
    maasapi versions
"""

from __future__ import annotations

import sys

import click
from rich.console import Console
from rich.table import Table

from maasapi.exceptions import MAASError, PermissionDeniedError, UnsupportedVersionError
from maasapi.logging import setup_logging

console = Console()
err_console = Console(stderr=True)


def get_url(ctx: click.Context) -> str:
    """Get server URL from context or exit."""
    url = ctx.obj.get("url") if ctx.obj else None
    if not url:
        err_console.print("[red]Error:[/red] Pass --url or set MAAS_URL")
        raise SystemExit(1)
    return url


def _negotiate(ctx: click.Context):
    from maasapi.negotiation import new_controller

    try:
        return new_controller(get_url(ctx), ctx.obj.get("api_key") or None)
    except PermissionDeniedError as e:
        err_console.print(f"[red]Permission denied:[/red] {e}")
    except UnsupportedVersionError as e:
        err_console.print(f"[red]Unsupported version:[/red] {e}")
    except MAASError as e:
        err_console.print(f"[red]Error:[/red] {e}")
    raise SystemExit(1)


@click.group()
@click.option("--url", envvar="MAAS_URL", help="MAAS server URL")
@click.option("--api-key", envvar="MAAS_API_KEY", help="MAAS API key")
@click.option("--debug", is_flag=True, help="Log requests and responses")
@click.version_option(package_name="maasapi")
@click.pass_context
def main(ctx: click.Context, url: str | None, api_key: str | None, debug: bool) -> None:
    """MAAS API command-line interface."""
    ctx.ensure_object(dict)
    ctx.obj["url"] = url
    ctx.obj["api_key"] = api_key
    if debug:
        setup_logging("DEBUG")


# =============================================================================
# Probe Command
# =============================================================================


@main.command()
@click.pass_context
def probe(ctx: click.Context) -> None:
    """Negotiate the API version and show server capabilities."""
    with _negotiate(ctx) as controller:
        console.print(f"[dim]API URL:[/dim] {controller.api_url}")
        console.print(f"[dim]Version:[/dim] [cyan]{controller.api_version}[/cyan]\n")

        if not controller.capabilities:
            console.print("[yellow]No capabilities advertised[/yellow]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Capability")
        for capability in sorted(controller.capabilities):
            table.add_row(capability)
        console.print(table)


# =============================================================================
# Get Command
# =============================================================================


@main.command()
@click.argument("path")
@click.option("--op", "-o", default="", help="API operation (sent as ?op=)")
@click.pass_context
def get(ctx: click.Context, path: str, op: str) -> None:
    """GET a path relative to the negotiated API root and print the body.

    Examples:

        maasapi get machines/

        maasapi get users/ --op whoami
    """
    with _negotiate(ctx) as controller:
        try:
            body = controller.get(path, op=op)
        except MAASError as e:
            err_console.print(f"[red]Error:[/red] {e}")
            raise SystemExit(1)
    sys.stdout.buffer.write(body)
    sys.stdout.buffer.write(b"\n")


# =============================================================================
# Versions Command
# =============================================================================


@main.command()
def versions() -> None:
    """List API versions this client can negotiate, most desirable first."""
    from maasapi.negotiation import SUPPORTED_API_VERSIONS

    for version in SUPPORTED_API_VERSIONS:
        console.print(version)


if __name__ == "__main__":
    main()
