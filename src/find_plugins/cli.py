"""
find-plugins CLI.

Lists the plugins a project has installed, optionally in constraint order.
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from find_plugins.collector import Candidate
from find_plugins.config import DiscoveryOptions
from find_plugins.discovery import discover_plugins
from find_plugins.exceptions import FindPluginsError
from find_plugins.logging_config import setup_logging

app = typer.Typer(
    name="find-plugins",
    help="find-plugins - Discover plugin packages in a project's dependency tree",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Discover plugin packages in a project's dependency tree."""
    setup_logging("DEBUG" if verbose else None)


def _plugin_row(plugin: Candidate) -> dict:
    return {
        "name": plugin.manifest.name,
        "version": plugin.manifest.version,
        "location": str(plugin.location),
    }


@app.command("list")
def list_plugins(
    directory: Optional[Path] = typer.Argument(
        None, help="Directory to scan or resolve from (default: current directory)"
    ),
    pkg: Optional[Path] = typer.Option(None, help="Path to the host manifest"),
    include: Optional[List[Path]] = typer.Option(
        None, help="Extra plugin location (repeatable)"
    ),
    keyword: Optional[str] = typer.Option(
        None, help="Keyword marking a plugin (default: host package name)"
    ),
    scan_all_dirs: bool = typer.Option(
        False, "--scan-all-dirs", help="Scan every directory instead of dependencies"
    ),
    exclude_dependencies: bool = typer.Option(
        False, "--exclude-dependencies", help="Skip regular dependencies"
    ),
    include_dev: bool = typer.Option(
        False, "--include-dev", help="Include dev dependencies"
    ),
    include_peer: bool = typer.Option(
        False, "--include-peer", help="Include peer dependencies"
    ),
    include_bundle: bool = typer.Option(
        False, "--include-bundle", help="Include bundled dependencies"
    ),
    include_optional: bool = typer.Option(
        False, "--include-optional", help="Include optional dependencies"
    ),
    sort: bool = typer.Option(
        False, "--sort", help="Order plugins by their constraints"
    ),
    config_name: Optional[str] = typer.Option(
        None, help="Manifest key holding ordering constraints (default: host name)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print plugins as JSON"),
) -> None:
    """
    List discovered plugins.

    Reads the host manifest's dependencies (or scans DIRECTORY with
    --scan-all-dirs) and prints every package accepted as a plugin.
    """
    if directory is not None and not directory.is_dir():
        console.print(f"[bold red]Error:[/bold red] Directory not found: {directory}")
        raise typer.Exit(1)

    options = DiscoveryOptions(
        dir=directory,
        pkg=pkg,
        include=include or [],
        keyword=keyword,
        scan_all_dirs=scan_all_dirs,
        exclude_dependencies=exclude_dependencies,
        include_dev=include_dev,
        include_peer=include_peer,
        include_bundle=include_bundle,
        include_optional=include_optional,
        sort=sort,
        config_name=config_name,
    )

    try:
        plugins = discover_plugins(options)
    except FindPluginsError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps([_plugin_row(plugin) for plugin in plugins], indent=2))
        return

    if not plugins:
        console.print("[yellow]No plugins found[/yellow]")
        return

    table = Table(title=f"Plugins ({len(plugins)})")
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Version")
    table.add_column("Location", overflow="fold")
    for position, plugin in enumerate(plugins, start=1):
        row = _plugin_row(plugin)
        table.add_row(
            str(position), row["name"] or "", row["version"] or "", row["location"]
        )

    console.print(table)


if __name__ == "__main__":
    app()
