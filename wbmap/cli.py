"""CLI interface for wbmap."""

import logging
import click
from pathlib import Path
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
import sys

from wbmap import __version__
from wbmap.backend.sparql import make_sparql_query
from wbmap.config.manager import ConfigManager
from wbmap.errors import WikibaseError

console = Console()
stderr_console = Console(file=sys.stderr)

config_option = click.option(
    '--config', '-c',
    'config_path',
    type=click.Path(exists=True, path_type=Path),
    default='configs/project.yml',
    help='Path to project config'
)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Log API requests')
def cli(verbose: bool):
    """wbmap - keep Wikibase items in sync with annotated records"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=stderr_console, show_path=False)],
    )


@cli.command()
@config_option
@click.argument('label')
@click.option(
    '--type', '-t',
    'kind',
    type=click.Choice(['item', 'property']),
    default='item',
    help='Kind of entity to look up'
)
def lookup(config_path: Path, label: str, kind: str) -> None:
    """Print the IDs of every entity with exactly LABEL."""
    try:
        client = ConfigManager(str(config_path)).get_client()
        ids = client.resolver.fetch_ids_for_label(kind, label)
    except WikibaseError as e:
        stderr_console.print(f"[red]✗ Lookup failed: {e}[/red]")
        raise click.Abort()

    if not ids:
        console.print(f"[yellow]No {kind} found for '{label}'[/yellow]")
    for entity_id in ids:
        console.print(entity_id)


@cli.command(name="map")
@config_option
@click.option('--create', is_flag=True, help='Create properties and items that do not exist')
def map_labels(config_path: Path, create: bool) -> None:
    """Resolve the properties and items listed in the project config."""
    config_manager = ConfigManager(str(config_path))
    config = config_manager.config
    create = create or bool(config_manager.get_setting('create_if_missing', False))
    console.print(f"[blue]Mapping labels for {config.name}...[/blue]")

    try:
        client = config_manager.get_client()
        for prop in config.properties:
            client.resolver.resolve_label(prop.label, 'property', create, prop.datatype)
        for label in config.items:
            client.map_item_configuration_by_label(label, create)
    except WikibaseError as e:
        stderr_console.print(f"[red]✗ Mapping failed: {e}[/red]")
        raise click.Abort()

    table = Table(title="Label Map")
    table.add_column("Type", style="cyan")
    table.add_column("Label")
    table.add_column("ID", style="green")
    for label, property_id in client.property_map.items():
        table.add_row("Property", label, property_id)
    for label, item_id in client.item_map.items():
        table.add_row("Item", label, item_id)
    console.print(table)


@cli.command()
@config_option
@click.argument('query_path', type=click.Path(exists=True, path_type=Path))
def sparql(config_path: Path, query_path: Path) -> None:
    """Run the SPARQL query in QUERY_PATH and print the results."""
    config_manager = ConfigManager(str(config_path))
    endpoint = config_manager.get_sparql_endpoint()
    if not endpoint:
        stderr_console.print("[red]✗ No SPARQL endpoint configured[/red]")
        raise click.Abort()

    try:
        response = make_sparql_query(
            endpoint, query_path.read_text(encoding='utf-8'), config_manager.get_user_agent()
        )
    except WikibaseError as e:
        stderr_console.print(f"[red]✗ Query failed: {e}[/red]")
        raise click.Abort()

    table = Table()
    for name in response.head.vars:
        table.add_column(name)
    for row in response.rows():
        table.add_row(*(row.get(name, "") for name in response.head.vars))
    console.print(table)


@cli.command()
@config_option
@click.argument('title')
@click.argument('body_path', type=click.Path(exists=True, path_type=Path))
@click.option('--protect', is_flag=True, help='Restrict editing to sysops afterwards')
def article(config_path: Path, title: str, body_path: Path, protect: bool) -> None:
    """Create or update the article TITLE with the text in BODY_PATH."""
    try:
        client = ConfigManager(str(config_path)).get_client()
        page_id = client.create_or_update_article(title, body_path.read_text(encoding='utf-8'))
        if protect:
            client.protect_page_by_id(page_id)
    except WikibaseError as e:
        stderr_console.print(f"[red]✗ Article update failed: {e}[/red]")
        raise click.Abort()

    console.print(f"[green]✓ Article '{title}' saved as page {page_id}[/green]")


if __name__ == "__main__":
    cli()
