"""Show character details command implementation."""

import asyncio
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rmx.cli.utils.list_shared import CharacterDataTransformer
from rmx.cli.utils.options import OUTPUT_PATH_OPTION, OutputFormat
from rmx.cli.utils.output import handle_json_output
from rmx.cli.utils.session import catalog_session
from rmx.config import load_config
from rmx.exceptions import NotFoundError
from rmx.models.character import Character

console = Console()
logger = logging.getLogger(__name__)


def render_character(character: Character) -> Panel:
    """Build the detail card of a character."""
    data_transformer = CharacterDataTransformer()

    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="bold")
    grid.add_column()
    for label, value in data_transformer.extract_details(character):
        if label == "Status":
            grid.add_row(label, Text(value, style=data_transformer.status_style(value)))
        else:
            grid.add_row(label, value)

    return Panel(grid, title=f"[bold]{character.name}[/bold]", subtitle=f"#{character.id}", expand=False)


def show_character(
    character_id: Annotated[int, typer.Argument(min=1, help="Character ID")],
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format (table, json)", case_sensitive=False),
    ] = OutputFormat.TABLE,
    output: OUTPUT_PATH_OPTION = None,
) -> None:
    """Show the details of a single character."""
    config = load_config()

    with catalog_session(config) as synchronizer:
        with console.status("[bold blue]Loading character details...[/bold blue]", spinner="dots"):
            outcome = asyncio.run(synchronizer.select_character(character_id))

    if not outcome.ok:
        if isinstance(outcome.error, NotFoundError):
            console.print(f"[yellow]Character {character_id} not found[/yellow]")
            raise typer.Exit(1)
        console.print(f"[red]Error loading character:[/red] {outcome.error}")
        raise typer.Exit(1)

    if output_format == OutputFormat.JSON:
        handle_json_output(outcome.payload, output)
    else:
        console.print(render_character(outcome.payload))
