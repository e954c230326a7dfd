"""List characters command implementation."""

import asyncio
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from rmx.cli.commands.browse_tui import launch_character_browser_tui
from rmx.cli.utils.list_shared import COLUMN_CONFIG, CharacterDataTransformer
from rmx.cli.utils.options import (
    GENDER_OPTION,
    NAME_OPTION,
    OUTPUT_FORMAT_OPTION,
    OUTPUT_PATH_OPTION,
    PAGE_OPTION,
    SPECIES_OPTION,
    STATUS_OPTION,
    URL_OPTION,
    OutputFormat,
)
from rmx.cli.utils.output import handle_csv_output, handle_json_output
from rmx.cli.utils.session import build_start_query, catalog_session
from rmx.config import load_config
from rmx.core.highlighting import highlight_text
from rmx.exceptions import NotFoundError
from rmx.models.character import CharacterPage
from rmx.models.filters import FilterSet
from rmx.sync.synchronizer import validate_filters
from rmx.sync.url_state import view_state_from_query

console = Console()
logger = logging.getLogger(__name__)


def handle_table_output(page: CharacterPage, page_number: int, filters: FilterSet) -> None:
    """Handle table format output."""
    table = Table(title="Characters", show_lines=False, expand=True)
    for col_config in COLUMN_CONFIG:
        table.add_column(col_config.label, **col_config.get_table_kwargs())

    data_transformer = CharacterDataTransformer()
    name_patterns = [filters.name] if filters.name else []

    for character in page.results:
        row = data_transformer.extract_row(character)
        cells: list[str | Text] = list(row.to_tuple())
        cells[1] = highlight_text(row.name, name_patterns)
        cells[2] = Text(row.status, style=data_transformer.status_style(row.status))
        table.add_row(*cells)

    console.print(table)
    console.print(
        f"\n[bold]Showing page {page_number} of {page.total_pages}[/bold] ({page.total_count} total characters)"
    )


def list_characters(
    page: PAGE_OPTION = None,
    name: NAME_OPTION = None,
    status: STATUS_OPTION = None,
    species: SPECIES_OPTION = None,
    gender: GENDER_OPTION = None,
    url: URL_OPTION = None,
    output_format: OUTPUT_FORMAT_OPTION = OutputFormat.TABLE,
    output: OUTPUT_PATH_OPTION = None,
    no_tui: Annotated[
        bool,
        typer.Option(
            "--no-tui",
            help="Disable the interactive browser and print a single page",
        ),
    ] = False,
) -> None:
    """List one page of characters, optionally filtered.

    Filters given as options override the ones in --url. The bookmarkable query
    string of the listed view is printed after the results.
    """
    config = load_config()
    start_query = build_start_query(url, page, name=name, status=status, species=species, gender=gender)

    error = validate_filters(view_state_from_query(start_query).filters)
    if error is not None:
        console.print(f"[red]{error}[/red]")
        raise typer.Exit(1)

    if output_format == OutputFormat.TABLE and not no_tui:
        launch_character_browser_tui(config, start_query)
        return

    with catalog_session(config, start_query) as synchronizer:
        with console.status("[bold blue]Loading characters...[/bold blue]", spinner="dots"):
            outcome = asyncio.run(synchronizer.load())
        state = synchronizer.get_view_state()
        bookmark = synchronizer.current_url()

    if not outcome.ok:
        if isinstance(outcome.error, NotFoundError):
            console.print("[yellow]No characters found matching your criteria[/yellow]")
            return
        console.print(f"[red]Error loading characters:[/red] {outcome.error}")
        raise typer.Exit(1)

    result: CharacterPage = outcome.payload
    if output_format == OutputFormat.JSON:
        handle_json_output(result, output)
    elif output_format == OutputFormat.CSV:
        transformer = CharacterDataTransformer()
        handle_csv_output(result.results, output, lambda c: transformer.extract_row(c).to_dict())
    else:
        handle_table_output(result, state.page, state.filters)
        console.print(f"[dim]URL: {bookmark}[/dim]")
