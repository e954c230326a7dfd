"""Export characters command implementation."""

import asyncio
import logging
import time
from typing import Annotated

import typer
from rich.console import Console
from tqdm import tqdm

from rmx.cli.utils.list_shared import CharacterDataTransformer
from rmx.cli.utils.options import (
    GENDER_OPTION,
    NAME_OPTION,
    OUTPUT_PATH_OPTION,
    SPECIES_OPTION,
    STATUS_OPTION,
    URL_OPTION,
    OutputFormat,
)
from rmx.cli.utils.output import handle_csv_output, handle_json_output
from rmx.cli.utils.session import build_start_query, catalog_session
from rmx.config import load_config
from rmx.core.constants import ProgressBarConstants
from rmx.exceptions import CatalogError, NotFoundError
from rmx.models.character import Character, CharacterPage
from rmx.models.filters import ViewState
from rmx.sync.synchronizer import ViewStateSynchronizer, validate_filters
from rmx.sync.url_state import view_state_from_query, view_state_to_query

console = Console()
logger = logging.getLogger(__name__)


async def collect_all_pages(synchronizer: ViewStateSynchronizer, pbar: tqdm) -> list[Character]:
    """Walk every page of the committed filters, starting at page 1.

    Raises:
        CatalogError: If a page fails to load
    """
    outcome = await synchronizer.load()
    characters: list[Character] = []

    while True:
        if not outcome.ok:
            raise outcome.error

        page: CharacterPage = outcome.payload
        if pbar.total is None:
            pbar.total = page.total_count
            pbar.refresh()
        characters.extend(page.results)
        pbar.update(len(page.results))
        pbar.set_postfix({"page": f"{synchronizer.get_view_state().page}/{page.total_pages}"})

        if not page.has_next:
            return characters
        outcome = await synchronizer.next_page()


def export_characters(
    name: NAME_OPTION = None,
    status: STATUS_OPTION = None,
    species: SPECIES_OPTION = None,
    gender: GENDER_OPTION = None,
    url: URL_OPTION = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format (json, csv)", case_sensitive=False),
    ] = OutputFormat.JSON,
    output: OUTPUT_PATH_OPTION = None,
) -> None:
    """Export every character matching the filters, across all pages."""
    if output_format == OutputFormat.TABLE:
        console.print("[red]Export supports json and csv only[/red]")
        raise typer.Exit(1)

    config = load_config()
    filters = view_state_from_query(
        build_start_query(url, None, name=name, status=status, species=species, gender=gender)
    ).filters
    error = validate_filters(filters)
    if error is not None:
        console.print(f"[red]{error}[/red]")
        raise typer.Exit(1)

    start_time = time.time()
    start_query = view_state_to_query(ViewState(page=1, filters=filters))

    pbar = tqdm(
        desc="Fetching characters",
        unit=" characters",
        mininterval=ProgressBarConstants.MIN_UPDATE_INTERVAL / 1000,
        maxinterval=ProgressBarConstants.MAX_UPDATE_INTERVAL / 1000,
    )
    try:
        with catalog_session(config, start_query) as synchronizer:
            characters = asyncio.run(collect_all_pages(synchronizer, pbar))
    except NotFoundError:
        console.print("[yellow]No characters found matching your criteria[/yellow]")
        return
    except CatalogError as e:
        console.print(f"[red]Export failed:[/red] {e}")
        raise typer.Exit(1) from e
    finally:
        pbar.close()

    console.print(f"\n[dim]Fetched {len(characters)} characters in {time.time() - start_time:.1f}s[/dim]")

    if output_format == OutputFormat.CSV:
        transformer = CharacterDataTransformer()
        handle_csv_output(characters, output, lambda c: transformer.extract_row(c).to_dict())
    else:
        handle_json_output(characters, output)
