"""Shared CLI options and enums for commands."""

from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer

from rmx.core.constants import FilterOptions


class OutputFormat(StrEnum):
    """Supported output formats across commands."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


# Common typer options
PAGE_OPTION = Annotated[
    int | None,
    typer.Option("--page", "-p", min=1, help="Page number (defaults to the page in --url, else 1)"),
]

NAME_OPTION = Annotated[
    str | None,
    typer.Option("--name", "-n", help="Filter by name substring"),
]

STATUS_OPTION = Annotated[
    str | None,
    typer.Option("--status", "-s", help=f"Filter by status ({', '.join(FilterOptions.STATUS)})"),
]

SPECIES_OPTION = Annotated[
    str | None,
    typer.Option("--species", help=f"Filter by species (e.g. {', '.join(FilterOptions.SPECIES[:4])})"),
]

GENDER_OPTION = Annotated[
    str | None,
    typer.Option("--gender", "-g", help=f"Filter by gender ({', '.join(FilterOptions.GENDER)})"),
]

URL_OPTION = Annotated[
    str | None,
    typer.Option("--url", "-u", help="Bookmarked query string to start from, e.g. '?page=2&status=alive'"),
]

OUTPUT_PATH_OPTION = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Output file path (prints to stdout when omitted)",
    ),
]

OUTPUT_FORMAT_OPTION = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
        case_sensitive=False,
    ),
]
