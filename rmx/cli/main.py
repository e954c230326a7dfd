"""Main CLI entry point for the Rick & Morty character explorer."""

from typing import Annotated

import typer

from rmx.cli.commands.export import export_characters
from rmx.cli.commands.list import list_characters
from rmx.cli.commands.show import show_character
from rmx.cli.utils.session import setup_logging
from rmx.config import load_config
from rmx.core.constants import PACKAGE_VERSION

app = typer.Typer(
    name="rmx",
    help="Rick & Morty Explorer - Browse and filter the character catalog",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"rmx {PACKAGE_VERSION}")
        raise typer.Exit()


@app.callback()
def callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show the version and exit"),
    ] = False,
) -> None:
    """
    Rick & Morty Explorer CLI
    """
    setup_logging("DEBUG" if verbose else load_config().log_level)


app.command("list", help="List characters page by page, with filters")(list_characters)
app.command("show", help="Show the details of a single character")(show_character)
app.command("export", help="Export every character matching the filters")(export_characters)


if __name__ == "__main__":
    app()
