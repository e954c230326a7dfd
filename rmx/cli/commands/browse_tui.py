"""TUI mode for browsing characters page by page."""

import logging
from collections.abc import Awaitable
from typing import ClassVar

import pyperclip
from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Footer, Header, Input, Label, Static

from rmx.cli.commands.show import render_character
from rmx.cli.utils.list_shared import COLUMN_CONFIG, CharacterDataTransformer
from rmx.cli.utils.session import catalog_session
from rmx.config import Config
from rmx.core.constants import FILTER_KEYS, FilterOptions, TUIConstants
from rmx.core.highlighting import highlight_text
from rmx.core.search import CharacterSearcher
from rmx.exceptions import NotFoundError, ValidationError
from rmx.models.cache import FetchOutcome
from rmx.models.character import Character, CharacterPage
from rmx.sync.synchronizer import ViewStateSynchronizer

# Modal dialog constants
DIALOG_WIDTH_PERCENT = 80
DIALOG_MAX_WIDTH = 100
STATUS_BAR_HEIGHT = 1

FILTER_PLACEHOLDERS = {
    "name": "Search by name...",
    "status": f"All statuses ({', '.join(FilterOptions.STATUS)})",
    "species": f"All species (e.g. {', '.join(FilterOptions.SPECIES[:3])})",
    "gender": f"All genders ({', '.join(FilterOptions.GENDER)})",
}

logger = logging.getLogger(__name__)


class FilterScreen(ModalScreen[bool]):
    """Modal screen staging filter edits. Dismisses True when the user searches."""

    CSS = f"""
    FilterScreen {{
        align: center middle;
    }}

    FilterScreen > Vertical {{
        width: {DIALOG_WIDTH_PERCENT}%;
        max-width: {DIALOG_MAX_WIDTH};
        height: auto;
        background: $surface;
        border: solid $primary;
        padding: 1;
    }}

    FilterScreen Horizontal {{
        height: auto;
        align: right middle;
    }}
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    def __init__(self, synchronizer: ViewStateSynchronizer) -> None:
        super().__init__()
        self.synchronizer = synchronizer

    def compose(self) -> ComposeResult:
        staged = self.synchronizer.staged_filters
        with Vertical():
            yield Static("[bold]Search & Filter[/bold]")
            for key in FILTER_KEYS:
                yield Label(key.capitalize())
                yield Input(value=getattr(staged, key) or "", placeholder=FILTER_PLACEHOLDERS[key], id=f"filter-{key}")
            with Horizontal():
                yield Button("Search", variant="primary", id="search")
                yield Button("Cancel", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#filter-name", Input).focus()

    def _stage_inputs(self) -> None:
        for key in FILTER_KEYS:
            self.synchronizer.stage_filter(key, self.query_one(f"#filter-{key}", Input).value.strip())

    @on(Input.Submitted)
    @on(Button.Pressed, "#search")
    def submit(self) -> None:
        self._stage_inputs()
        self.dismiss(True)

    @on(Button.Pressed, "#cancel")
    def action_cancel(self) -> None:
        self.synchronizer.discard_staged()
        self.dismiss(False)


class CharacterDetailScreen(ModalScreen[None]):
    """Modal screen with the detail card of the selected character."""

    CSS = f"""
    CharacterDetailScreen {{
        align: center middle;
    }}

    CharacterDetailScreen > Vertical {{
        width: {DIALOG_WIDTH_PERCENT}%;
        max-width: {DIALOG_MAX_WIDTH};
        height: auto;
        background: $surface;
        border: solid $primary;
        padding: 1;
    }}
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "dismiss", "Back to Characters", show=True),
        Binding("r", "refresh", "Refresh", show=True),
    ]

    def __init__(self, synchronizer: ViewStateSynchronizer, character: Character) -> None:
        super().__init__()
        self.synchronizer = synchronizer
        self.character = character

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(render_character(self.character), id="character-card")
            yield Static("[dim]Press r to refresh, ESC to return[/dim]")

    def action_refresh(self) -> None:
        self.run_worker(self._refresh(), exclusive=True)

    async def _refresh(self) -> None:
        outcome = await self.synchronizer.refresh_character()
        if outcome.ok:
            self.character = outcome.payload
            self.query_one("#character-card", Static).update(render_character(self.character))
            self.notify("Character details updated successfully.", title="Refreshed!")
        else:
            # Card keeps the previous data
            self.notify("Failed to refresh character details.", title="Error", severity="error")


class QuickFindScreen(ModalScreen[int | None]):
    """Modal screen for fuzzy-finding a character on the current page."""

    CSS = f"""
    QuickFindScreen {{
        align: center middle;
    }}

    QuickFindScreen > Vertical {{
        width: {DIALOG_WIDTH_PERCENT}%;
        max-width: {DIALOG_MAX_WIDTH};
        height: 70%;
        background: $surface;
        border: solid $primary;
        padding: 1;
    }}

    #find-results {{
        height: 1fr;
    }}
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("escape", "dismiss", "Close", show=False),
    ]

    def __init__(self, characters: list[Character]) -> None:
        super().__init__()
        self.characters = characters
        self.searcher = CharacterSearcher()
        self.hit_rows: list[int] = []

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("[bold]Find on this page[/bold]")
            yield Input(placeholder="Enter search term...", id="find-input")
            yield DataTable(id="find-results")
            yield Static("[dim]Enter to jump to the best match, ESC to close[/dim]")

    def on_mount(self) -> None:
        table = self.query_one("#find-results", DataTable)
        table.add_column("Row", width=5)
        table.add_column("Name", width=40)
        table.add_column("Score", width=7)
        table.cursor_type = "row"
        self.query_one("#find-input", Input).focus()

    @on(Input.Changed, "#find-input")
    def on_find_changed(self, event: Input.Changed) -> None:
        table = self.query_one("#find-results", DataTable)
        table.clear()
        self.hit_rows = []
        if len(event.value.strip()) < TUIConstants.MIN_SEARCH_LENGTH:
            return

        for hit in self.searcher.search(event.value, self.characters):
            self.hit_rows.append(hit.row_index)
            table.add_row(
                str(hit.row_index + 1),
                highlight_text(hit.character.name, [hit.matched_substring]),
                f"{hit.score:.0f}%",
            )

    @on(Input.Submitted, "#find-input")
    def on_find_submitted(self) -> None:
        self.dismiss(self.hit_rows[0] if self.hit_rows else None)

    @on(DataTable.RowSelected, "#find-results")
    def on_hit_selected(self, event: DataTable.RowSelected) -> None:
        if event.cursor_row < len(self.hit_rows):
            self.dismiss(self.hit_rows[event.cursor_row])


class CharacterBrowserTUI(App[None]):
    """TUI app for paging through the character catalog."""

    CSS = f"""
    DataTable {{
        height: 1fr;
    }}

    .status-bar {{
        dock: bottom;
        height: {STATUS_BAR_HEIGHT};
        background: $surface;
        color: $text;
        padding: 0 1;
    }}
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit", show=True),
        Binding("n", "next_page", "Next", show=True),
        Binding("p", "previous_page", "Previous", show=True),
        Binding("f", "filters", "Filter", show=True),
        Binding("x", "clear_filters", "Clear All", show=True),
        Binding("r", "refresh", "Refresh", show=True),
        Binding("y", "copy_url", "Copy URL", show=True),
        Binding("/", "quick_find", "Find", show=True),
        Binding("left_square_bracket", "history_back", "Back", show=False),
        Binding("right_square_bracket", "history_forward", "Forward", show=False),
    ]

    def __init__(self, synchronizer: ViewStateSynchronizer) -> None:
        super().__init__()
        self.synchronizer = synchronizer
        self.title = "Rick & Morty Character Explorer"
        self.data_transformer = CharacterDataTransformer()
        self.characters: list[Character] = []

    def compose(self) -> ComposeResult:
        """Create child widgets for the app."""
        yield Header()
        yield DataTable(id="characters")
        yield Static("Loading...", classes="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Set up the data table and load the first page."""
        table = self.query_one("#characters", DataTable)
        table.cursor_type = "row"
        for col_config in COLUMN_CONFIG:
            table.add_column(col_config.label, width=col_config.width, key=col_config.key)
        table.focus()
        self._perform(self.synchronizer.load())

    # Rendering

    def _set_status(self, message: str) -> None:
        self.query_one(".status-bar", Static).update(message)

    def _render_current(self) -> None:
        """Redraw from the cache entry of the active signature."""
        self.sub_title = self.synchronizer.current_url()
        table = self.query_one("#characters", DataTable)
        table.clear()
        self.characters = []

        entry = self.synchronizer.get_current_result()
        if entry is None or (entry.is_fetching and not entry.has_payload):
            self._set_status("Loading characters...")
            return

        if not entry.has_payload:
            if isinstance(entry.error, NotFoundError):
                self._set_status("[yellow]No characters found matching your criteria.[/yellow]")
            else:
                self._set_status("[red]Error loading characters[/red] | Press r to try again")
            return

        page: CharacterPage = entry.payload
        self.characters = list(page.results)
        name_filter = self.synchronizer.get_view_state().filters.name
        patterns = [name_filter] if name_filter else []
        for character in self.characters:
            cells: list[str | Text] = list(self.data_transformer.extract_row(character).to_tuple())
            cells[1] = highlight_text(character.name, patterns)
            cells[2] = Text(character.status, style=self.data_transformer.status_style(character.status))
            table.add_row(*cells, key=str(character.id))

        state = self.synchronizer.get_view_state()
        status = f"Showing page {state.page} of {page.total_pages} ({page.total_count} total characters)"
        active = state.filters.active()
        if active:
            status += " | " + ", ".join(f"{key}={value}" for key, value in active.items())
        if entry.is_fetching:
            status += " | [blue]Updating...[/blue]"
        elif entry.error is not None:
            status += " | [red]Last refresh failed[/red]"
        self._set_status(status)

    # Operations

    def _perform(self, operation: Awaitable[FetchOutcome], success_message: str | None = None) -> None:
        self.run_worker(self._apply(operation, success_message), group="catalog")

    async def _apply(self, operation: Awaitable[FetchOutcome], success_message: str | None) -> None:
        self._set_status("Loading characters...")
        outcome = await operation
        self._render_current()

        if outcome.ok:
            if success_message:
                self.notify(success_message, title="Refreshed!")
        elif isinstance(outcome.error, ValidationError):
            self.notify(str(outcome.error), severity="warning")
        elif not isinstance(outcome.error, NotFoundError):
            logger.info(f"Operation failed: {outcome.error}")
            self.notify(str(outcome.error), title="Error", severity="error")

    def action_next_page(self) -> None:
        self._perform(self.synchronizer.next_page())

    def action_previous_page(self) -> None:
        self._perform(self.synchronizer.previous_page())

    def action_refresh(self) -> None:
        self._perform(self.synchronizer.refresh(), success_message="Character list updated successfully.")

    def action_clear_filters(self) -> None:
        self._perform(self.synchronizer.clear_filters())

    def action_history_back(self) -> None:
        self._perform(self.synchronizer.navigate_back())

    def action_history_forward(self) -> None:
        self._perform(self.synchronizer.navigate_forward())

    def action_filters(self) -> None:
        """Open the filter dialog and commit on search."""

        def handle_filters(submitted: bool | None) -> None:
            if submitted:
                self._perform(self.synchronizer.submit_filters())

        self.push_screen(FilterScreen(self.synchronizer), handle_filters)

    def action_copy_url(self) -> None:
        """Copy the bookmarkable query string to the clipboard."""
        url = self.synchronizer.current_url()
        try:
            pyperclip.copy(url)
            self.notify(f"Copied {url}")
        except pyperclip.PyperclipException:
            self.notify("Copy failed - clipboard not available", severity="error")

    def action_quick_find(self) -> None:
        """Open quick-find and move the cursor to the chosen row."""

        def handle_result(row: int | None) -> None:
            if row is not None:
                table = self.query_one("#characters", DataTable)
                table.move_cursor(row=row, animate=False)
                table.focus()

        self.push_screen(QuickFindScreen(self.characters), handle_result)

    @on(DataTable.RowSelected, "#characters")
    def on_character_selected(self, event: DataTable.RowSelected) -> None:
        if event.cursor_row < len(self.characters):
            self.run_worker(self._show_character(self.characters[event.cursor_row].id), group="details")

    async def _show_character(self, character_id: int) -> None:
        outcome = await self.synchronizer.select_character(character_id)
        if outcome.ok:
            self.push_screen(CharacterDetailScreen(self.synchronizer, outcome.payload))
        elif isinstance(outcome.error, NotFoundError):
            self.notify("Character not found", severity="warning")
        else:
            self.notify(str(outcome.error), title="Error", severity="error")


def launch_character_browser_tui(config: Config, start_query: str = "") -> None:
    """Launch the TUI app for browsing characters."""
    with catalog_session(config, start_query) as synchronizer:
        app = CharacterBrowserTUI(synchronizer)
        app.run()
