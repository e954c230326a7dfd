"""View-state synchronization between memory, the address bar and the request cache."""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import ValidationError as PydanticValidationError

from rmx.cache.coordinator import FetchCoordinator
from rmx.core.constants import FILTER_KEYS, FilterOptions
from rmx.core.signature import character_signature, collection_signature
from rmx.exceptions import PageOutOfRangeError, ValidationError
from rmx.models.cache import CacheEntry, FetchOutcome, RequestSignature
from rmx.models.character import Character, CharacterPage
from rmx.models.filters import FilterSet, ViewState
from rmx.sync.address_bar import AddressBar, MemoryAddressBar
from rmx.sync.url_state import view_state_from_query, view_state_to_query

logger = logging.getLogger(__name__)


class CatalogGateway(Protocol):
    """Blocking remote reads the synchronizer drives."""

    def fetch_characters(self, page: int = 1, filters: FilterSet | None = None) -> CharacterPage: ...

    def fetch_character(self, character_id: int) -> Character: ...


def validate_filters(filters: FilterSet) -> ValidationError | None:
    """Check the enumerated filters against their known values (case-insensitive)."""
    enumerated = {"status": FilterOptions.STATUS, "gender": FilterOptions.GENDER}
    for key, options in enumerated.items():
        value = getattr(filters, key)
        if value is not None and value.lower() not in options:
            return ValidationError(key, value, f"Unknown {key} '{value}', expected one of: {', '.join(options)}")
    return None


class ViewStateSynchronizer:
    """Sole writer of the view state.

    Every transition updates the state and the address bar together, with no await
    in between, and then asks the coordinator for the matching signature. Consumer
    operations never raise; they resolve to a ``FetchOutcome``.
    """

    def __init__(
        self,
        gateway: CatalogGateway,
        coordinator: FetchCoordinator | None = None,
        address_bar: AddressBar | None = None,
    ) -> None:
        self.gateway = gateway
        # An empty coordinator is falsy, so test against None
        self.coordinator = coordinator if coordinator is not None else FetchCoordinator()
        self.address_bar: AddressBar = address_bar if address_bar is not None else MemoryAddressBar()

        self._state = ViewState()
        self._staged = FilterSet()
        self._active = False
        self._last_page: CharacterPage | None = None
        self._last_page_filters: FilterSet | None = None
        self.selected_character_id: int | None = None

    # Read side

    def get_view_state(self) -> ViewState:
        return self._state

    @property
    def current_signature(self) -> RequestSignature:
        return collection_signature(self._state.page, self._state.filters)

    def current_url(self) -> str:
        """Bookmarkable query string of the committed state, with a leading ``?``."""
        return f"?{view_state_to_query(self._state)}"

    def get_current_result(self) -> CacheEntry | None:
        """Cache entry of the active collection signature, None before the first request."""
        return self.coordinator.get_entry(self.current_signature)

    def get_selected_result(self) -> CacheEntry | None:
        if self.selected_character_id is None:
            return None
        return self.coordinator.get_entry(character_signature(self.selected_character_id))

    @property
    def last_page(self) -> CharacterPage | None:
        """Most recent successful page for the committed filters."""
        if self._last_page_filters != self._state.filters:
            return None
        return self._last_page

    @property
    def total_pages(self) -> int | None:
        page = self.last_page
        return page.total_pages if page is not None else None

    @property
    def staged_filters(self) -> FilterSet:
        return self._staged

    @property
    def has_active_filters(self) -> bool:
        return not self._staged.is_empty()

    # Activation

    def activate(self) -> ViewState:
        """Derive the view state from the address bar.

        This is the only path that reads the address bar; it runs on first use and
        again after back/forward navigation. The location is rewritten in canonical
        form without adding a history entry.
        """
        self._state = view_state_from_query(self.address_bar.location)
        self.address_bar.replace(view_state_to_query(self._state))
        self._staged = self._state.filters
        self._active = True
        logger.info(f"Activated at {self.current_url()}")
        return self._state

    async def load(self) -> FetchOutcome:
        """Resolve the active signature, activating first if needed."""
        if not self._active:
            self.activate()
        return await self._resolve_collection()

    async def navigate_back(self) -> FetchOutcome:
        if not self.address_bar.back():
            return FetchOutcome.failure(ValidationError("history", "back", "No earlier entry in history"))
        self.activate()
        return await self._resolve_collection()

    async def navigate_forward(self) -> FetchOutcome:
        if not self.address_bar.forward():
            return FetchOutcome.failure(ValidationError("history", "forward", "No later entry in history"))
        self.activate()
        return await self._resolve_collection()

    # Staging

    def stage_filter(self, key: str, value: str | None) -> FetchOutcome:
        """Edit one staged filter. Nothing is fetched or written until a commit."""
        if key not in FILTER_KEYS:
            return FetchOutcome.failure(ValidationError(key, value, f"Unknown filter '{key}'"))
        self._staged = self._staged.with_value(key, value)
        return FetchOutcome(ok=True, payload=self._staged)

    def discard_staged(self) -> FilterSet:
        """Drop uncommitted edits."""
        self._staged = self._state.filters
        return self._staged

    # Transitions

    def _commit(self, state: ViewState) -> None:
        self._state = state
        self.address_bar.push(view_state_to_query(state))

    async def submit_filters(self, filters: FilterSet | Mapping[str, Any] | None = None) -> FetchOutcome:
        """Commit filters (the staged ones by default) and fetch page 1."""
        if filters is None:
            filters = self._staged
        elif not isinstance(filters, FilterSet):
            try:
                filters = FilterSet(**filters)
            except (PydanticValidationError, TypeError) as e:
                logger.warning(f"Rejected malformed filters {dict(filters)!r}")
                return FetchOutcome.failure(ValidationError("filters", dict(filters), f"Malformed filters: {e}"))

        error = validate_filters(filters)
        if error is not None:
            logger.warning(f"Rejected filter commit: {error}")
            return FetchOutcome.failure(error)

        self._staged = filters
        self._commit(ViewState(page=1, filters=filters))
        logger.info(f"Committed filters {filters.active()}")
        return await self._resolve_collection()

    async def clear_filters(self) -> FetchOutcome:
        return await self.submit_filters(FilterSet())

    async def go_to_page(self, page: int) -> FetchOutcome:
        """Move to another page of the committed result set.

        The target must lie within the page count of the last successful page for the
        committed filters; otherwise nothing changes and nothing is fetched.
        """
        total_pages = self.total_pages
        if total_pages is None or not 1 <= page <= total_pages:
            error = PageOutOfRangeError(page, total_pages)
            logger.warning(f"Rejected page change: {error}")
            return FetchOutcome.failure(error)

        self._commit(ViewState(page=page, filters=self._state.filters))
        logger.info(f"Moved to page {page}")
        return await self._resolve_collection()

    async def next_page(self) -> FetchOutcome:
        return await self.go_to_page(self._state.page + 1)

    async def previous_page(self) -> FetchOutcome:
        return await self.go_to_page(self._state.page - 1)

    async def refresh(self) -> FetchOutcome:
        """Re-fetch the active signature without changing state or address bar."""
        self.coordinator.invalidate(self.current_signature)
        return await self._resolve_collection()

    async def select_character(self, character_id: int) -> FetchOutcome:
        """Resolve a character independently of the collection."""
        if character_id < 1:
            return FetchOutcome.failure(ValidationError("id", character_id, "Character id must be positive"))

        self.selected_character_id = character_id
        signature = character_signature(character_id)

        async def loader() -> Character:
            return await asyncio.to_thread(self.gateway.fetch_character, character_id)

        return await self.coordinator.resolve(signature, loader)

    async def refresh_character(self) -> FetchOutcome:
        """Re-fetch the selected character."""
        if self.selected_character_id is None:
            return FetchOutcome.failure(ValidationError("id", None, "No character selected"))
        self.coordinator.invalidate(character_signature(self.selected_character_id))
        return await self.select_character(self.selected_character_id)

    async def _resolve_collection(self) -> FetchOutcome:
        state = self._state
        signature = collection_signature(state.page, state.filters)

        async def loader() -> CharacterPage:
            return await asyncio.to_thread(self.gateway.fetch_characters, state.page, state.filters)

        outcome = await self.coordinator.resolve(signature, loader)

        if signature != self.current_signature:
            logger.debug(f"Dropping superseded result for {signature}")
        elif outcome.ok:
            self._last_page = outcome.payload
            self._last_page_filters = state.filters
        else:
            logger.info(f"Fetch for {signature} failed: {outcome.error}")
        return outcome
