"""Session helpers wiring the API client, request cache and synchronizer."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from rich.logging import RichHandler

from rmx.api.client import CatalogAPIClient
from rmx.cache.coordinator import FetchCoordinator
from rmx.config import Config
from rmx.core.constants import APIConstants
from rmx.models.filters import FilterSet, ViewState
from rmx.sync.address_bar import MemoryAddressBar
from rmx.sync.synchronizer import ViewStateSynchronizer
from rmx.sync.url_state import view_state_from_query, view_state_to_query


def setup_logging(level: str) -> None:
    """Route log records through Rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_coordinator(config: Config) -> FetchCoordinator:
    """Create a request cache honoring the configured staleness and retry policy."""
    return FetchCoordinator(
        stale_time=config.stale_time_seconds,
        retry_attempts=config.retry_attempts,
        wait_gen_kwargs={"factor": APIConstants.BACKOFF_FACTOR, "max_value": config.backoff_max_value},
    )


def build_start_query(
    url: str | None = None,
    page: int | None = None,
    **filter_overrides: str | None,
) -> str:
    """Combine a bookmarked query string with explicit command-line options.

    Options given on the command line win over the values in the query string.

    Returns:
        Query string to seed the address bar with
    """
    state = view_state_from_query(url or "")
    overrides = {key: value for key, value in filter_overrides.items() if value is not None}
    filters = FilterSet(**{**state.filters.model_dump(), **overrides})
    return view_state_to_query(ViewState(page=page or state.page, filters=filters))


@contextmanager
def catalog_session(config: Config, start_query: str = "") -> Iterator[ViewStateSynchronizer]:
    """Open an API session and yield an activated synchronizer."""
    client = CatalogAPIClient(config.api_base_url, config.request_timeout)
    with client:
        synchronizer = ViewStateSynchronizer(client, build_coordinator(config), MemoryAddressBar(start_query))
        synchronizer.activate()
        yield synchronizer
