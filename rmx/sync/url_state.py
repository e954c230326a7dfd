"""Pure conversions between view state and query strings."""

import logging
from urllib.parse import parse_qs, urlencode, urlsplit

from rmx.core.constants import FILTER_KEYS, PAGE_PARAM
from rmx.models.filters import FilterSet, ViewState

logger = logging.getLogger(__name__)


def view_state_to_query(state: ViewState) -> str:
    """Serialize a view state to a query string.

    ``page`` always comes first, followed by the non-empty filters in
    ``name, status, species, gender`` order. No leading ``?``.
    """
    params: list[tuple[str, str]] = [(PAGE_PARAM, str(state.page))]
    params.extend(state.filters.active().items())
    return urlencode(params)


def _parse_page(raw: str | None) -> int:
    if raw is None:
        return 1
    try:
        page = int(raw)
    except ValueError:
        logger.debug(f"Ignoring non-numeric page parameter {raw!r}")
        return 1
    return page if page >= 1 else 1


def view_state_from_query(query: str) -> ViewState:
    """Parse a query string (or a full URL) into a view state.

    Missing or invalid pages fall back to 1, missing or empty filters are absent,
    and unrecognized parameters are ignored.
    """
    if "?" in query:
        query = urlsplit(query).query
    values = parse_qs(query, keep_blank_values=True)

    def first(key: str) -> str | None:
        found = values.get(key)
        return found[0] if found else None

    filters = FilterSet(**{key: first(key) for key in FILTER_KEYS})
    return ViewState(page=_parse_page(first(PAGE_PARAM)), filters=filters)
