"""Request signature derivation."""

from rmx.core.constants import PAGE_PARAM, RequestKind
from rmx.models.cache import RequestSignature
from rmx.models.filters import FilterSet


def collection_signature(page: int, filters: FilterSet | None = None) -> RequestSignature:
    """Build the signature of a character collection query.

    Args:
        page: 1-based page number
        filters: Filters of the query; empty values do not take part in the key

    Returns:
        Signature whose params are sorted by name
    """
    params = dict((filters or FilterSet()).active())
    params[PAGE_PARAM] = str(page)
    return RequestSignature(kind=RequestKind.CHARACTERS.value, params=tuple(sorted(params.items())))


def character_signature(character_id: int) -> RequestSignature:
    """Build the signature of a single-character query."""
    return RequestSignature(kind=RequestKind.CHARACTER.value, params=(("id", str(character_id)),))
