"""Fuzzy quick-find over the characters of a loaded page."""

import logging

from pydantic import BaseModel, ConfigDict
from rapidfuzz import fuzz, process

from rmx.core.constants import TUIConstants
from rmx.models.character import Character

logger = logging.getLogger(__name__)


class SearchHit(BaseModel):
    """A character matching a quick-find query."""

    model_config = ConfigDict(frozen=True)

    row_index: int
    character: Character
    score: float
    matched_substring: str


class CharacterSearcher:
    """Fuzzy search within one page of characters.

    Only the already-loaded page is searched; the remote is never queried.
    """

    def build_index(self, characters: list[Character]) -> dict[int, str]:
        """Map row index to the lowercase text searched for that row."""
        index = {}
        for row, character in enumerate(characters):
            # Name twice so it outweighs the other fields
            name = character.name.lower()
            parts = [name, name, character.species, character.type, character.location.name, character.origin.name]
            index[row] = " ".join(part.lower() for part in parts if part)
        return index

    def search(
        self,
        query: str,
        characters: list[Character],
        threshold: int = TUIConstants.SEARCH_THRESHOLD,
        limit: int = TUIConstants.MAX_SEARCH_RESULTS,
    ) -> list[SearchHit]:
        """Find characters whose text contains a fuzzy match of the query.

        Args:
            query: Search phrase
            characters: Characters of the current page
            threshold: Minimum score for fuzzy matches (0-100)
            limit: Maximum number of hits

        Returns:
            Hits sorted by score, best first
        """
        query_lower = query.strip().lower()
        if not query_lower or not characters:
            return []

        index = self.build_index(characters)

        # partial_ratio keeps the phrase together instead of matching scattered words
        matches = process.extract(
            query_lower,
            index,
            scorer=fuzz.partial_ratio,
            score_cutoff=threshold,
            limit=limit,
        )

        hits = []
        for search_text, score, row in matches:
            alignment = fuzz.partial_ratio_alignment(query_lower, search_text)
            if alignment:
                matched = search_text[alignment.dest_start : alignment.dest_end]
            else:
                matched = query_lower
            hits.append(SearchHit(row_index=row, character=characters[row], score=score, matched_substring=matched))

        logger.debug(f"Quick-find {query!r}: {len(hits)} hits")
        return hits
