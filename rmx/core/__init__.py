"""Core functionality module."""

from rmx.core.constants import FormattingConstants
from rmx.core.highlighting import highlight_text
from rmx.core.search import CharacterSearcher

__all__ = [
    "CharacterSearcher",
    "FormattingConstants",
    "highlight_text",
]
