"""Highlighting of filter and quick-find matches."""

import re

from rich.text import Text

MATCH_STYLE = "bold black on yellow"


def highlight_text(text: str, patterns: list[str], style: str = MATCH_STYLE) -> Text:
    """Highlight every case-insensitive occurrence of the patterns.

    Args:
        text: The text to highlight
        patterns: Substrings to highlight; earlier patterns win on overlap
        style: Rich style applied to matches

    Returns:
        Rich Text object with highlighted patterns
    """
    rich_text = Text(text)
    if not text or not patterns:
        return rich_text

    taken: list[tuple[int, int]] = []
    for pattern in patterns:
        if not pattern:
            continue
        for match in re.finditer(re.escape(pattern), text, flags=re.IGNORECASE):
            start, end = match.span()
            if any(start < t_end and end > t_start for t_start, t_end in taken):
                continue
            rich_text.stylize(style, start, end)
            taken.append((start, end))

    return rich_text
