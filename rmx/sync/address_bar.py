"""Address bar abstraction with back/forward history."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class AddressBar(Protocol):
    """Where the bookmarkable query string of the current view lives."""

    @property
    def location(self) -> str: ...

    def push(self, query: str) -> None: ...

    def replace(self, query: str) -> None: ...

    def back(self) -> bool: ...

    def forward(self) -> bool: ...


class MemoryAddressBar:
    """In-memory address bar keeping a browser-like history stack."""

    def __init__(self, initial: str = "") -> None:
        self._history: list[str] = [initial.lstrip("?")]
        self._index = 0

    @property
    def location(self) -> str:
        """Current query string, without a leading ``?``."""
        return self._history[self._index]

    @property
    def history(self) -> list[str]:
        return list(self._history)

    @property
    def can_go_back(self) -> bool:
        return self._index > 0

    @property
    def can_go_forward(self) -> bool:
        return self._index < len(self._history) - 1

    def push(self, query: str) -> None:
        """Add a history entry, dropping any forward entries."""
        query = query.lstrip("?")
        if query == self.location:
            return
        del self._history[self._index + 1 :]
        self._history.append(query)
        self._index += 1
        logger.debug(f"Address bar -> ?{query}")

    def replace(self, query: str) -> None:
        self._history[self._index] = query.lstrip("?")

    def back(self) -> bool:
        """Move one entry back. Returns False at the start of history."""
        if not self.can_go_back:
            return False
        self._index -= 1
        return True

    def forward(self) -> bool:
        """Move one entry forward. Returns False at the end of history."""
        if not self.can_go_forward:
            return False
        self._index += 1
        return True
