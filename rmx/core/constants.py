"""
Constants and configuration values for the character catalog explorer.
"""

from enum import IntEnum, StrEnum

# API Base URL
API_BASE_URL = "https://rickandmortyapi.com/api"

# Version
PACKAGE_VERSION = "0.1.0"

# Recognized filter keys, in query-string order
FILTER_KEYS: tuple[str, ...] = ("name", "status", "species", "gender")

PAGE_PARAM = "page"


class APIConstants(IntEnum):
    """API-related limits and constants."""

    REQUEST_TIMEOUT = 30
    BACKOFF_FACTOR = 1
    BACKOFF_MAX_VALUE = 30


class CacheConstants(IntEnum):
    """Request cache defaults."""

    STALE_TIME_SECONDS = 300  # 5 minutes
    RETRY_ATTEMPTS = 2  # Additional attempts after the first


class RequestKind(StrEnum):
    """Kinds of remote reads a signature can describe."""

    CHARACTERS = "characters"
    CHARACTER = "character"


class FilterOptions:
    """Known values offered for the enumerated filters."""

    STATUS: tuple[str, ...] = ("alive", "dead", "unknown")
    SPECIES: tuple[str, ...] = (
        "human",
        "alien",
        "humanoid",
        "robot",
        "cronenberg",
        "disease",
        "poopybutthole",
    )
    GENDER: tuple[str, ...] = ("male", "female", "genderless", "unknown")


class FormattingConstants(IntEnum):
    """Formatting constants."""

    JSON_INDENT = 2


class TUIConstants(IntEnum):
    """TUI-specific constants."""

    MIN_SEARCH_LENGTH = 2
    MAX_SEARCH_RESULTS = 20
    SEARCH_THRESHOLD = 60


class ProgressBarConstants(IntEnum):
    """Progress bar update intervals."""

    MIN_UPDATE_INTERVAL = 100  # milliseconds
    MAX_UPDATE_INTERVAL = 300  # milliseconds
