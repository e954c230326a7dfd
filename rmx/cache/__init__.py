"""Request cache module for rmx."""

from rmx.cache.coordinator import FetchCoordinator, Loader

__all__ = [
    "FetchCoordinator",
    "Loader",
]
