"""Shared test fixtures for all unit tests.

Provides sample API payloads, a fake blocking gateway and a request cache that
retries without waiting. No network access: all I/O is faked.
"""

from __future__ import annotations

import threading
from typing import Any

import backoff
import pytest

from rmx.cache.coordinator import FetchCoordinator
from rmx.exceptions import CharacterNotFoundError, NotFoundError
from rmx.models.character import Character, CharacterPage
from rmx.models.filters import FilterSet
from rmx.sync.address_bar import MemoryAddressBar
from rmx.sync.synchronizer import ViewStateSynchronizer


# === HELPERS: Sample payloads ===


def make_character_payload(character_id: int = 1, name: str = "Rick Sanchez", **overrides: Any) -> dict[str, Any]:
    """Character JSON as returned by the API."""
    payload = {
        "id": character_id,
        "name": name,
        "status": "Alive",
        "species": "Human",
        "type": "",
        "gender": "Male",
        "origin": {"name": "Earth (C-137)", "url": "https://rickandmortyapi.com/api/location/1"},
        "location": {"name": "Citadel of Ricks", "url": "https://rickandmortyapi.com/api/location/3"},
        "image": f"https://rickandmortyapi.com/api/character/avatar/{character_id}.jpeg",
        "episode": [
            "https://rickandmortyapi.com/api/episode/1",
            "https://rickandmortyapi.com/api/episode/2",
        ],
        "url": f"https://rickandmortyapi.com/api/character/{character_id}",
        "created": "2017-11-04T18:48:46.250Z",
    }
    payload.update(overrides)
    return payload


def make_page_payload(page: int = 1, pages: int = 5, count: int = 100, per_page: int = 3) -> dict[str, Any]:
    """Collection JSON as returned by the API."""
    base = "https://rickandmortyapi.com/api/character"
    first_id = (page - 1) * per_page + 1
    return {
        "info": {
            "count": count,
            "pages": pages,
            "next": f"{base}?page={page + 1}" if page < pages else None,
            "prev": f"{base}?page={page - 1}" if page > 1 else None,
        },
        "results": [make_character_payload(i, f"Character {i}") for i in range(first_id, first_id + per_page)],
    }


class FakeGateway:
    """Blocking gateway double recording every call.

    ``gate`` makes calls wait until it is set, ``failures`` queues exceptions raised
    by the next collection calls, and ``not_found`` makes collection calls report
    no matches.
    """

    def __init__(self, pages: int = 5) -> None:
        self.pages = pages
        self.collection_calls: list[tuple[int, FilterSet]] = []
        self.character_calls: list[int] = []
        self.failures: list[Exception] = []
        self.character_failures: list[Exception] = []
        self.not_found = False
        self.gate: threading.Event | None = None

    def _wait(self) -> None:
        if self.gate is not None:
            self.gate.wait(timeout=5)

    def fetch_characters(self, page: int = 1, filters: FilterSet | None = None) -> CharacterPage:
        self.collection_calls.append((page, filters or FilterSet()))
        self._wait()
        if self.failures:
            raise self.failures.pop(0)
        if self.not_found:
            raise NotFoundError("No characters found matching your criteria")
        return CharacterPage.model_validate(make_page_payload(page=page, pages=self.pages))

    def fetch_character(self, character_id: int) -> Character:
        self.character_calls.append(character_id)
        self._wait()
        if self.character_failures:
            raise self.character_failures.pop(0)
        if character_id > 1000:
            raise CharacterNotFoundError(character_id)
        return Character.model_validate(make_character_payload(character_id, f"Character {character_id}"))


# === FIXTURES ===


@pytest.fixture
def character_payload() -> dict[str, Any]:
    return make_character_payload()


@pytest.fixture
def page_payload() -> dict[str, Any]:
    return make_page_payload()


@pytest.fixture
def sample_character(character_payload: dict[str, Any]) -> Character:
    return Character.model_validate(character_payload)


@pytest.fixture
def sample_page(page_payload: dict[str, Any]) -> CharacterPage:
    return CharacterPage.model_validate(page_payload)


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def coordinator() -> FetchCoordinator:
    """Request cache with the default retry count and no waiting between attempts."""
    return FetchCoordinator(wait_gen=backoff.constant, wait_gen_kwargs={"interval": 0})


@pytest.fixture
def address_bar() -> MemoryAddressBar:
    return MemoryAddressBar()


@pytest.fixture
def synchronizer(
    fake_gateway: FakeGateway, coordinator: FetchCoordinator, address_bar: MemoryAddressBar
) -> ViewStateSynchronizer:
    return ViewStateSynchronizer(fake_gateway, coordinator, address_bar)
