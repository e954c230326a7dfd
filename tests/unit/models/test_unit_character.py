"""Tests for models/character.py: API payload parsing."""

from __future__ import annotations

from rmx.models.character import Character, CharacterPage, LocationRef


class TestCharacter:
    def test_parses_api_payload(self, sample_character):
        assert sample_character.id == 1
        assert sample_character.status == "Alive"
        assert sample_character.origin.name == "Earth (C-137)"
        assert sample_character.episode_count == 2
        assert sample_character.created.year == 2017

    def test_unknown_casing_normalized(self, character_payload):
        character_payload.update(status="Unknown", gender="UNKNOWN")
        character = Character.model_validate(character_payload)
        assert character.status == "unknown"
        assert character.gender == "unknown"


class TestLocationRef:
    def test_id_from_url(self):
        assert LocationRef(name="Earth", url="https://rickandmortyapi.com/api/location/20").id == 20

    def test_no_url(self):
        assert LocationRef(name="unknown").id is None


class TestCharacterPage:
    def test_pagination_properties(self, sample_page):
        assert sample_page.total_count == 100
        assert sample_page.total_pages == 5
        assert sample_page.has_next
        assert not sample_page.has_previous

    def test_last_page(self):
        page = CharacterPage.model_validate({"info": {"count": 1, "pages": 1, "next": None, "prev": None}})
        assert not page.has_next
        assert page.results == []
