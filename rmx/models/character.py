"""Character-related data models for the catalog API."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

CharacterStatus = Literal["Alive", "Dead", "unknown"]
CharacterGender = Literal["Female", "Male", "Genderless", "unknown"]


class LocationRef(BaseModel):
    """Reference to a location (current or origin) carried by a character."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str = ""

    @property
    def id(self) -> int | None:
        """Location identifier taken from the trailing URL segment."""
        tail = self.url.rstrip("/").rsplit("/", 1)[-1] if self.url else ""
        return int(tail) if tail.isdigit() else None


class Character(BaseModel):
    """Complete character model matching API response."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    status: CharacterStatus = "unknown"
    species: str = ""
    type: str = ""
    gender: CharacterGender = "unknown"
    origin: LocationRef
    location: LocationRef
    image: str = ""
    episode: list[str] = Field(default_factory=list)
    url: str = ""
    created: datetime | None = None

    @field_validator("status", "gender", mode="before")
    @classmethod
    def normalize_unknown(cls, v: object) -> object:
        """The API spells the unknown value in lowercase; accept any casing."""
        if isinstance(v, str) and v.lower() == "unknown":
            return "unknown"
        return v

    @property
    def episode_count(self) -> int:
        """Number of episodes the character appears in."""
        return len(self.episode)


class PageInfo(BaseModel):
    """Pagination metadata of a collection response."""

    model_config = ConfigDict(frozen=True)

    count: int
    pages: int
    next: str | None = None
    prev: str | None = None


class CharacterPage(BaseModel):
    """One page of a character collection query."""

    model_config = ConfigDict(frozen=True)

    info: PageInfo
    results: list[Character] = Field(default_factory=list)

    @property
    def total_count(self) -> int:
        return self.info.count

    @property
    def total_pages(self) -> int:
        return self.info.pages

    @property
    def has_next(self) -> bool:
        """Check if a following page exists."""
        return self.info.next is not None

    @property
    def has_previous(self) -> bool:
        """Check if a preceding page exists."""
        return self.info.prev is not None
