"""Shared components for character list rendering."""

import logging
from datetime import datetime
from typing import Any

import dateparser
from pydantic import BaseModel, Field

from rmx.models.character import Character

logger = logging.getLogger(__name__)

STATUS_STYLES = {
    "Alive": "bold green",
    "Dead": "bold red",
    "unknown": "dim",
}


class ColumnDefinition(BaseModel):
    """Configuration for a table column."""

    key: str = Field(description="Unique key for the column")
    label: str = Field(description="Display label for the column header")
    width: int | None = Field(default=None, description="Column width (None for dynamic)")
    # Rich table styling options
    style: str | None = Field(default=None, description="Rich text style for the column")
    no_wrap: bool = Field(default=False, description="Prevent text wrapping")
    overflow: str | None = Field(default=None, description="Text overflow handling: fold, crop, ellipsis")
    max_width: int | None = Field(default=None, description="Maximum column width")

    def get_table_kwargs(self) -> dict[str, Any]:
        """Get kwargs for Rich table.add_column(), excluding None values."""
        kwargs: dict[str, Any] = {"no_wrap": self.no_wrap}
        if self.style:
            kwargs["style"] = self.style
        if self.width:
            kwargs["width"] = self.width
        if self.overflow:
            kwargs["overflow"] = self.overflow
        if self.max_width:
            kwargs["max_width"] = self.max_width
        return kwargs


# Centralized column configuration used by table, TUI and CSV output
COLUMN_CONFIG = [
    ColumnDefinition(key="id", label="ID", width=5, style="cyan", no_wrap=True),
    ColumnDefinition(key="name", label="Name", width=28, style="magenta", overflow="fold"),
    ColumnDefinition(key="status", label="Status", width=8, no_wrap=True),
    ColumnDefinition(key="species", label="Species", width=14, overflow="fold"),
    ColumnDefinition(key="gender", label="Gender", width=10, no_wrap=True),
    ColumnDefinition(key="location", label="Location", width=30, style="green", overflow="fold", max_width=30),
    ColumnDefinition(key="episodes", label="Episodes", width=8, style="dim", no_wrap=True),
]


class CharacterTableRow(BaseModel):
    """Represents a row of character data for table display."""

    character_id: str = Field(description="Character identifier")
    name: str = Field(description="Character name")
    status: str = Field(description="Life status")
    species: str = Field(description="Species")
    gender: str = Field(description="Gender")
    location: str = Field(description="Current location name")
    episodes: str = Field(description="Episode count")

    def to_tuple(self) -> tuple[str, ...]:
        """Convert to tuple for table display, in COLUMN_CONFIG order."""
        return (self.character_id, self.name, self.status, self.species, self.gender, self.location, self.episodes)

    def to_dict(self) -> dict[str, str]:
        return dict(zip([col.key for col in COLUMN_CONFIG], self.to_tuple(), strict=True))


class CharacterDataTransformer:
    """Handles data transformation for character objects."""

    def extract_row(self, character: Character) -> CharacterTableRow:
        """Extract the table row of a character."""
        return CharacterTableRow(
            character_id=str(character.id),
            name=character.name,
            status=character.status,
            species=character.species,
            gender=character.gender,
            location=character.location.name,
            episodes=str(character.episode_count),
        )

    def status_style(self, status: str) -> str:
        return STATUS_STYLES.get(status, "")

    def format_created_date(self, created_at: Any) -> str:
        """Format the creation date to human-readable format."""
        if not created_at:
            return ""

        try:
            if isinstance(created_at, datetime):
                dt = created_at
            else:
                dt = dateparser.parse(str(created_at))
            return dt.strftime("%Y-%m-%d") if dt else str(created_at)
        except (ValueError, TypeError, AttributeError) as e:
            logger.debug(f"Failed to format date '{created_at}': {e}")
            return str(created_at)

    def extract_details(self, character: Character) -> list[tuple[str, str]]:
        """Label/value pairs for the character detail card."""
        details = [
            ("Status", character.status),
            ("Species", character.species),
            ("Gender", character.gender),
        ]
        if character.type:
            details.append(("Type", character.type))
        details.extend(
            [
                ("Current Location", character.location.name),
                ("Origin", character.origin.name),
                ("Episodes", self.format_episode_count(character.episode_count)),
                ("Created", self.format_created_date(character.created)),
            ]
        )
        return details

    def format_episode_count(self, count: int) -> str:
        return f"Appeared in {count} episode{'s' if count != 1 else ''}"
