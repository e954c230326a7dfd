"""Filter and view-state models."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rmx.core.constants import FILTER_KEYS


class FilterSet(BaseModel):
    """Optional filter predicates applied to a character collection query.

    Empty strings are normalized to ``None`` so that an empty value and an absent
    value are the same filter.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str | None = None
    status: str | None = None
    species: str | None = None
    gender: str | None = None

    @field_validator("name", "status", "species", "gender", mode="before")
    @classmethod
    def empty_to_none(cls, v: object) -> object:
        """Strip surrounding whitespace and treat empty values as unconstrained."""
        if isinstance(v, str):
            v = v.strip()
        if v is None or v == "":
            return None
        return v

    def active(self) -> dict[str, str]:
        """Get the non-empty filters in query-string order."""
        values = self.model_dump()
        return {key: values[key] for key in FILTER_KEYS if values[key]}

    def is_empty(self) -> bool:
        return not self.active()

    def with_value(self, key: str, value: str | None) -> "FilterSet":
        """Return a copy with one filter replaced."""
        values = self.model_dump()
        values[key] = value
        return FilterSet(**values)


class ViewState(BaseModel):
    """Canonical navigable state: current page and committed filters."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    filters: FilterSet = Field(default_factory=FilterSet)
