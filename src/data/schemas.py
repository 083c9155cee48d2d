"""Pydantic models for provider records, pets and filter criteria."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class Species(str, Enum):
    """Species served by the two image providers."""

    CAT = "cat"
    DOG = "dog"


def _as_text(value: Any) -> str | None:
    """Coerce scalar provider values to text; drop containers and None."""
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


class Measurement(BaseModel):
    """Weight or height reported by a provider in both unit systems."""

    model_config = ConfigDict(extra="ignore")

    metric: str | None = None
    imperial: str | None = None

    @field_validator("metric", "imperial", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _as_text(value)


class BreedInfo(BaseModel):
    """Breed descriptor attached to a provider image."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str | None = None
    description: str | None = None
    temperament: str | None = None
    origin: str | None = None
    life_span: str | None = None
    weight: Measurement | None = None
    height: Measurement | None = None

    @field_validator(
        "id", "name", "description", "temperament", "origin", "life_span", mode="before"
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _as_text(value)

    @field_validator("weight", "height", mode="before")
    @classmethod
    def _coerce_measurement(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None


class RawImageRecord(BaseModel):
    """Image record as returned by The Cat API or The Dog API.

    Parsing is lenient: wrong-typed fields become None and malformed breed
    entries are dropped. Unknown provider fields are kept so the record can
    travel with the normalized pet for traceability.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str | None = None
    url: str | None = None
    width: int | None = None
    height: int | None = None
    breeds: list[BreedInfo] = Field(default_factory=list)

    @field_validator("id", "url", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _as_text(value)

    @field_validator("width", "height", mode="before")
    @classmethod
    def _coerce_int(cls, value: Any) -> int | None:
        return value if isinstance(value, int) and not isinstance(value, bool) else None

    @field_validator("breeds", mode="before")
    @classmethod
    def _coerce_breeds(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @property
    def primary_breed(self) -> BreedInfo | None:
        """Return the first breed descriptor, if any."""
        return self.breeds[0] if self.breeds else None


class PetMetadata(BaseModel):
    """Optional breed attributes plus the raw provider record."""

    breed_id: str | None = None
    temperament: str = "Friendly"
    origin: str = "Unknown"
    life_span: str = "Unknown"
    weight: str = "Unknown"
    height: str = "Unknown"
    image_id: str | None = None
    api_data: dict[str, Any] = Field(
        default_factory=dict,
        description="Original provider record, kept for reference",
    )


class Pet(BaseModel):
    """Canonical adoptable pet built from one provider image."""

    id: str = Field(min_length=1, description="Provider image id or generated fallback")
    name: str = Field(min_length=1)
    species: Species
    breed: str = Field(min_length=1)
    image_url: str = Field(description="Image shown on the pet card")
    age_months: int = Field(ge=3, le=122)
    description: str
    available: bool = Field(description="Whether the pet can currently be adopted")
    metadata: PetMetadata = Field(default_factory=PetMetadata)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def age_display(self) -> str:
        """Human-readable age: months under a year, whole years otherwise."""
        if self.age_months < 12:
            return f"{self.age_months} months"
        years = self.age_months // 12
        return f"{years} year" if years == 1 else f"{years} years"


class FilterCriteria(BaseModel):
    """Transient filter for the loaded pet collection.

    ``None`` or ``"all"`` disables a criterion.
    """

    species: Species | Literal["all"] | None = None
    breed: str | None = None
    min_age: int | None = Field(default=None, ge=0)
    max_age: int | None = Field(default=None, ge=0)
