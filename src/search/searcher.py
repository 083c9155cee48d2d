"""In-memory search and filtering over the loaded pet collection."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from src.data.schemas import FilterCriteria, Pet
from src.errors import DataIntegrityError

logger = logging.getLogger(__name__)

_ALL = "all"


def search_by_text(term: str | None, pets: Sequence[Pet]) -> list[Pet]:
    """Return pets whose breed or name contains ``term``, ignoring case.

    Args:
        term: Search text. Blank input disables the search.
        pets: Pets to search.

    Returns:
        Matching pets in their original order, or all pets for a blank term.
    """
    if not term or not term.strip():
        return list(pets)

    needle = term.strip().lower()
    return [pet for pet in pets if needle in pet.breed.lower() or needle in pet.name.lower()]


def filter_pets(pets: Sequence[Pet], criteria: FilterCriteria | None = None) -> list[Pet]:
    """Apply every set criterion (logical AND), keeping the input order.

    Args:
        pets: Pets to filter.
        criteria: Filter values; unset or ``"all"`` entries are skipped.

    Returns:
        Pets matching all active criteria.
    """
    if criteria is None:
        return list(pets)

    filtered = list(pets)

    if criteria.species is not None and criteria.species != _ALL:
        filtered = [pet for pet in filtered if pet.species == criteria.species]

    if criteria.breed and criteria.breed != _ALL:
        breed = criteria.breed.lower()
        filtered = [pet for pet in filtered if breed in pet.breed.lower()]

    if criteria.min_age is not None:
        filtered = [pet for pet in filtered if pet.age_months >= criteria.min_age]

    if criteria.max_age is not None:
        filtered = [pet for pet in filtered if pet.age_months <= criteria.max_age]

    return filtered


def get_unique_breeds(pets: Sequence[Pet]) -> list[str]:
    """Return each breed once, sorted ascending."""
    return sorted({pet.breed for pet in pets})


def find_pet(pets: Sequence[Pet], pet_id: str) -> Pet:
    """Look up a pet by id in the loaded collection.

    Args:
        pets: Currently loaded pets.
        pet_id: Id submitted by the user.

    Returns:
        The matching pet.

    Raises:
        DataIntegrityError: If no loaded pet has this id.
    """
    for pet in pets:
        if pet.id == pet_id:
            return pet
    logger.warning("Pet id %r not found among %d loaded pets", pet_id, len(pets))
    raise DataIntegrityError(f"Pet {pet_id!r} is not in the loaded collection")
