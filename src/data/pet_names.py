"""Display names and fallback breeds for generated pet profiles."""

from __future__ import annotations

import random

from src.data.schemas import BreedInfo, Species

PET_NAMES: dict[Species, tuple[str, ...]] = {
    Species.CAT: (
        "Luna", "Milo", "Bella", "Charlie", "Lucy", "Max", "Daisy", "Oliver",
        "Lily", "Simba", "Nala", "Whiskers", "Shadow", "Mittens", "Tiger",
        "Smokey", "Ginger", "Coco", "Pepper", "Oreo", "Jasper", "Mocha",
        "Phoenix", "Zoe", "Maya", "Leo", "Chloe", "Jack", "Sophie", "Felix",
    ),
    Species.DOG: (
        "Buddy", "Max", "Bella", "Charlie", "Lucy", "Cooper", "Daisy", "Milo",
        "Luna", "Rocky", "Sadie", "Bear", "Molly", "Duke", "Stella", "Tucker",
        "Penny", "Zeus", "Lola", "Jack", "Roxy", "Bentley", "Ruby", "Oscar",
        "Lily", "Rex", "Maya", "Jax", "Zoe", "Thor", "Nala", "Apollo",
    ),
}

COMMON_BREEDS: dict[Species, tuple[str, ...]] = {
    Species.CAT: (
        "Domestic Shorthair",
        "Domestic Longhair",
        "Siamese",
        "Persian",
        "Maine Coon",
        "British Shorthair",
    ),
    Species.DOG: (
        "Mixed Breed",
        "Labrador Retriever",
        "Golden Retriever",
        "German Shepherd",
        "Bulldog",
        "Beagle",
    ),
}


def get_pet_name(species: Species, index: int) -> str:
    """Return the name at ``index`` in the species rotation, wrapping around.

    Args:
        species: Species whose name list is used.
        index: Position in the rotation; any non-negative integer.

    Returns:
        Display name.
    """
    names = PET_NAMES[species]
    return names[index % len(names)]


def get_proper_breed(breed: BreedInfo | None, species: Species, rng: random.Random) -> str:
    """Return the provider breed name, or a common breed when none is given.

    Args:
        breed: Breed descriptor from the provider, if any.
        species: Species used to pick the fallback list.
        rng: Random source for the fallback choice.

    Returns:
        Non-empty breed name.
    """
    if breed is not None and breed.name and breed.name.strip():
        return breed.name
    return rng.choice(COMMON_BREEDS[species])
