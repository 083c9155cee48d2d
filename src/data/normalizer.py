"""Normalize provider image records into canonical Pet objects.

Providers only supply images and breed data. Age, availability and, when
breed data is missing, the breed itself are simulated here with an injectable
random source; a deployment backed by real shelter records would replace
those fields instead of sampling them.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable

from src.data.pet_names import get_pet_name, get_proper_breed
from src.data.schemas import Pet, PetMetadata, RawImageRecord, Species

logger = logging.getLogger(__name__)

MIN_AGE_MONTHS = 3
MAX_AGE_MONTHS = 122
AVAILABILITY_RATE = 0.8


class PetNormalizer:
    """Turn raw provider records into Pet objects.

    Naming is positional: the caller passes the rotation index explicitly,
    so the same inputs always yield the same names.

    Args:
        rng: Random source for simulated fields. Seed it for reproducible output.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def normalize(self, raw: RawImageRecord, species: Species, index: int = 0) -> Pet:
        """Build a Pet from one provider record.

        Missing or malformed fields fall back to defaults; this never raises
        on provider data.

        Args:
            raw: Provider image record.
            species: Species of the provider the record came from.
            index: Position in the species name rotation.

        Returns:
            Normalized Pet.
        """
        breed = raw.primary_breed
        breed_name = get_proper_breed(breed, species, self.rng)
        age_months = self.rng.randint(MIN_AGE_MONTHS, MAX_AGE_MONTHS)
        available = self.rng.random() < AVAILABILITY_RATE

        pet_id = raw.id or f"{species.value}-{index}-{self.rng.getrandbits(32):08x}"
        description = (
            breed.description
            if breed is not None and breed.description
            else f"A lovely {breed_name} {species.value} looking for a forever home."
        )

        metadata = PetMetadata(
            breed_id=breed.id if breed else None,
            temperament=(breed.temperament if breed else None) or "Friendly",
            origin=(breed.origin if breed else None) or "Unknown",
            life_span=(breed.life_span if breed else None) or "Unknown",
            weight=(breed.weight.metric if breed and breed.weight else None) or "Unknown",
            height=(breed.height.metric if breed and breed.height else None) or "Unknown",
            image_id=raw.id,
            api_data=raw.model_dump(),
        )

        return Pet(
            id=pet_id,
            name=get_pet_name(species, index),
            species=species,
            breed=breed_name,
            image_url=raw.url or "",
            age_months=age_months,
            description=description,
            available=available,
            metadata=metadata,
        )

    def normalize_batch(
        self,
        records: Iterable[RawImageRecord],
        species: Species,
        start_index: int = 0,
    ) -> list[Pet]:
        """Normalize records in order, assigning consecutive name indices.

        Args:
            records: Provider records for a single species.
            species: Species of the records.
            start_index: Rotation index given to the first record.

        Returns:
            Pets in the same order as ``records``.
        """
        pets = [
            self.normalize(raw, species, index)
            for index, raw in enumerate(records, start=start_index)
        ]
        logger.debug("Normalized %d %s records", len(pets), species.value)
        return pets
