"""Fan out to both image providers and merge the results into one pet list."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Mapping

from src.data.normalizer import PetNormalizer
from src.data.providers import ImageSourceAdapter
from src.data.schemas import Pet, RawImageRecord, Species

logger = logging.getLogger(__name__)


class PetAggregator:
    """Combine cat and dog providers into a single shuffled collection.

    Provider calls are blocking ``requests`` calls; they run in worker
    threads so both species are fetched concurrently and the event loop
    stays free.

    Args:
        adapters: One image source adapter per species.
        normalizer: Normalizer used for every fetched record.
        rng: Random source for shuffling. Defaults to the normalizer's.
    """

    def __init__(
        self,
        adapters: Mapping[Species, ImageSourceAdapter],
        normalizer: PetNormalizer | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.adapters = dict(adapters)
        self.normalizer = normalizer or PetNormalizer(rng)
        self.rng = rng or self.normalizer.rng

    async def _fetch_raw(self, species: Species, limit: int) -> list[RawImageRecord]:
        adapter = self.adapters[species]
        return await asyncio.to_thread(adapter.fetch_images, limit, True)

    async def fetch_all_pets(self, limit_per_species: int = 10, start_index: int = 0) -> list[Pet]:
        """Fetch cats and dogs concurrently and return them shuffled.

        A failing provider is logged and contributes no pets, so one outage
        does not hide the other species.

        Args:
            limit_per_species: Images requested from each provider.
            start_index: Name rotation index for the first pet of each species.

        Returns:
            At most ``2 * limit_per_species`` pets in random order.
        """
        _check_limit(limit_per_species)
        species_order = [Species.CAT, Species.DOG]
        results = await asyncio.gather(
            *(self._fetch_raw(species, limit_per_species) for species in species_order),
            return_exceptions=True,
        )

        pets: list[Pet] = []
        for species, result in zip(species_order, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning("Fetching %s images failed, continuing without them: %s",
                               species.value, result)
                continue
            pets.extend(self.normalizer.normalize_batch(result, species, start_index))

        shuffled = list(pets)
        self.rng.shuffle(shuffled)
        logger.info("Aggregated %d pets", len(shuffled))
        return shuffled

    async def fetch_pets_by_type(
        self, species: Species, limit: int = 20, start_index: int = 0
    ) -> list[Pet]:
        """Fetch pets of a single species.

        Provider errors propagate since there is no other species to fall back on.

        Args:
            species: Species to fetch.
            limit: Images requested from the provider.
            start_index: Name rotation index for the first pet.

        Returns:
            Pets in provider order.
        """
        _check_limit(limit)
        records = await self._fetch_raw(species, limit)
        return self.normalizer.normalize_batch(records, species, start_index)

    async def fetch_available_pets(
        self, limit_per_species: int = 10, start_index: int = 0
    ) -> list[Pet]:
        """Fetch both species and keep only pets marked available.

        Availability is sampled anew on every call, so repeated calls return
        different subsets.
        """
        pets = await self.fetch_all_pets(limit_per_species, start_index)
        return [pet for pet in pets if pet.available]


def _check_limit(limit: int) -> None:
    if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")
