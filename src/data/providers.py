"""Image source adapters for The Cat API and The Dog API."""

from __future__ import annotations

import logging

import requests

from src.config import Config
from src.data.schemas import BreedInfo, RawImageRecord, Species
from src.http_client import build_session, request_json

logger = logging.getLogger(__name__)

PROVIDER_NAMES = {
    Species.CAT: "Cat API",
    Species.DOG: "Dog API",
}


class ImageSourceAdapter:
    """Fetch images for one species from its provider.

    Both providers share the same REST shape, so a single class serves
    either one. The API key is optional; without it the provider applies
    its anonymous rate limits.

    Args:
        species: Species served by this provider.
        base_url: Provider base URL, e.g. ``https://api.thecatapi.com/v1``.
        api_key: Optional API key sent as ``x-api-key``.
        image_size: Image size requested from the provider.
        timeout: Optional request timeout in seconds.
        session: requests session to reuse; one is created if omitted.
    """

    def __init__(
        self,
        species: Species,
        base_url: str,
        api_key: str = "",
        *,
        image_size: str = "med",
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.species = species
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.image_size = image_size
        self.timeout = timeout
        self.session = session or build_session()

    @property
    def name(self) -> str:
        return PROVIDER_NAMES[self.species]

    def _headers(self) -> dict[str, str]:
        if self.api_key and self.api_key.strip():
            return {"x-api-key": self.api_key.strip()}
        return {}

    def _get(self, path: str, params: dict | None = None):
        return request_json(
            self.session,
            "GET",
            f"{self.base_url}{path}",
            source=self.name,
            timeout=self.timeout,
            params=params,
            headers=self._headers(),
        )

    def fetch_images(self, limit: int = 20, require_breed_info: bool = True) -> list[RawImageRecord]:
        """Fetch up to ``limit`` images from the provider.

        Args:
            limit: Number of images to request; must be positive.
            require_breed_info: Only request images that carry breed data.

        Returns:
            Records in provider order, at most ``limit`` of them.

        Raises:
            ValueError: If ``limit`` is not a positive integer.
            HttpStatusError: If the provider answers with a non-2xx status.
            TransportError: If the provider cannot be reached.
        """
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")

        params = {
            "limit": limit,
            "has_breeds": str(require_breed_info).lower(),
            "size": self.image_size,
        }
        data = self._get("/images/search", params)
        if not isinstance(data, list):
            logger.warning("%s returned a non-list payload for image search", self.name)
            return []

        records = [RawImageRecord.model_validate(item) for item in data if isinstance(item, dict)]
        logger.info("%s returned %d images (limit=%d)", self.name, len(records), limit)
        return records[:limit]

    def fetch_breeds(self) -> list[BreedInfo]:
        """Fetch every breed the provider knows about."""
        data = self._get("/breeds")
        if not isinstance(data, list):
            return []
        return [BreedInfo.model_validate(item) for item in data if isinstance(item, dict)]

    def fetch_image(self, image_id: str) -> RawImageRecord:
        """Fetch a single image record by its provider id."""
        data = self._get(f"/images/{image_id}")
        return RawImageRecord.model_validate(data if isinstance(data, dict) else {})


def build_adapters(
    config: Config, session: requests.Session | None = None
) -> dict[Species, ImageSourceAdapter]:
    """Create one adapter per species from configuration.

    Args:
        config: Application configuration.
        session: Optional shared requests session.

    Returns:
        Mapping of species to its adapter.
    """
    return {
        Species.CAT: ImageSourceAdapter(
            Species.CAT,
            config.cat_api_base_url,
            config.cat_api_key,
            image_size=config.image_size,
            timeout=config.http_timeout_seconds,
            session=session,
        ),
        Species.DOG: ImageSourceAdapter(
            Species.DOG,
            config.dog_api_base_url,
            config.dog_api_key,
            image_size=config.image_size,
            timeout=config.http_timeout_seconds,
            session=session,
        ),
    }
