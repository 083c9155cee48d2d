"""Central application configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


def _optional_int(name: str) -> int | None:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


@dataclass(frozen=True)
class Config:
    """Central application configuration.

    Reads from environment variables with sensible defaults.
    API keys are optional: both image providers accept anonymous,
    rate-limited calls.
    """

    # Image providers
    cat_api_base_url: str = field(
        default_factory=lambda: os.getenv("CAT_API_BASE_URL", "https://api.thecatapi.com/v1")
    )
    cat_api_key: str = field(default_factory=lambda: os.getenv("CAT_API_KEY", ""))
    dog_api_base_url: str = field(
        default_factory=lambda: os.getenv("DOG_API_BASE_URL", "https://api.thedogapi.com/v1")
    )
    dog_api_key: str = field(default_factory=lambda: os.getenv("DOG_API_KEY", ""))
    image_size: str = field(default_factory=lambda: os.getenv("IMAGE_SIZE", "med"))

    # Pet pipeline
    default_limit_per_species: int = field(
        default_factory=lambda: int(os.getenv("DEFAULT_LIMIT_PER_SPECIES", "10"))
    )
    http_timeout_seconds: float | None = field(
        default_factory=lambda: _optional_float("HTTP_TIMEOUT_SECONDS")
    )
    random_seed: int | None = field(default_factory=lambda: _optional_int("RANDOM_SEED"))

    # Hosted backend
    supabase_url: str = field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    supabase_anon_key: str = field(default_factory=lambda: os.getenv("SUPABASE_ANON_KEY", ""))
    sign_out_max_attempts: int = field(
        default_factory=lambda: int(os.getenv("SIGN_OUT_MAX_ATTEMPTS", "3"))
    )
    sign_out_backoff_seconds: float = field(
        default_factory=lambda: float(os.getenv("SIGN_OUT_BACKOFF_SECONDS", "0.5"))
    )
    session_cookie_name: str = "pet_heaven_session"
    session_idle_ttl_seconds: float = field(
        default_factory=lambda: float(os.getenv("SESSION_IDLE_TTL_SECONDS", "1800"))
    )

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))

    @property
    def backend_configured(self) -> bool:
        """Return True when both Supabase URL and anon key are set."""
        return bool(self.supabase_url.strip() and self.supabase_anon_key.strip())


def get_config() -> Config:
    """Get application configuration.

    Returns:
        Config instance with values from environment or defaults.
    """
    return Config()
