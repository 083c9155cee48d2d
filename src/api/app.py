"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.sessions import SessionStore
from src.config import get_config
from src.data.aggregator import PetAggregator
from src.data.normalizer import PetNormalizer
from src.data.providers import build_adapters
from src.members.backend import SupabaseClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize shared resources on startup, clean up on shutdown.

    Creates the image adapters, the pet aggregator, the per-browser session
    store and, when Supabase is configured, the backend client shared by all
    requests.
    """
    config = get_config()

    app.state.config = config
    app.state.adapters = build_adapters(config)
    rng = random.Random(config.random_seed)
    app.state.aggregator = PetAggregator(app.state.adapters, PetNormalizer(rng), rng)
    app.state.sessions = SessionStore(config.session_idle_ttl_seconds)

    if config.backend_configured:
        app.state.backend = SupabaseClient(
            config.supabase_url,
            config.supabase_anon_key,
            timeout=config.http_timeout_seconds,
        )
        logger.info("Backend configured at %s", config.supabase_url)
    else:
        app.state.backend = None
        logger.warning("SUPABASE_URL/SUPABASE_ANON_KEY not set; member features disabled")

    yield

    for adapter in app.state.adapters.values():
        adapter.session.close()
    if app.state.backend is not None:
        app.state.backend.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Pet Heaven",
        description="Adoptable cats and dogs, member registration and adoption forms",
        version="0.1.0",
        lifespan=lifespan,
    )

    from src.api.routes import router

    app.include_router(router)

    return app
