"""Per-browser state kept between requests: the loaded pets and the auth session."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from src.data.schemas import Pet
from src.members.auth import AuthSession

logger = logging.getLogger(__name__)


@dataclass
class Visitor:
    """State of one browser, keyed by its session cookie.

    ``pets`` is the collection this browser is currently looking at; adoption
    requests are resolved against it, never against another visitor's.
    """

    pets: list[Pet] = field(default_factory=list)
    auth: AuthSession | None = None
    auth_expires_at: float | None = None
    last_seen: float = 0.0


class SessionStore:
    """In-process map of session ids to visitors with idle expiry.

    Visitors unseen for ``idle_ttl_seconds`` are evicted. A visitor's auth
    session is dropped once its access token lifetime has passed.

    Args:
        idle_ttl_seconds: Seconds of inactivity before a visitor is evicted.
        clock: Monotonic time source, replaceable in tests.
    """

    def __init__(
        self, idle_ttl_seconds: float = 1800.0, clock: Callable[[], float] = time.monotonic
    ) -> None:
        if idle_ttl_seconds <= 0:
            raise ValueError("idle_ttl_seconds must be positive")
        self.idle_ttl_seconds = idle_ttl_seconds
        self._clock = clock
        self._visitors: dict[str, Visitor] = {}

    def __len__(self) -> int:
        return len(self._visitors)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._visitors

    def get(self, session_id: str | None) -> Visitor | None:
        """Return a live visitor and mark it as seen, or None if unknown or expired."""
        if not session_id:
            return None
        visitor = self._visitors.get(session_id)
        if visitor is None:
            return None

        now = self._clock()
        if now - visitor.last_seen > self.idle_ttl_seconds:
            logger.debug("Session %s expired after inactivity", session_id[:8])
            del self._visitors[session_id]
            return None
        if visitor.auth_expires_at is not None and now >= visitor.auth_expires_at:
            logger.info("Auth session for %s expired", session_id[:8])
            visitor.auth = None
            visitor.auth_expires_at = None

        visitor.last_seen = now
        return visitor

    def create(self) -> tuple[str, Visitor]:
        """Start a new visitor, evicting expired ones first."""
        self.purge_expired()
        session_id = secrets.token_urlsafe(32)
        visitor = Visitor(last_seen=self._clock())
        self._visitors[session_id] = visitor
        return session_id, visitor

    def sign_in(self, session_id: str, auth: AuthSession) -> str:
        """Attach an authenticated session and rotate the visitor's id.

        The old id stops working immediately; pets loaded under it carry over.

        Args:
            session_id: Current id of the visitor.
            auth: Freshly authenticated session.

        Returns:
            The visitor's new session id.
        """
        visitor = self._visitors.pop(session_id, None) or Visitor()
        now = self._clock()
        expires_in = auth.tokens.expires_in if auth.tokens else None
        visitor.auth = auth
        visitor.auth_expires_at = now + expires_in if expires_in else None
        visitor.last_seen = now

        new_id = secrets.token_urlsafe(32)
        self._visitors[new_id] = visitor
        return new_id

    def purge_expired(self) -> int:
        """Evict every visitor idle for longer than the TTL.

        Returns:
            Number of visitors evicted.
        """
        cutoff = self._clock() - self.idle_ttl_seconds
        stale = [sid for sid, visitor in self._visitors.items() if visitor.last_seen < cutoff]
        for session_id in stale:
            del self._visitors[session_id]
        if stale:
            logger.info("Evicted %d idle sessions", len(stale))
        return len(stale)
