"""Auth session state machine over the hosted auth service.

States move only through explicit calls (sign_in, sign_up, sign_out) or
session-changed events pushed in through ``apply_event`` / ``watch``:

    anonymous --sign_in/sign_up--> authenticating --ok--> authenticated
                                                  --fail--> error
    authenticated --sign_out / SIGNED_OUT--> anonymous
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Awaitable, Callable
from enum import Enum

from pydantic import ValidationError as SchemaError

from src.errors import AuthError, PetHeavenError, SignOutError
from src.members.backend import AuthProvider, MemberBackend
from src.members.schemas import (
    AuthTokens,
    AuthUser,
    MemberProfile,
    MemberRegistration,
    MemberView,
)

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    ERROR = "error"


class SessionEvent(str, Enum):
    """Session-changed notifications emitted by the auth service."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


_TRANSITIONS: dict[AuthState, frozenset[AuthState]] = {
    AuthState.ANONYMOUS: frozenset({AuthState.AUTHENTICATING, AuthState.AUTHENTICATED}),
    AuthState.AUTHENTICATING: frozenset(
        {AuthState.AUTHENTICATED, AuthState.ANONYMOUS, AuthState.ERROR}
    ),
    AuthState.AUTHENTICATED: frozenset(
        {AuthState.AUTHENTICATED, AuthState.AUTHENTICATING, AuthState.ANONYMOUS}
    ),
    AuthState.ERROR: frozenset(
        {AuthState.AUTHENTICATING, AuthState.AUTHENTICATED, AuthState.ANONYMOUS}
    ),
}


class InvalidTransition(PetHeavenError):
    """An operation was attempted from a state that does not allow it."""


class AuthSession:
    """One client's view of its authentication state.

    Args:
        auth: Auth service used for sign-in, sign-up and sign-out.
        backend: Backend holding member profiles.
        max_sign_out_attempts: Sign-out calls made before giving up.
        backoff_seconds: Delay before the first retry; doubles each attempt.
        sleep: Awaitable sleep, replaceable in tests.
    """

    def __init__(
        self,
        auth: AuthProvider,
        backend: MemberBackend,
        *,
        max_sign_out_attempts: int = 3,
        backoff_seconds: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_sign_out_attempts < 1:
            raise ValueError("max_sign_out_attempts must be at least 1")
        self.auth = auth
        self.backend = backend
        self.max_sign_out_attempts = max_sign_out_attempts
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

        self.state = AuthState.ANONYMOUS
        self.user: AuthUser | None = None
        self.profile: MemberProfile | None = None
        self.tokens: AuthTokens | None = None
        self.error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED

    @property
    def access_token(self) -> str | None:
        return self.tokens.access_token if self.tokens else None

    def _transition(self, new_state: AuthState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"Cannot move from {self.state.value} to {new_state.value}")
        logger.debug("Auth state %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    def _clear(self) -> None:
        self.user = None
        self.profile = None
        self.tokens = None

    def _fail(self, message: str) -> None:
        self._clear()
        self.error = message
        self._transition(AuthState.ERROR)

    async def _load_profile(self, tokens: AuthTokens) -> MemberProfile | None:
        user = tokens.user
        try:
            return await asyncio.to_thread(
                self.backend.get_member_profile, user.id, tokens.access_token
            )
        except (PetHeavenError, SchemaError) as exc:
            logger.warning("Could not load member profile for %s: %s", user.id, exc)
            return None

    async def _enter_authenticated(self, tokens: AuthTokens) -> None:
        profile = await self._load_profile(tokens)
        self.tokens = tokens
        self.user = tokens.user
        self.profile = profile
        self.error = None
        self._transition(AuthState.AUTHENTICATED)

    async def sign_in(self, email: str, password: str) -> None:
        """Sign in with e-mail and password and load the member profile.

        Raises:
            AuthError: If the credentials are rejected or the service fails.
        """
        self._transition(AuthState.AUTHENTICATING)
        try:
            tokens = await asyncio.to_thread(self.auth.sign_in_with_password, email, password)
        except AuthError as exc:
            self._fail(str(exc))
            raise
        except Exception as exc:
            self._fail("An error occurred during login")
            raise AuthError("An error occurred during login") from exc
        await self._enter_authenticated(tokens)
        logger.info("Member %s signed in", tokens.user.id)

    async def sign_up(self, registration: MemberRegistration) -> bool:
        """Register a member and create their profile.

        A failed profile write is logged but does not undo the registration.

        Returns:
            True if the member still has to confirm their e-mail address.

        Raises:
            AuthError: If the auth service rejects the registration.
        """
        self._transition(AuthState.AUTHENTICATING)
        metadata = {
            "name": registration.name,
            "phone": registration.phone or "",
            "address": registration.address or "",
            "membership_type": registration.membership_type,
        }
        try:
            result = await asyncio.to_thread(
                self.auth.sign_up, registration.email, registration.password, metadata
            )
        except AuthError as exc:
            message = str(exc)
            if "email" in message.lower() or "invalid" in message.lower():
                message = "Please check your email format and try again."
            self._fail(message)
            raise AuthError(message) from exc
        except Exception as exc:
            self._fail("An error occurred during registration")
            raise AuthError("An error occurred during registration") from exc

        if result.user is None:
            self._fail("Registration failed - no user created")
            raise AuthError("Registration failed - no user created")

        token = result.tokens.access_token if result.tokens else None
        profile = MemberProfile(
            id=result.user.id,
            name=registration.name,
            phone=registration.phone or None,
            address=registration.address or None,
            membership_type=registration.membership_type,
        )
        try:
            saved = await asyncio.to_thread(self.backend.upsert_member_profile, profile, token)
        except (PetHeavenError, SchemaError) as exc:
            logger.warning("Member profile for %s was not saved: %s", result.user.id, exc)
            saved = None

        if result.tokens is not None:
            self.tokens = result.tokens
            self.user = result.user
            self.profile = saved
            self.error = None
            self._transition(AuthState.AUTHENTICATED)
        else:
            # No session until the e-mail is confirmed.
            self._clear()
            self._transition(AuthState.ANONYMOUS)

        logger.info("Member %s registered", result.user.id)
        return result.user.email_confirmed_at is None

    async def sign_out(self) -> None:
        """End the session and verify the token no longer resolves to a user.

        Safe to call when already signed out. Local state is cleared first;
        the remote sign-out is retried with exponential backoff until the
        token is rejected or the attempts run out.

        Raises:
            SignOutError: If the token is still valid after every attempt.
        """
        token = self.access_token
        self._clear()
        self.error = None
        if self.state is not AuthState.ANONYMOUS:
            self._transition(AuthState.ANONYMOUS)
        if token is None:
            return

        delay = self.backoff_seconds
        for attempt in range(1, self.max_sign_out_attempts + 1):
            try:
                await asyncio.to_thread(self.auth.sign_out, token)
            except PetHeavenError as exc:
                logger.warning("Sign-out attempt %d failed: %s", attempt, exc)

            try:
                still_valid = await asyncio.to_thread(self.auth.get_user, token) is not None
            except PetHeavenError as exc:
                logger.warning("Could not verify sign-out on attempt %d: %s", attempt, exc)
                still_valid = True

            if not still_valid:
                logger.info("Session revoked after %d attempt(s)", attempt)
                return
            if attempt < self.max_sign_out_attempts:
                await self._sleep(delay)
                delay *= 2

        raise SignOutError(
            f"Session token still valid after {self.max_sign_out_attempts} sign-out attempts"
        )

    async def apply_event(self, event: SessionEvent, tokens: AuthTokens | None = None) -> None:
        """Apply a session-changed notification from the auth service.

        A missing session on any event is treated as a sign-out.
        """
        if event is SessionEvent.SIGNED_OUT or tokens is None:
            self._clear()
            if self.state is not AuthState.ANONYMOUS:
                self._transition(AuthState.ANONYMOUS)
            return

        if event is SessionEvent.TOKEN_REFRESHED and self.user and self.user.id == tokens.user.id:
            self.tokens = tokens
            return

        await self._enter_authenticated(tokens)

    async def watch(self, events: AsyncIterable[tuple[SessionEvent, AuthTokens | None]]) -> None:
        """Consume session-changed notifications until the stream ends."""
        async for event, tokens in events:
            logger.debug("Auth event %s", event.value)
            await self.apply_event(event, tokens)

    def user_data(self) -> MemberView | None:
        """Return the signed-in member merged with their profile, for form pre-fill."""
        if self.user is None:
            return None
        meta = self.user.user_metadata
        profile = self.profile
        return MemberView(
            id=self.user.id,
            email=self.user.email or "",
            name=(profile.name if profile else None) or str(meta.get("name") or ""),
            phone=(profile.phone if profile else None) or "",
            address=(profile.address if profile else None) or "",
            membership_type=(profile.membership_type if profile else None)
            or str(meta.get("membership_type") or ""),
        )
