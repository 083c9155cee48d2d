"""Client for the hosted backend: Supabase auth (GoTrue) and tables (PostgREST).

The rest of the application depends on the two protocols below rather than
on Supabase itself, so tests and alternative backends can stand in for it.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, TypeVar, runtime_checkable

import requests
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from src.errors import AuthError, HttpStatusError, PetHeavenError, TransportError
from src.http_client import build_session, request_json
from src.members.schemas import (
    AdoptionApplication,
    AuthTokens,
    AuthUser,
    MemberProfile,
    SignUpResult,
    SurrenderRequest,
)

logger = logging.getLogger(__name__)

MEMBERS_TABLE = "members"
ADOPTIONS_TABLE = "adoption_applications"
SURRENDERS_TABLE = "pet_surrender_requests"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse(model: type[ModelT], payload: Any) -> ModelT:
    """Validate a response body, reporting a malformed one as a transport failure."""
    try:
        return model.model_validate(payload)
    except SchemaError as err:
        raise TransportError(f"Supabase returned a malformed {model.__name__}: {err}") from err


@runtime_checkable
class AuthProvider(Protocol):
    """Authentication operations offered by the backend."""

    def sign_in_with_password(self, email: str, password: str) -> AuthTokens: ...

    def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> SignUpResult: ...

    def sign_out(self, access_token: str) -> None: ...

    def get_user(self, access_token: str) -> AuthUser | None: ...


@runtime_checkable
class MemberBackend(Protocol):
    """Flat record operations keyed by member id. No multi-row transactions."""

    def get_member_profile(
        self, member_id: str, access_token: str | None = None
    ) -> MemberProfile | None: ...

    def upsert_member_profile(
        self, profile: MemberProfile, access_token: str | None = None
    ) -> MemberProfile: ...

    def insert_adoption_application(
        self, application: AdoptionApplication, access_token: str | None = None
    ) -> AdoptionApplication: ...

    def insert_surrender_request(
        self, request: SurrenderRequest, access_token: str | None = None
    ) -> SurrenderRequest: ...

    def list_adoption_applications(
        self, member_id: str, access_token: str | None = None
    ) -> list[AdoptionApplication]: ...


class SupabaseClient:
    """requests-based client implementing both AuthProvider and MemberBackend.

    Args:
        url: Project URL, e.g. ``https://xyz.supabase.co``.
        anon_key: Public anon key; row-level security applies.
        timeout: Optional request timeout in seconds.
        session: requests session to reuse; one is created if omitted.
    """

    source = "Supabase"

    def __init__(
        self,
        url: str,
        anon_key: str,
        *,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.session = session or build_session()

    # -- plumbing ---------------------------------------------------------

    def _headers(self, access_token: str | None = None, **extra: str) -> dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {access_token or self.anon_key}",
        }
        headers.update(extra)
        return headers

    def _call(self, method: str, path: str, *, access_token: str | None = None,
              prefer: str | None = None, **kwargs: Any) -> Any:
        extra = {"Prefer": prefer} if prefer else {}
        return request_json(
            self.session,
            method,
            f"{self.url}{path}",
            source=self.source,
            timeout=self.timeout,
            headers=self._headers(access_token, **extra),
            **kwargs,
        )

    def _insert_one(self, table: str, row: dict[str, Any], access_token: str | None) -> dict[str, Any]:
        rows = self._call(
            "POST",
            f"/rest/v1/{table}",
            access_token=access_token,
            prefer="return=representation",
            json=[row],
        )
        if not rows:
            raise PetHeavenError(f"Insert into {table} returned no rows")
        return rows[0]

    # -- tables -----------------------------------------------------------

    def get_member_profile(
        self, member_id: str, access_token: str | None = None
    ) -> MemberProfile | None:
        """Fetch the profile row for a member, or None if there is none."""
        rows = self._call(
            "GET",
            f"/rest/v1/{MEMBERS_TABLE}",
            access_token=access_token,
            params={"id": f"eq.{member_id}", "select": "*"},
        )
        if not rows:
            return None
        return _parse(MemberProfile, rows[0])

    def upsert_member_profile(
        self, profile: MemberProfile, access_token: str | None = None
    ) -> MemberProfile:
        """Create the profile row, or merge into it if a trigger already created it."""
        rows = self._call(
            "POST",
            f"/rest/v1/{MEMBERS_TABLE}",
            access_token=access_token,
            prefer="resolution=merge-duplicates,return=representation",
            params={"on_conflict": "id"},
            json=[profile.model_dump(exclude={"created_at", "updated_at"})],
        )
        if not rows:
            raise PetHeavenError("Member profile upsert returned no rows")
        logger.info("Member profile %s saved", profile.id)
        return _parse(MemberProfile, rows[0])

    def insert_adoption_application(
        self, application: AdoptionApplication, access_token: str | None = None
    ) -> AdoptionApplication:
        row = application.model_dump(exclude={"id", "created_at"})
        saved = _parse(AdoptionApplication, self._insert_one(ADOPTIONS_TABLE, row, access_token))
        logger.info("Adoption application %s created for pet %s", saved.id, saved.pet_id)
        return saved

    def insert_surrender_request(
        self, request: SurrenderRequest, access_token: str | None = None
    ) -> SurrenderRequest:
        row = request.model_dump(exclude={"id", "created_at"})
        saved = _parse(SurrenderRequest, self._insert_one(SURRENDERS_TABLE, row, access_token))
        logger.info("Surrender request %s created for %s", saved.id, saved.pet_name)
        return saved

    def list_adoption_applications(
        self, member_id: str, access_token: str | None = None
    ) -> list[AdoptionApplication]:
        """Return a member's applications, newest first."""
        rows = self._call(
            "GET",
            f"/rest/v1/{ADOPTIONS_TABLE}",
            access_token=access_token,
            params={
                "member_id": f"eq.{member_id}",
                "select": "*",
                "order": "created_at.desc",
            },
        )
        return [_parse(AdoptionApplication, row) for row in rows or []]

    def check_tables(self) -> dict[str, bool]:
        """Check each table the application needs.

        The schema itself is created once out of band; this only reports
        which tables answer a one-row select.

        Returns:
            Mapping of table name to whether it is reachable.
        """
        status: dict[str, bool] = {}
        for table in (MEMBERS_TABLE, ADOPTIONS_TABLE, SURRENDERS_TABLE):
            try:
                self._call("GET", f"/rest/v1/{table}", params={"select": "id", "limit": 1})
                status[table] = True
            except PetHeavenError as exc:
                logger.warning("Table %s is not reachable: %s", table, exc)
                status[table] = False
        return status

    # -- auth -------------------------------------------------------------

    def sign_in_with_password(self, email: str, password: str) -> AuthTokens:
        """Exchange e-mail and password for a session.

        Raises:
            AuthError: If the credentials are rejected.
        """
        try:
            payload = self._call(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
            )
        except HttpStatusError as exc:
            if 400 <= exc.status_code < 500:
                raise AuthError(exc.detail or "Invalid login credentials") from exc
            raise
        return _parse(AuthTokens, payload)

    def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> SignUpResult:
        """Create an auth user; the session is only present once e-mail is confirmed.

        Raises:
            AuthError: If the auth service rejects the registration.
        """
        try:
            payload = self._call(
                "POST",
                "/auth/v1/signup",
                json={"email": email, "password": password, "data": metadata},
            )
        except HttpStatusError as exc:
            if 400 <= exc.status_code < 500:
                raise AuthError(exc.detail or "Registration failed") from exc
            raise

        payload = payload or {}
        if payload.get("access_token"):
            tokens = _parse(AuthTokens, payload)
            return SignUpResult(user=tokens.user, tokens=tokens)
        user_data = payload.get("user") or (payload if payload.get("id") else None)
        user = _parse(AuthUser, user_data) if user_data else None
        return SignUpResult(user=user)

    def sign_out(self, access_token: str) -> None:
        """Revoke the session behind ``access_token``."""
        self._call("POST", "/auth/v1/logout", access_token=access_token)

    def get_user(self, access_token: str) -> AuthUser | None:
        """Resolve a token to its user, or None if the session is gone."""
        try:
            payload = self._call("GET", "/auth/v1/user", access_token=access_token)
        except HttpStatusError as exc:
            if exc.status_code in (401, 403, 404):
                return None
            raise
        return _parse(AuthUser, payload) if payload else None

    def close(self) -> None:
        self.session.close()
