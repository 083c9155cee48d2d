"""Shared test fixtures for the Pet Heaven test suite."""

from __future__ import annotations

import random
from typing import Any
from unittest.mock import MagicMock

import pytest

from src.data.schemas import Pet, PetMetadata, RawImageRecord, Species
from src.errors import AuthError, HttpStatusError
from src.members.schemas import (
    AdoptionApplication,
    AuthTokens,
    AuthUser,
    MemberProfile,
    SignUpResult,
    SurrenderRequest,
)


def make_response(payload: Any = None, status_code: int = 200, reason: str = "OK") -> MagicMock:
    """Build a mock requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.ok = 200 <= status_code < 300
    response.content = b"" if payload is None else b"{}"
    response.json.return_value = payload
    return response


def make_raw(image_id: str, breed_name: str | None = "Bengal", **breed: Any) -> RawImageRecord:
    """Build a provider record with an optional breed entry."""
    breeds = [] if breed_name is None else [{"id": "beng", "name": breed_name, **breed}]
    return RawImageRecord.model_validate(
        {"id": image_id, "url": f"https://cdn.example/{image_id}.jpg", "breeds": breeds}
    )


class FakeAdapter:
    """Stand-in for ImageSourceAdapter returning canned records or raising."""

    def __init__(self, species: Species, records: list[RawImageRecord] | None = None,
                 error: Exception | None = None) -> None:
        self.species = species
        self.records = records or []
        self.error = error
        self.calls: list[tuple[int, bool]] = []

    def fetch_images(self, limit: int = 20, require_breed_info: bool = True) -> list[RawImageRecord]:
        self.calls.append((limit, require_breed_info))
        if self.error is not None:
            raise self.error
        return self.records[:limit]


class FakeBackend:
    """In-memory auth service and member tables."""

    def __init__(self) -> None:
        self.credentials: dict[str, tuple[str, str]] = {}
        self.users: dict[str, AuthUser] = {}
        self.profiles: dict[str, MemberProfile] = {}
        self.applications: list[AdoptionApplication] = []
        self.surrenders: list[SurrenderRequest] = []
        self.valid_tokens: dict[str, str] = {}
        self.revoke_on_sign_out = True
        self.sign_out_calls = 0
        self.fail_profile_writes = False
        self.auto_confirm = True
        self._next_id = 1

    def add_member(self, email: str, password: str, name: str = "Jamie Doe") -> AuthUser:
        user = AuthUser(id=f"user-{self._next_id}", email=email,
                        email_confirmed_at="2024-01-01T00:00:00Z")
        self._next_id += 1
        self.credentials[email] = (password, user.id)
        self.users[user.id] = user
        self.profiles[user.id] = MemberProfile(
            id=user.id, name=name, phone="555-0100", address="1 Main St", membership_type="basic"
        )
        return user

    def _issue(self, user: AuthUser) -> AuthTokens:
        token = f"token-{user.id}-{len(self.valid_tokens)}"
        self.valid_tokens[token] = user.id
        return AuthTokens(access_token=token, refresh_token="refresh", expires_in=3600, user=user)

    def sign_in_with_password(self, email: str, password: str) -> AuthTokens:
        stored = self.credentials.get(email)
        if stored is None or stored[0] != password:
            raise AuthError("Invalid login credentials")
        return self._issue(self.users[stored[1]])

    def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> SignUpResult:
        if email in self.credentials:
            raise AuthError("User already registered")
        user = AuthUser(
            id=f"user-{self._next_id}",
            email=email,
            email_confirmed_at="2024-01-01T00:00:00Z" if self.auto_confirm else None,
            user_metadata=metadata,
        )
        self._next_id += 1
        self.credentials[email] = (password, user.id)
        self.users[user.id] = user
        tokens = self._issue(user) if self.auto_confirm else None
        return SignUpResult(user=user, tokens=tokens)

    def sign_out(self, access_token: str) -> None:
        self.sign_out_calls += 1
        if self.revoke_on_sign_out:
            self.valid_tokens.pop(access_token, None)

    def get_user(self, access_token: str) -> AuthUser | None:
        user_id = self.valid_tokens.get(access_token)
        return self.users.get(user_id) if user_id else None

    def get_member_profile(self, member_id: str, access_token: str | None = None):
        return self.profiles.get(member_id)

    def upsert_member_profile(self, profile: MemberProfile, access_token: str | None = None):
        if self.fail_profile_writes:
            raise HttpStatusError(500, "Internal Server Error", source="Supabase")
        self.profiles[profile.id] = profile
        return profile

    def insert_adoption_application(self, application: AdoptionApplication,
                                    access_token: str | None = None) -> AdoptionApplication:
        saved = application.model_copy(update={"id": len(self.applications) + 1})
        self.applications.append(saved)
        return saved

    def insert_surrender_request(self, request: SurrenderRequest,
                                 access_token: str | None = None) -> SurrenderRequest:
        saved = request.model_copy(update={"id": len(self.surrenders) + 1})
        self.surrenders.append(saved)
        return saved

    def list_adoption_applications(self, member_id: str, access_token: str | None = None):
        return [app for app in reversed(self.applications) if app.member_id == member_id]

    def close(self) -> None:
        pass


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for deterministic pets."""
    return random.Random(1234)


@pytest.fixture
def cat_records() -> list[RawImageRecord]:
    return [
        make_raw("cat1", "Bengal", description="Spotted and energetic.", temperament="Alert",
                 origin="United States", life_span="12 - 15",
                 weight={"imperial": "6 - 12", "metric": "3 - 7"}),
        make_raw("cat2", "Siamese"),
        make_raw("cat3", None),
    ]


@pytest.fixture
def dog_records() -> list[RawImageRecord]:
    return [make_raw("dog1", "Beagle"), make_raw("dog2", "Akita")]


@pytest.fixture
def sample_pets() -> list[Pet]:
    """A small fixed collection for search and filter tests."""
    return [
        Pet(id="c1", name="Luna", species=Species.CAT, breed="Siamese", image_url="u1",
            age_months=6, description="d", available=True),
        Pet(id="d1", name="Buddy", species=Species.DOG, breed="Golden Retriever", image_url="u2",
            age_months=30, description="d", available=True),
        Pet(id="c2", name="Milo", species=Species.CAT, breed="Maine Coon", image_url="u3",
            age_months=60, description="d", available=False),
        Pet(id="d2", name="Max", species=Species.DOG, breed="Labrador Retriever", image_url="u4",
            age_months=100, description="d", available=True, metadata=PetMetadata(origin="Canada")),
        Pet(id="c3", name="Bella", species=Species.CAT, breed="Siamese", image_url="u5",
            age_months=14, description="d", available=True),
    ]


@pytest.fixture
def fake_backend() -> FakeBackend:
    backend = FakeBackend()
    backend.add_member("jamie@example.org", "secret123")
    return backend


@pytest.fixture
def adoption_values() -> dict[str, str]:
    return {
        "member_name": "Jamie Doe",
        "member_email": "jamie@example.org",
        "member_phone": "(555) 010-0100",
        "member_address": "1 Main St",
        "pet_id": "c1",
        "reason": "Looking for a companion",
        "home_environment": "Apartment with a balcony",
        "experience": "Had cats growing up",
    }


@pytest.fixture
def surrender_values() -> dict[str, str]:
    return {
        "owner_name": "Sam Lee",
        "owner_email": "sam@example.org",
        "owner_phone": "555 0199",
        "owner_address": "9 Elm St",
        "pet_name": "Rex",
        "pet_type": "dog",
        "pet_breed": "Beagle",
        "pet_age": "4",
        "pet_gender": "male",
        "reason": "Moving abroad",
    }
