"""Pydantic models for rows and auth payloads exchanged with the hosted backend."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """User object returned by the auth service."""

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None
    email_confirmed_at: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)


class AuthTokens(BaseModel):
    """Session issued after sign-in or sign-up."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    user: AuthUser


class SignUpResult(BaseModel):
    """Outcome of a sign-up call; ``tokens`` is None until e-mail is confirmed."""

    user: AuthUser | None = None
    tokens: AuthTokens | None = None


class MemberProfile(BaseModel):
    """Row of the ``members`` table."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    phone: str | None = None
    address: str | None = None
    membership_type: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class MemberRegistration(BaseModel):
    """Data collected by the registration form."""

    name: str
    email: str
    password: str
    phone: str | None = None
    address: str | None = None
    membership_type: str


class AdoptionApplication(BaseModel):
    """Row of the ``adoption_applications`` table."""

    model_config = ConfigDict(extra="ignore")

    id: str | int | None = None
    member_id: str | None = None
    pet_id: str
    pet_name: str
    pet_breed: str
    pet_type: str
    member_name: str
    member_email: str
    member_phone: str
    member_address: str
    reason: str
    home_environment: str
    experience: str
    other_pets: str | None = None
    additional_info: str | None = None
    status: str = "pending"
    created_at: str | None = None


class SurrenderRequest(BaseModel):
    """Row of the ``pet_surrender_requests`` table."""

    model_config = ConfigDict(extra="ignore")

    id: str | int | None = None
    owner_name: str
    owner_email: str
    owner_phone: str
    owner_address: str
    pet_name: str
    pet_type: str
    pet_breed: str
    pet_age: str
    pet_gender: str
    reason: str
    medical_history: str | None = None
    additional_info: str | None = None
    status: str = "pending"
    created_at: str | None = None


class MemberView(BaseModel):
    """Auth user merged with the member profile, used to pre-fill forms."""

    id: str
    email: str = ""
    name: str = ""
    phone: str = ""
    address: str = ""
    membership_type: str = ""
