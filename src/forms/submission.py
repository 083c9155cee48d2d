"""Form submission flows: validate locally, then persist through the backend."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from src.data.schemas import Pet
from src.errors import AuthError, DataIntegrityError, ValidationError
from src.forms.validation import (
    ADOPTION_FORM_RULES,
    LOGIN_FORM_RULES,
    REGISTRATION_FORM_RULES,
    SURRENDER_FORM_RULES,
    FieldRules,
    validate_form,
)
from src.members.auth import AuthSession
from src.members.backend import MemberBackend
from src.members.schemas import AdoptionApplication, MemberRegistration, SurrenderRequest
from src.search.searcher import find_pet

logger = logging.getLogger(__name__)

PET_NOT_FOUND_MESSAGE = "Selected pet not found. Please try again."
GENERIC_ERROR_MESSAGE = "An error occurred. Please try again."


class SubmissionResult(BaseModel):
    success: bool
    errors: dict[str, str] = Field(default_factory=dict)
    record: dict[str, Any] | None = None


class Form(ABC):
    """Base class holding field values and errors for one form.

    Subclasses declare ``fields`` and ``rules`` and implement ``_persist``.
    Values are only cleared after a successful submission, so a failed
    attempt can be corrected and resubmitted.
    """

    name: ClassVar[str] = "form"
    fields: ClassVar[tuple[str, ...]] = ()
    rules: ClassVar[Mapping[str, FieldRules]] = {}

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self.values: dict[str, str] = {field: "" for field in self.fields}
        self.errors: dict[str, str] = {}
        self.last_error: Exception | None = None
        if values:
            self.update(values)

    def update(self, values: Mapping[str, Any]) -> None:
        """Set field values; changing a field clears its error."""
        for field, value in values.items():
            if field not in self.values:
                continue
            self.values[field] = "" if value is None else str(value)
            self.errors.pop(field, None)

    def validate(self) -> bool:
        self.errors = validate_form(self.values, self.rules)
        return not self.errors

    def check(self) -> None:
        """Validate the form.

        Raises:
            ValidationError: If any field fails its rules.
        """
        if not self.validate():
            raise ValidationError(self.errors)

    def reset(self) -> None:
        self.values = {field: "" for field in self.fields}
        self.errors = {}
        self.last_error = None

    def _optional(self, field: str) -> str | None:
        return self.values[field].strip() or None

    @abstractmethod
    async def _persist(self, **context: Any) -> BaseModel:
        """Send the validated values to the backend and return the saved record."""

    async def submit(self, **context: Any) -> SubmissionResult:
        """Validate and persist the form.

        Nothing is sent when validation fails. Any failure after validation is
        reported as a single ``submit`` error and the entered values are kept.

        Args:
            **context: Collaborators needed by the concrete form.

        Returns:
            Outcome with per-field errors or the saved record.
        """
        try:
            self.check()
        except ValidationError as exc:
            logger.info("%s form rejected: %s", self.name, exc)
            return SubmissionResult(success=False, errors=exc.errors)

        try:
            record = await self._persist(**context)
        except DataIntegrityError as exc:
            logger.warning("%s form references missing data: %s", self.name, exc)
            return self._failed(exc, PET_NOT_FOUND_MESSAGE)
        except AuthError as exc:
            logger.info("%s form rejected by auth service: %s", self.name, exc)
            return self._failed(exc, str(exc) or GENERIC_ERROR_MESSAGE)
        except Exception as exc:
            logger.exception("%s form submission failed", self.name)
            return self._failed(exc, GENERIC_ERROR_MESSAGE)

        self.reset()
        return SubmissionResult(success=True, record=record.model_dump())

    def _failed(self, exc: Exception, message: str) -> SubmissionResult:
        self.last_error = exc
        self.errors = {"submit": message}
        return SubmissionResult(success=False, errors=dict(self.errors))


class AdoptionForm(Form):
    """Application to adopt one of the currently loaded pets."""

    name = "adoption"
    fields = (
        "member_name",
        "member_email",
        "member_phone",
        "member_address",
        "pet_id",
        "reason",
        "home_environment",
        "experience",
        "other_pets",
        "additional_info",
    )
    rules = ADOPTION_FORM_RULES

    def prefill(self, session: AuthSession) -> None:
        """Fill contact fields from the signed-in member without overwriting input."""
        member = session.user_data()
        if member is None:
            return
        defaults = {
            "member_name": member.name,
            "member_email": member.email,
            "member_phone": member.phone,
            "member_address": member.address,
        }
        for field, value in defaults.items():
            if value and not self.values[field]:
                self.values[field] = value

    async def _persist(
        self,
        *,
        pets: Sequence[Pet],
        backend: MemberBackend,
        member_id: str | None = None,
        access_token: str | None = None,
    ) -> AdoptionApplication:
        pet = find_pet(pets, self.values["pet_id"])
        application = AdoptionApplication(
            member_id=member_id,
            pet_id=pet.id,
            pet_name=pet.name,
            pet_breed=pet.breed,
            pet_type=pet.species.value,
            member_name=self.values["member_name"],
            member_email=self.values["member_email"],
            member_phone=self.values["member_phone"],
            member_address=self.values["member_address"],
            reason=self.values["reason"],
            home_environment=self.values["home_environment"],
            experience=self.values["experience"],
            other_pets=self._optional("other_pets"),
            additional_info=self._optional("additional_info"),
        )
        return await asyncio.to_thread(
            backend.insert_adoption_application, application, access_token
        )


class SurrenderForm(Form):
    """Request to surrender a pet to the shelter."""

    name = "surrender"
    fields = (
        "owner_name",
        "owner_email",
        "owner_phone",
        "owner_address",
        "pet_name",
        "pet_type",
        "pet_breed",
        "pet_age",
        "pet_gender",
        "reason",
        "medical_history",
        "additional_info",
    )
    rules = SURRENDER_FORM_RULES

    async def _persist(
        self, *, backend: MemberBackend, access_token: str | None = None
    ) -> SurrenderRequest:
        request = SurrenderRequest(
            owner_name=self.values["owner_name"],
            owner_email=self.values["owner_email"],
            owner_phone=self.values["owner_phone"],
            owner_address=self.values["owner_address"],
            pet_name=self.values["pet_name"],
            pet_type=self.values["pet_type"],
            pet_breed=self.values["pet_breed"],
            pet_age=self.values["pet_age"],
            pet_gender=self.values["pet_gender"],
            reason=self.values["reason"],
            medical_history=self._optional("medical_history"),
            additional_info=self._optional("additional_info"),
        )
        return await asyncio.to_thread(backend.insert_surrender_request, request, access_token)


class _RegistrationOutcome(BaseModel):
    member_id: str | None
    requires_email_verification: bool


class RegistrationForm(Form):
    """New member sign-up."""

    name = "registration"
    fields = ("name", "email", "phone", "address", "membership_type", "password")
    rules = REGISTRATION_FORM_RULES

    async def _persist(self, *, session: AuthSession) -> _RegistrationOutcome:
        registration = MemberRegistration(
            name=self.values["name"],
            email=self.values["email"],
            password=self.values["password"],
            phone=self._optional("phone"),
            address=self._optional("address"),
            membership_type=self.values["membership_type"],
        )
        pending = await session.sign_up(registration)
        member_id = session.user.id if session.user else None
        return _RegistrationOutcome(member_id=member_id, requires_email_verification=pending)


class _LoginOutcome(BaseModel):
    member_id: str


class LoginForm(Form):
    """E-mail and password sign-in."""

    name = "login"
    fields = ("email", "password")
    rules = LOGIN_FORM_RULES

    async def _persist(self, *, session: AuthSession) -> _LoginOutcome:
        await session.sign_in(self.values["email"], self.values["password"])
        return _LoginOutcome(member_id=session.user.id if session.user else "")
