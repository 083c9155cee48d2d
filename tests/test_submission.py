"""Tests for src/forms/submission.py."""

from __future__ import annotations

import asyncio

import pytest
from conftest import FakeBackend

from src.data.schemas import Pet
from src.errors import ValidationError
from src.forms.submission import (
    GENERIC_ERROR_MESSAGE,
    PET_NOT_FOUND_MESSAGE,
    AdoptionForm,
    Form,
    LoginForm,
    RegistrationForm,
    SurrenderForm,
)
from src.members.auth import AuthSession, AuthState


class TestFormState:
    """Tests for value and error bookkeeping."""

    def test_unknown_fields_ignored(self) -> None:
        form = LoginForm({"email": "a@b", "role": "admin"})
        assert form.values == {"email": "a@b", "password": ""}

    def test_update_clears_field_error(self) -> None:
        form = LoginForm()
        assert form.validate() is False
        assert set(form.errors) == {"email", "password"}
        form.update({"email": "a@b"})
        assert set(form.errors) == {"password"}

    def test_check_raises(self) -> None:
        form = LoginForm({"email": "a@b"})
        with pytest.raises(ValidationError) as excinfo:
            form.check()
        assert excinfo.value.errors == {"password": "This field is required"}

    def test_base_form_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            Form()

    def test_subclass_must_persist(self) -> None:
        class NoteForm(Form):
            name = "note"
            fields = ("body",)

        with pytest.raises(TypeError, match="_persist"):
            NoteForm({"body": "hello"})


class TestAdoptionForm:
    """Tests for the adoption flow."""

    def test_success_saves_pet_snapshot(
        self, adoption_values: dict[str, str], sample_pets: list[Pet], fake_backend: FakeBackend
    ) -> None:
        form = AdoptionForm(adoption_values)
        result = asyncio.run(
            form.submit(pets=sample_pets, backend=fake_backend, member_id="user-1")
        )

        assert result.success is True
        assert result.record["pet_name"] == "Luna"
        assert result.record["pet_type"] == "cat"
        assert result.record["status"] == "pending"
        assert fake_backend.applications[0].member_id == "user-1"
        assert form.values["member_name"] == ""

    def test_validation_failure_sends_nothing(
        self, adoption_values: dict[str, str], sample_pets: list[Pet], fake_backend: FakeBackend
    ) -> None:
        adoption_values["member_email"] = "jamie.example.org"
        form = AdoptionForm(adoption_values)
        result = asyncio.run(form.submit(pets=sample_pets, backend=fake_backend))

        assert result.success is False
        assert result.errors == {"member_email": "Please enter a valid email address"}
        assert fake_backend.applications == []

    def test_missing_pet(
        self, adoption_values: dict[str, str], sample_pets: list[Pet], fake_backend: FakeBackend
    ) -> None:
        """A pet id outside the loaded collection is reported and values are kept."""
        adoption_values["pet_id"] = "gone"
        form = AdoptionForm(adoption_values)
        result = asyncio.run(form.submit(pets=sample_pets, backend=fake_backend))

        assert result.errors == {"submit": PET_NOT_FOUND_MESSAGE}
        assert form.values == {**adoption_values, "other_pets": "", "additional_info": ""}
        assert fake_backend.applications == []

    def test_backend_failure_is_generic(
        self,
        adoption_values: dict[str, str],
        sample_pets: list[Pet],
        fake_backend: FakeBackend,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def broken(application, access_token=None):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(fake_backend, "insert_adoption_application", broken)
        form = AdoptionForm(adoption_values)
        result = asyncio.run(form.submit(pets=sample_pets, backend=fake_backend))

        assert result.errors == {"submit": GENERIC_ERROR_MESSAGE}
        assert isinstance(form.last_error, RuntimeError)
        assert form.values["pet_id"] == "c1"

    def test_prefill_from_member(self, fake_backend: FakeBackend) -> None:
        session = AuthSession(fake_backend, fake_backend)
        asyncio.run(session.sign_in("jamie@example.org", "secret123"))
        form = AdoptionForm({"member_name": "J. Doe"})
        form.prefill(session)

        assert form.values["member_name"] == "J. Doe"
        assert form.values["member_email"] == "jamie@example.org"
        assert form.values["member_address"] == "1 Main St"

    def test_optional_fields_blank_become_none(
        self, adoption_values: dict[str, str], sample_pets: list[Pet], fake_backend: FakeBackend
    ) -> None:
        adoption_values["other_pets"] = "   "
        asyncio.run(AdoptionForm(adoption_values).submit(pets=sample_pets, backend=fake_backend))
        assert fake_backend.applications[0].other_pets is None


class TestSurrenderForm:
    def test_success(self, surrender_values: dict[str, str], fake_backend: FakeBackend) -> None:
        result = asyncio.run(SurrenderForm(surrender_values).submit(backend=fake_backend))
        assert result.success is True
        assert fake_backend.surrenders[0].pet_name == "Rex"
        assert fake_backend.surrenders[0].status == "pending"

    def test_bad_age(self, surrender_values: dict[str, str], fake_backend: FakeBackend) -> None:
        surrender_values["pet_age"] = "0"
        result = asyncio.run(SurrenderForm(surrender_values).submit(backend=fake_backend))
        assert result.errors == {"pet_age": "Please enter a valid age"}
        assert fake_backend.surrenders == []


class TestAuthForms:
    def test_login_success(self, fake_backend: FakeBackend) -> None:
        session = AuthSession(fake_backend, fake_backend)
        form = LoginForm({"email": "jamie@example.org", "password": "secret123"})
        result = asyncio.run(form.submit(session=session))
        assert result.success is True
        assert result.record == {"member_id": "user-1"}

    def test_login_rejected_shows_auth_message(self, fake_backend: FakeBackend) -> None:
        session = AuthSession(fake_backend, fake_backend)
        form = LoginForm({"email": "jamie@example.org", "password": "nope"})
        result = asyncio.run(form.submit(session=session))
        assert result.errors == {"submit": "Invalid login credentials"}
        assert session.state is AuthState.ERROR

    def test_registration(self, fake_backend: FakeBackend) -> None:
        session = AuthSession(fake_backend, fake_backend)
        form = RegistrationForm(
            {
                "name": "Robin Poe",
                "email": "robin@example.org",
                "phone": "555 0142",
                "address": "5 Oak Ave",
                "membership_type": "basic",
                "password": "hunter22",
            }
        )
        result = asyncio.run(form.submit(session=session))
        assert result.success is True
        assert result.record["requires_email_verification"] is False
        assert session.is_authenticated

    def test_registration_short_password(self, fake_backend: FakeBackend) -> None:
        session = AuthSession(fake_backend, fake_backend)
        form = RegistrationForm({"password": "abc"})
        result = asyncio.run(form.submit(session=session))
        assert result.errors["password"] == "This field is too short"
        assert session.state is AuthState.ANONYMOUS
