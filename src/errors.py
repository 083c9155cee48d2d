"""Exception hierarchy shared by the pet pipeline, forms and backend client."""

from __future__ import annotations


class PetHeavenError(Exception):
    """Base class for all application errors."""


class TransportError(PetHeavenError):
    """A provider or the backend could not be reached."""


class HttpStatusError(PetHeavenError):
    """A remote service answered with a non-success status.

    Args:
        status_code: HTTP status code of the response.
        reason: HTTP status text of the response.
        source: Human-readable name of the remote service.
        detail: Error text from the response body, when the service sent one.
    """

    def __init__(
        self,
        status_code: int,
        reason: str = "",
        source: str = "API",
        detail: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.source = source
        self.detail = detail
        super().__init__(f"{source} error: {status_code} {reason}".rstrip())


class ValidationError(PetHeavenError):
    """One or more form fields failed client-side validation."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid fields: {fields}")


class DataIntegrityError(PetHeavenError):
    """A referenced pet is not part of the currently loaded collection."""


class AuthError(PetHeavenError):
    """The auth collaborator rejected a sign-in or sign-up."""


class SignOutError(AuthError):
    """A session token was still valid after every sign-out attempt."""
