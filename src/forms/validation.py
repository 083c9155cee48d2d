"""Field-level validation rules shared by every form."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

MIN_AGE_YEARS = 1
MAX_AGE_YEARS = 30

_PHONE_SEPARATORS = re.compile(r"[\s\-()]")

MESSAGES = {
    "required": "This field is required",
    "email": "Please enter a valid email address",
    "phone": "Please enter a valid phone number",
    "min_length": "This field is too short",
    "max_length": "This field is too long",
    "age": "Please enter a valid age",
}


class FieldRules(BaseModel):
    """Rules applied to one form field, checked in declaration order."""

    required: bool = False
    email: bool = False
    phone: bool = False
    min_length: int | None = None
    max_length: int | None = None
    age: bool = False


def is_present(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def is_email(value: str) -> bool:
    # Only checks for an @.
    return "@" in value


def is_phone(value: str) -> bool:
    cleaned = _PHONE_SEPARATORS.sub("", value)
    return cleaned.isdigit() and cleaned.isascii()


def is_age(value: str) -> bool:
    try:
        years = int(value.strip())
    except ValueError:
        return False
    return MIN_AGE_YEARS <= years <= MAX_AGE_YEARS


def validate_field(value: Any, rules: FieldRules | Mapping[str, Any] | None = None) -> str | None:
    """Check a value against its rules and return the first error message.

    Order: required, then email, phone, min_length, max_length, age. An empty
    value that is not required passes without further checks.

    Args:
        value: Raw field value.
        rules: FieldRules or a mapping of rule names to settings.

    Returns:
        Error message, or None when the value is valid.
    """
    if rules is None:
        rules = FieldRules()
    elif not isinstance(rules, FieldRules):
        rules = FieldRules(**rules)

    if rules.required and not is_present(value):
        return MESSAGES["required"]

    if not is_present(value):
        return None

    text = str(value)

    if rules.email and not is_email(text):
        return MESSAGES["email"]
    if rules.phone and not is_phone(text):
        return MESSAGES["phone"]
    if rules.min_length is not None and len(text) < rules.min_length:
        return MESSAGES["min_length"]
    if rules.max_length is not None and len(text) > rules.max_length:
        return MESSAGES["max_length"]
    if rules.age and not is_age(text):
        return MESSAGES["age"]

    return None


def validate_form(
    values: Mapping[str, Any], rules_by_field: Mapping[str, FieldRules]
) -> dict[str, str]:
    """Validate every field that has rules.

    Args:
        values: Submitted values keyed by field name; missing fields count as empty.
        rules_by_field: Rules keyed by field name.

    Returns:
        Error message per failing field; empty when the form is valid.
    """
    errors: dict[str, str] = {}
    for field_name, rules in rules_by_field.items():
        error = validate_field(values.get(field_name), rules)
        if error is not None:
            errors[field_name] = error
    return errors


_REQUIRED = FieldRules(required=True)

ADOPTION_FORM_RULES: dict[str, FieldRules] = {
    "member_name": _REQUIRED,
    "member_email": FieldRules(required=True, email=True),
    "member_phone": FieldRules(required=True, phone=True),
    "member_address": _REQUIRED,
    "pet_id": _REQUIRED,
    "reason": _REQUIRED,
    "home_environment": _REQUIRED,
    "experience": _REQUIRED,
}

SURRENDER_FORM_RULES: dict[str, FieldRules] = {
    "owner_name": _REQUIRED,
    "owner_email": FieldRules(required=True, email=True),
    "owner_phone": FieldRules(required=True, phone=True),
    "owner_address": _REQUIRED,
    "pet_name": _REQUIRED,
    "pet_type": _REQUIRED,
    "pet_breed": _REQUIRED,
    "pet_age": FieldRules(required=True, age=True),
    "pet_gender": _REQUIRED,
    "reason": _REQUIRED,
}

REGISTRATION_FORM_RULES: dict[str, FieldRules] = {
    "name": _REQUIRED,
    "email": FieldRules(required=True, email=True),
    "phone": FieldRules(required=True, phone=True),
    "address": _REQUIRED,
    "membership_type": _REQUIRED,
    "password": FieldRules(required=True, min_length=6),
}

LOGIN_FORM_RULES: dict[str, FieldRules] = {
    "email": _REQUIRED,
    "password": _REQUIRED,
}
