"""Input validation for account operations.

Each function either returns a normalized, typed value or raises a single
ValidationError listing every problem found.
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from todo_api.errors import ValidationError
from todo_api.models.auth import RegisterRequest
from todo_api.stores.base import normalize_email

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EMAIL_LENGTH = 254
MAX_NAME_LENGTH = 100

# Accepted keys for profile updates, in wire (camelCase) and Python form
PROFILE_FIELD_ALIASES = {
    "firstName": "first_name",
    "first_name": "first_name",
    "lastName": "last_name",
    "last_name": "last_name",
    "password": "password",
    "isActive": "is_active",
    "is_active": "is_active",
}
IMMUTABLE_PROFILE_FIELDS = {
    "id",
    "email",
    "createdAt",
    "created_at",
    "updatedAt",
    "updated_at",
    "lastLoginAt",
    "last_login_at",
}


@dataclass(frozen=True)
class RegistrationInput:
    email: str
    password: str
    first_name: str
    last_name: str


@dataclass(frozen=True)
class ProfileChanges:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    password: Optional[str] = None
    is_active: Optional[bool] = None


def _name_problem(label: str, value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return f"{label} must be a non-empty string"
    if len(value.strip()) > MAX_NAME_LENGTH:
        return f"{label} must be at most {MAX_NAME_LENGTH} characters"
    return None


def validate_email(email: str) -> str:
    """Normalize an email and check its basic format."""
    normalized = normalize_email(email)
    if len(normalized) > MAX_EMAIL_LENGTH or not EMAIL_PATTERN.match(normalized):
        raise ValidationError("Invalid email format")
    return normalized


def validate_registration(data: RegisterRequest) -> RegistrationInput:
    """Check presence and format of registration fields.

    Password strength is deliberately not checked here; the auth service
    applies it only after the email uniqueness check.
    """
    missing = []
    if not data.email or not data.email.strip():
        missing.append("email")
    if not data.password:
        missing.append("password")
    if not data.first_name or not data.first_name.strip():
        missing.append("firstName")
    if not data.last_name or not data.last_name.strip():
        missing.append("lastName")
    if missing:
        raise ValidationError(
            "Email, password, firstName, and lastName are required",
            reasons=[f"{name} is required" for name in missing],
        )

    email = validate_email(data.email)

    reasons = [
        problem
        for problem in (
            _name_problem("firstName", data.first_name),
            _name_problem("lastName", data.last_name),
        )
        if problem
    ]
    if reasons:
        raise ValidationError("Invalid registration details", reasons=reasons)

    return RegistrationInput(
        email=email,
        password=data.password,
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
    )


def validate_profile_updates(updates: Mapping[str, Any]) -> ProfileChanges:
    """Validate a partial profile update.

    Identity fields (id, email, timestamps) cannot be changed through this
    path, and any field not explicitly updatable is rejected so callers
    cannot set attributes they do not own.
    """
    if not isinstance(updates, Mapping):
        raise ValidationError("Profile update must be a JSON object")

    immutable = sorted(k for k in updates if k in IMMUTABLE_PROFILE_FIELDS)
    if immutable:
        raise ValidationError(
            f"Fields cannot be changed: {', '.join(immutable)}",
            reasons=[f"{k} is immutable" for k in immutable],
        )

    unknown = sorted(k for k in updates if k not in PROFILE_FIELD_ALIASES)
    if unknown:
        raise ValidationError(
            f"Unknown profile fields: {', '.join(unknown)}",
            reasons=[f"{k} is not an updatable field" for k in unknown],
        )

    values: dict[str, Any] = {}
    for key, value in updates.items():
        field_name = PROFILE_FIELD_ALIASES[key]
        if field_name in values:
            raise ValidationError(f"Field '{key}' was given more than once")
        values[field_name] = value

    reasons = []
    for field_name, label in (("first_name", "firstName"), ("last_name", "lastName")):
        if field_name in values:
            problem = _name_problem(label, values[field_name])
            if problem:
                reasons.append(problem)
            else:
                values[field_name] = values[field_name].strip()
    if "password" in values and not isinstance(values["password"], str):
        reasons.append("password must be a string")
    if "is_active" in values and not isinstance(values["is_active"], bool):
        reasons.append("isActive must be a boolean")
    if reasons:
        raise ValidationError("Invalid profile update", reasons=reasons)

    return ProfileChanges(**values)
