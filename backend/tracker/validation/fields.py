"""
Behavior Tracker Backend: Field-Level Validators
=================================================

What:  Reusable annotated field types (UUID, email, password, names, enums,
       ISO datetimes, URLs) shared by every request schema.
How:   Each type is an `Annotated[...]` pydantic type, so any model or
       TypeAdapter that declares it gets the same constraints and
       normalization.

Normalization performed here:
    Email        → surrounding whitespace stripped, lowercased, then RFC-checked
    Names/Notes  → surrounding whitespace stripped
    UuidStr      → lowercased canonical form
    IsoDatetime  → ISO-8601 "YYYY-MM-DDTHH:MM[:SS][offset]" only, then
                   timezone-aware UTC (naive input is taken as UTC)
"""

import re
from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BeforeValidator, EmailStr, HttpUrl, StringConstraints, TypeAdapter
from pydantic_core import PydanticCustomError

# RFC 4122 layout, any version 1-8
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-8][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
UUID4_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

PASSWORD_MIN_LENGTH = 10
PASSWORD_MAX_LENGTH = 32

INTENTS = ("aggressive", "sensory")
ROLES = ("admin", "user", "parent")
SORT_ORDERS = ("asc", "desc")

# Calendar date, "T", clock time; seconds, fraction and UTC offset optional
ISO_DATETIME_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$",
    re.IGNORECASE,
)


def is_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))


def is_uuid4(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID4_PATTERN.match(value))


def _check_uuid(value: str) -> str:
    if not is_uuid(value):
        raise PydanticCustomError("uuid", "Must be a valid UUID")
    return value.lower()


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _require_iso_datetime(value: Any) -> Any:
    # Epoch numbers and date-only strings would pass pydantic's lax datetime parsing
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and ISO_DATETIME_PATTERN.match(value.strip()):
        return value.strip()
    raise PydanticCustomError("iso_datetime", "Must be an ISO-8601 datetime string")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ── Password rules ────────────────────────────────────────────────────────
# Each rule is its own validator so a failure names the exact requirement.

def _password_length(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        raise PydanticCustomError(
            "password_too_short",
            "Password must be at least {min_length} characters",
            {"min_length": PASSWORD_MIN_LENGTH},
        )
    if len(value) > PASSWORD_MAX_LENGTH:
        raise PydanticCustomError(
            "password_too_long",
            "Password must be no more than {max_length} characters",
            {"max_length": PASSWORD_MAX_LENGTH},
        )
    return value


def _character_class_rule(pattern: str, code: str, message: str) -> AfterValidator:
    compiled = re.compile(pattern)

    def check(value: str) -> str:
        if not compiled.search(value):
            raise PydanticCustomError(code, message)
        return value

    return AfterValidator(check)


# ── Field types ───────────────────────────────────────────────────────────

UuidStr = Annotated[str, AfterValidator(_check_uuid)]

Email = Annotated[EmailStr, BeforeValidator(_normalize_email)]

Password = Annotated[
    str,
    AfterValidator(_password_length),
    _character_class_rule(
        r"[A-Z]", "password_uppercase", "Password must contain at least one uppercase letter"
    ),
    _character_class_rule(
        r"[a-z]", "password_lowercase", "Password must contain at least one lowercase letter"
    ),
    _character_class_rule(r"[0-9]", "password_digit", "Password must contain at least one number"),
]

FirstName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
LastName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
OrganizationName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)
]
GeneralName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]

Mood = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
Notes = Annotated[str, StringConstraints(strip_whitespace=True, max_length=1000)]

Intent = Literal["aggressive", "sensory"]
Role = Literal["admin", "user", "parent"]
SortOrder = Literal["asc", "desc"]

IsoDatetime = Annotated[datetime, BeforeValidator(_require_iso_datetime), AfterValidator(_as_utc)]

Url = Annotated[HttpUrl, AfterValidator(str)]


_email_adapter = TypeAdapter(Email)


def normalize_email(value: Any) -> str:
    """
    Returns the normalized form of `value` or raises pydantic's ValidationError.

    Used by the User entity so accounts and request bodies share one rule.
    """
    return _email_adapter.validate_python(value)
