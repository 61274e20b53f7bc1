"""
Request schemas for account endpoints.

Only sign-up, sign-in and change-password are served by routes today; the
token schemas describe the payloads of the hosted auth flows.
"""

from typing import Annotated, Optional

from pydantic import StringConstraints, field_validator
from pydantic_core import PydanticCustomError

from tracker.validation.factories import RequestSchema
from tracker.validation.fields import Email, Password


class SignUpRequest(RequestSchema):
    email: Email
    password: Password
    # Optional so API clients may omit it; when sent it must match
    confirm_password: Optional[Password] = None

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value, info):
        password = info.data.get("password")
        if value is not None and password is not None and value != password:
            raise PydanticCustomError("password_mismatch", "Passwords don't match")
        return value


class SignInRequest(RequestSchema):
    email: Email
    password: Password


class ChangePasswordRequest(RequestSchema):
    email: Email
    current_password: Password
    new_password: Password


class RefreshTokenRequest(RequestSchema):
    refresh_token: Annotated[str, StringConstraints(min_length=10, max_length=500)]


class PasswordResetRequest(RequestSchema):
    email: Email


class PasswordResetConfirmRequest(RequestSchema):
    reset_token: Annotated[str, StringConstraints(min_length=1)]
    new_password: Password


class EmailVerificationRequest(RequestSchema):
    verification_token: Annotated[str, StringConstraints(min_length=1)]
