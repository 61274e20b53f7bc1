"""
Behavior Tracker Backend: Authentication Service
================================================

What:  Password hashing, bearer-token issue/verification, and the account
       workflows behind /api/auth (sign-up, sign-in, password change).
How:   passlib's CryptContext hashes passwords; python-jose signs HS256
       JWTs whose `sub` is the user id. Account rows go through the
       DatabaseClient as `User.to_row()` payloads.

Sign-in Flow:
    ┌───────────┐    ┌──────────────┐    ┌───────────────┐    ┌─────────┐
    │ Validated │───▶│ Load user by │───▶│ Verify hash,  │───▶│  Issue  │
    │  request  │    │  email       │    │ record sign-in│    │  token  │
    └───────────┘    └──────────────┘    └───────────────┘    └─────────┘

    Unknown email and wrong password fail the same way (401) so responses
    do not reveal which accounts exist.

Design Decision:
    pbkdf2_sha256 rather than bcrypt: passlib's bcrypt handler breaks
    against bcrypt>=4.1, and pbkdf2 needs no native extension.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from tracker.config import Settings, settings as default_settings
from tracker.database import DatabaseClient
from tracker.entities.user import User
from tracker.exceptions import AuthenticationError, ConflictError, NotFoundError
from tracker.mappers import row_to_dto
from tracker.schemas.dtos import ProfileDTO
from tracker.schemas.responses import AuthResponse
from tracker.timestamps import utcnow
from tracker.validation.auth import ChangePasswordRequest, SignInRequest, SignUpRequest

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    """
    Account and token operations.

    Responsibilities:
        - hash_password() / verify_password(): credential storage
        - create_access_token() / decode_token(): bearer tokens
        - sign_up() / sign_in() / change_password(): account workflows
        - get_user(): load an account by id (GET /api/auth/me)
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

    # ── Credentials ───────────────────────────────────────────────────────

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        """False for a wrong password and for a hash passlib cannot read."""
        if not password_hash:
            return False
        try:
            return self.pwd_context.verify(password, password_hash)
        except ValueError:
            logger.warning("Stored password hash has an unrecognized format")
            return False

    # ── Tokens ────────────────────────────────────────────────────────────

    def create_access_token(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """
        Signs a token for `user_id`.

        Claims: sub (user id), iat, exp. Lifetime defaults to JWT_EXPIRES_IN.
        """
        now = utcnow()
        expires = now + (expires_delta or timedelta(seconds=self.settings.jwt_expires_seconds))
        payload = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int(expires.timestamp()),
        }
        return jwt.encode(payload, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """Returns the verified claims or raises AuthenticationError."""
        try:
            claims = jwt.decode(
                token, self.settings.jwt_secret, algorithms=[self.settings.jwt_algorithm]
            )
        except JWTError as exc:
            logger.info("Rejected bearer token: %s", exc)
            raise AuthenticationError("Invalid or expired token") from exc
        if not claims.get("sub"):
            raise AuthenticationError("Token has no subject")
        return claims

    # ── Account workflows ─────────────────────────────────────────────────

    async def _load_by_email(self, db: DatabaseClient, email: str) -> Optional[User]:
        row = await db.select_one("users", email=email)
        return User.from_json(row) if row else None

    async def _auth_response(self, db: DatabaseClient, user: User) -> AuthResponse:
        profile_row = await db.select_one("profiles", user_id=user.id)
        return AuthResponse(
            user=user.to_dto(),
            profile=row_to_dto(ProfileDTO, profile_row) if profile_row else None,
            token=self.create_access_token(user.id),
            expires_in=self.settings.jwt_expires_seconds,
        )

    async def sign_up(self, db: DatabaseClient, request: SignUpRequest) -> AuthResponse:
        if await self._load_by_email(db, request.email) is not None:
            raise ConflictError(
                message="An account with this email already exists",
                context={"email": request.email},
            )
        user = User(email=request.email)
        user.set_password_hash(self.hash_password(request.password))
        await db.insert("users", [user.to_row()])
        logger.info("Created account %s", user.id)
        return await self._auth_response(db, user)

    async def sign_in(self, db: DatabaseClient, request: SignInRequest) -> AuthResponse:
        user = await self._load_by_email(db, request.email)
        if user is None or not self.verify_password(request.password, user.password_hash):
            raise AuthenticationError(INVALID_CREDENTIALS)
        user.record_sign_in()
        await db.update(
            "users",
            {"last_sign_in_at": user.last_sign_in_at, "updated_at": user.updated_at},
            id=user.id,
        )
        logger.info("Account %s signed in", user.id)
        return await self._auth_response(db, user)

    async def change_password(self, db: DatabaseClient, request: ChangePasswordRequest) -> User:
        user = await self._load_by_email(db, request.email)
        if user is None or not self.verify_password(request.current_password, user.password_hash):
            raise AuthenticationError(INVALID_CREDENTIALS)
        user.set_password_hash(self.hash_password(request.new_password))
        await db.update(
            "users",
            {"password_hash": user.password_hash, "updated_at": user.updated_at},
            id=user.id,
        )
        logger.info("Account %s changed its password", user.id)
        return user

    async def get_user(self, db: DatabaseClient, user_id: str) -> User:
        row = await db.select_one("users", id=user_id)
        if row is None:
            raise NotFoundError(resource="User", resource_id=user_id)
        return User.from_json(row)


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()


def get_auth_service() -> AuthService:
    """FastAPI dependency; tests override it to change token settings."""
    return auth_service
