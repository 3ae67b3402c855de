"""
Authentication: password hashing, bearer tokens, register and login.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, NamedTuple, Optional, Tuple

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from werkzeug.security import check_password_hash, generate_password_hash

from database import RecordStore
from errors import AuthenticationError, ConflictError
from log import get_logger
from schemas import LoginRequest, User, UserCreate
from settings import Settings

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class Identity(NamedTuple):
    user_id: str
    email: str


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(user: Dict[str, Any], password: str) -> bool:
    password_hash = user.get("password_hash")
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a user document without the password hash."""
    return {k: v for k, v in user.items() if k != "password_hash"}


class AuthService:
    """Registers users, checks credentials and issues/verifies tokens."""

    def __init__(self, store: RecordStore, settings: Settings):
        self._store = store
        self._settings = settings

    def issue_token(self, user_id: str, email: str, issued_at: Optional[datetime] = None) -> str:
        issued_at = issued_at or datetime.now(timezone.utc)
        payload = {
            "user_id": user_id,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + timedelta(hours=self._settings.jwt_expires_hours),
        }
        return jwt.encode(payload, self._settings.jwt_secret, algorithm=self._settings.jwt_algorithm)

    def verify_token(self, token: str) -> Identity:
        try:
            payload = jwt.decode(
                token,
                self._settings.jwt_secret,
                algorithms=[self._settings.jwt_algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            logger.warning("token_expired")
            raise AuthenticationError("Token expired")
        except jwt.InvalidTokenError as e:
            logger.warning("token_invalid", reason=str(e))
            raise AuthenticationError("Invalid token")

        user_id = payload.get("user_id")
        email = payload.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str):
            raise AuthenticationError("Invalid token")
        return Identity(user_id=user_id, email=email)

    def register(self, payload: UserCreate) -> Tuple[Dict[str, Any], str]:
        email = payload.email.lower()
        if self._store.find_one("user", {"email": email}):
            raise ConflictError("Email already in use")

        now = datetime.now(timezone.utc)
        user = User(
            name=payload.name,
            email=email,
            password_hash=hash_password(payload.password),
            created_at=now,
            updated_at=now,
        )
        # unique index on email catches a concurrent registration
        created = self._store.create_document("user", user)
        logger.info("user_registered", user_id=created["id"])
        return public_user(created), self.issue_token(created["id"], created["email"])

    def login(self, payload: LoginRequest) -> Tuple[Dict[str, Any], str]:
        user = self._store.find_one("user", {"email": payload.email.lower()})
        if user is None or not verify_password(user, payload.password):
            logger.warning("login_failed")
            raise AuthenticationError("Invalid credentials")
        logger.info("login_succeeded", user_id=user["id"])
        return public_user(user), self.issue_token(user["id"], user["email"])


def get_auth_service(request: Request) -> AuthService:
    return AuthService(request.app.state.store, request.app.state.settings)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Identity:
    """Resolve the caller from the `Authorization: Bearer` header."""
    if credentials is None:
        raise AuthenticationError("Access denied. No token provided.")
    return auth.verify_token(credentials.credentials)
