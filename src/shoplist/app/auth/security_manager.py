"""Credential verification: bcrypt password hashes and signed access tokens."""

import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from bcrypt import checkpw, gensalt, hashpw

from shoplist.common import Identity

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


@dataclass
class SecurityManager:
    """Issues and checks the credentials of shopping list users.

    A missing or short ``secret_key`` is replaced with a random one, so tokens
    stop verifying after a restart.

    :param str secret_key: HMAC key used to sign access tokens
    :param str algorithm: PyJWT HMAC algorithm name
    :param int expire_minutes: Lifetime of an access token
    :param int password_min_length: Shortest accepted password
    """

    DEFAULT_JWT_ALGORITHM = "HS256"
    DEFAULT_TOKEN_EXPIRE_MINUTES = 60 * 24
    DEFAULT_PASSWORD_MIN_LENGTH = 4
    MINIMUM_JWT_SECRET_KEY_LENGTH = 32
    TOKEN_TYPE = "access_token"  # noqa: S105

    secret_key: str | None = None
    algorithm: str = DEFAULT_JWT_ALGORITHM
    expire_minutes: int = DEFAULT_TOKEN_EXPIRE_MINUTES
    password_min_length: int = DEFAULT_PASSWORD_MIN_LENGTH

    def __post_init__(self) -> None:
        if (
            self.secret_key is None
            or len(self.secret_key) < self.MINIMUM_JWT_SECRET_KEY_LENGTH
        ):
            self.secret_key = os.urandom(64).hex()

    def validate_password(self, password: str) -> str | None:
        """Return a message describing why ``password`` is rejected, or None."""
        if len(password) >= self.password_min_length:
            return None

        return f"Password must be at least {self.password_min_length} characters long"

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a plaintext password with a fresh bcrypt salt."""
        return hashpw(password.encode(), gensalt()).decode()

    @staticmethod
    def check_password(password: str, hashed_password: str) -> bool:
        """Check a plaintext password against a stored bcrypt hash."""
        try:
            return checkpw(password.encode(), hashed_password.encode())
        except ValueError:
            LOGGER.warning("Stored password hash is malformed")
            return False

    def create_access_token(self, identity: Identity) -> str:
        """Create a new JWT access token for the identity.

        :param Identity identity: The user id and role id to embed
        :return: A JWT access token as a string
        """
        now = datetime.now(UTC)

        payload = {
            "id": identity.user_id,
            "role": identity.role_id,
            "exp": now + timedelta(minutes=self.expire_minutes),
            "iat": now,
            "type": self.TOKEN_TYPE,
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Identity | None:
        """Verify and decode a JWT token, returning the identity.

        :param token: The JWT token string to verify
        :return: The Identity if the token is valid, None otherwise
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
            )
        except jwt.ExpiredSignatureError:
            LOGGER.debug("Rejected expired token")
            return None
        except jwt.InvalidTokenError:
            return None

        if payload.get("type") != self.TOKEN_TYPE:
            return None

        user_id = payload.get("id")
        role_id = payload.get("role")

        if not isinstance(user_id, str) or not isinstance(role_id, str):
            return None

        return Identity(user_id=user_id, role_id=role_id)
