import logging
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError as PayloadError

from .errors import InvalidToken

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_staff_id() -> str:
    """Millisecond timestamp plus a random suffix; practically unique."""
    return f"staff_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


# bcrypt ignores everything past this many bytes
MAX_PASSWORD_BYTES = 72


def is_hashable_password(plaintext: str) -> bool:
    """bcrypt cannot take NUL characters or more than 72 UTF-8 bytes."""
    return "\x00" not in plaintext and len(plaintext.encode("utf-8")) <= MAX_PASSWORD_BYTES


class PasswordHasher:
    """bcrypt hashing with one work factor for the whole deployment."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )
        self._dummy_hash: Optional[str] = None

    def hash(self, plaintext: str) -> str:
        if not is_hashable_password(plaintext):
            raise ValueError("Password contains NUL or exceeds 72 bytes")
        return self._context.hash(plaintext)

    @property
    def dummy_hash(self) -> str:
        """Hash of a random value, used to spend the same time when no account matches."""
        if self._dummy_hash is None:
            self._dummy_hash = self._context.hash(secrets.token_urlsafe(16))
        return self._dummy_hash

    def verify(self, plaintext: str, hashed: Optional[str]) -> bool:
        """Check a password against a stored hash. Never raises on bad hashes."""
        if not plaintext or not hashed or not is_hashable_password(plaintext):
            return False
        try:
            return self._context.verify(plaintext, hashed)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be parsed")
            return False


class TokenPayload(BaseModel):
    sub: str
    email: str
    iat: int
    exp: int


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(days=7),
        clock: Clock = utcnow,
    ):
        if not secret:
            raise ValueError("TokenService requires a signing secret")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime
        self._clock = clock

    def issue(self, account_id: str, email: str) -> str:
        issued_at = self._clock()
        claims = {
            "sub": account_id,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenPayload:
        """Decode a token, raising InvalidToken for any rejection."""
        try:
            jwt.get_unverified_header(token)
        except JWTError:
            raise self._reject("malformed")

        try:
            # Expiry is checked below against the injected clock.
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            raise self._reject("invalid_signature")

        try:
            claims = TokenPayload(**payload)
        except PayloadError:
            raise self._reject("malformed")

        if self._clock().timestamp() >= claims.exp:
            raise self._reject("expired")
        return claims

    @staticmethod
    def _reject(reason: str) -> InvalidToken:
        logger.info(f"Rejected bearer token: {reason}")
        return InvalidToken(reason)
