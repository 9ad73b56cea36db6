import logging
from typing import Callable, List, Optional

from ..core.errors import (
    AccountDeactivated,
    DuplicateAccount,
    InvalidCredentials,
    ValidationError,
)
from ..core.security import (
    MAX_PASSWORD_BYTES,
    Clock,
    PasswordHasher,
    generate_staff_id,
    utcnow,
)
from ..schemas.auth import UserRegister
from ..schemas.staff import StaffAccount, StaffUser
from ..store.base import CredentialStore, normalize_email

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
DEFAULT_ROLE = "staff"


def _missing(**values: Optional[str]) -> List[str]:
    return [name for name, value in values.items() if value is None or not value.strip()]


class AuthService:
    """Registration and credential checks, written against any CredentialStore."""

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        id_factory: Callable[[], str] = generate_staff_id,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.hasher = hasher
        self.id_factory = id_factory
        self.clock = clock

    def register(self, data: UserRegister) -> StaffUser:
        """Create a new staff account and return its sanitized view."""
        missing = _missing(
            firstName=data.first_name,
            lastName=data.last_name,
            email=data.email,
            password=data.password,
        )
        if missing:
            raise ValidationError(
                "First name, last name, email, and password are required",
                fields=missing,
            )
        if len(data.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
                fields=["password"],
            )
        if "\x00" in data.password:
            raise ValidationError(
                "Password must not contain NUL characters", fields=["password"]
            )
        if len(data.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes long",
                fields=["password"],
            )

        self.store.ensure_schema()
        email = normalize_email(data.email)

        # Early exit only; the store's own uniqueness check is authoritative
        if self.store.find_by_email(email) is not None:
            logger.info(f"Registration rejected, email already in use: {email}")
            raise DuplicateAccount()

        now = self.clock()
        account = StaffAccount(
            id=self.id_factory(),
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            email=email,
            password_hash=self.hasher.hash(data.password),
            role=data.role or DEFAULT_ROLE,
            organization=data.organization or "",
            phone=data.phone or "",
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self.store.insert(account)
        logger.info(f"Registered staff account {account.id}")
        return account.to_public()

    def authenticate(self, email: Optional[str], password: Optional[str]) -> StaffUser:
        """Verify email and password, returning the sanitized account."""
        missing = _missing(email=email, password=password)
        if missing:
            raise ValidationError("Email and password are required", fields=missing)

        self.store.ensure_schema()
        account = self.store.find_by_email(normalize_email(email))
        if account is None:
            # Same bcrypt cost as a wrong password, so timing does not reveal the email
            self.hasher.verify(password, self.hasher.dummy_hash)
            raise InvalidCredentials()

        if not account.is_active:
            logger.info(f"Login attempt on deactivated account {account.id}")
            raise AccountDeactivated()

        if not self.hasher.verify(password, account.password_hash):
            raise InvalidCredentials()

        return account.to_public()
