from abc import ABC, abstractmethod
from typing import Optional

from ..schemas.staff import StaffAccount


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore(ABC):
    """
    Contract shared by every account store.

    Lookups return ``None`` when nothing matches. ``find_by_id`` does not
    filter inactive accounts; callers decide how to report them.
    """

    backend: str = "unknown"

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create the storage location if needed. Safe to call repeatedly."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[StaffAccount]:
        ...

    @abstractmethod
    def find_by_id(self, account_id: str) -> Optional[StaffAccount]:
        ...

    @abstractmethod
    def insert(self, account: StaffAccount) -> None:
        """Store a new account; raises DuplicateAccount on an email collision."""

    @abstractmethod
    def set_active(self, account_id: str, is_active: bool) -> bool:
        """Toggle ``is_active``. Returns False when the account does not exist."""
