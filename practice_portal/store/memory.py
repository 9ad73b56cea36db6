import threading
from typing import Dict, Optional

from ..core.errors import DuplicateAccount
from ..core.security import utcnow
from ..schemas.staff import StaffAccount
from .base import CredentialStore, normalize_email


class InMemoryCredentialStore(CredentialStore):
    """
    Process-local account store for demos, local runs and tests.

    The lock makes check-then-insert atomic within one process only. Several
    worker processes each get their own copy of the data, so this store must
    not back a multi-instance deployment.
    """

    backend = "memory"

    def __init__(self):
        self._accounts: Dict[str, StaffAccount] = {}
        self._lock = threading.Lock()

    def ensure_schema(self) -> None:
        return None

    def find_by_email(self, email: str) -> Optional[StaffAccount]:
        wanted = normalize_email(email)
        with self._lock:
            for account in self._accounts.values():
                if account.email.lower() == wanted:
                    return account.model_copy()
        return None

    def find_by_id(self, account_id: str) -> Optional[StaffAccount]:
        with self._lock:
            account = self._accounts.get(account_id)
            return account.model_copy() if account else None

    def insert(self, account: StaffAccount) -> None:
        email = normalize_email(account.email)
        with self._lock:
            if account.id in self._accounts or any(
                existing.email.lower() == email for existing in self._accounts.values()
            ):
                raise DuplicateAccount()
            self._accounts[account.id] = account.model_copy(update={"email": email})

    def set_active(self, account_id: str, is_active: bool) -> bool:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return False
            self._accounts[account_id] = account.model_copy(
                update={"is_active": is_active, "updated_at": utcnow()}
            )
            return True

    def __len__(self) -> int:
        return len(self._accounts)
