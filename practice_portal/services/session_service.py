import logging
from typing import Tuple

from ..core.errors import Unauthenticated
from ..core.security import TokenService
from ..schemas.staff import StaffUser
from ..store.base import CredentialStore

logger = logging.getLogger(__name__)


class SessionService:
    """Resolves bearer tokens to staff accounts. Sessions are stateless."""

    def __init__(self, store: CredentialStore, tokens: TokenService):
        self.store = store
        self.tokens = tokens

    def issue_token(self, user: StaffUser) -> str:
        return self.tokens.issue(user.id, user.email)

    def resolve(self, token: str) -> StaffUser:
        claims = self.tokens.verify(token)

        account = self.store.find_by_id(claims.sub)
        if account is None or not account.is_active:
            logger.info(f"Session rejected for missing or inactive account {claims.sub}")
            raise Unauthenticated("User not found or inactive")

        return account.to_public()

    def refresh(self, token: str) -> Tuple[str, StaffUser]:
        """Re-issue a token with a fresh lifetime for the same account."""
        user = self.resolve(token)
        return self.issue_token(user), user

    def logout(self, token: str) -> None:
        # Tokens are not tracked server-side; the client discards its copy and
        # the token stays valid until it expires.
        user = self.resolve(token)
        logger.info(f"Logout acknowledged for {user.id}")
