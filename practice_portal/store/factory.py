import logging

from ..core.config import Settings
from ..core.database import create_db_engine
from .base import CredentialStore
from .memory import InMemoryCredentialStore
from .sql import SqlCredentialStore

logger = logging.getLogger(__name__)


def build_credential_store(settings: Settings) -> CredentialStore:
    """Pick the store implementation named by the deployment configuration."""
    if settings.store_backend == "sql":
        engine = create_db_engine(settings.DATABASE_URL)
        db_type = engine.dialect.name
        logger.info(f"Using SQL credential store ({db_type})")
        return SqlCredentialStore(engine)

    logger.warning(
        "Using in-memory credential store; accounts are lost on restart and "
        "are not shared between processes"
    )
    return InMemoryCredentialStore()
