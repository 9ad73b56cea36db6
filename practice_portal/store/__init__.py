"""Credential stores: where staff account records live."""

from .base import CredentialStore
from .factory import build_credential_store
from .memory import InMemoryCredentialStore
from .sql import SqlCredentialStore

__all__ = [
    "CredentialStore",
    "InMemoryCredentialStore",
    "SqlCredentialStore",
    "build_credential_store",
]
