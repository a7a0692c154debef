"""Storage module."""

from .storage import CredentialStore, ICredentialStore, StorageKey

__all__ = ["CredentialStore", "ICredentialStore", "StorageKey"]
