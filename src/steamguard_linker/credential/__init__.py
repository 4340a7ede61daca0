"""Caller-side storage of linked accounts."""

from .store import ACCOUNT_FILE_SUFFIX, CredentialStore

__all__ = ["ACCOUNT_FILE_SUFFIX", "CredentialStore"]
