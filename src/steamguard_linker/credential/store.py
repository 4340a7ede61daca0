"""Secure storage for linked authenticator accounts.

This module handles:
- Writing account files with owner-only permissions
- Reading them back and refusing files others can read
- Listing and removing stored accounts
"""

from __future__ import annotations

import json
import os
import stat
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from ..enroll.models import SteamGuardAccount

ACCOUNT_FILE_SUFFIX = ".maFile"


class CredentialStore:
    """Owner-only directory of <account_name>.maFile documents."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize credential store.

        Args:
            config_dir: Directory for account files (defaults to ~/.steamguard/maFiles)
        """
        if config_dir is None:
            self.config_dir = Path.home() / ".steamguard" / "maFiles"
        else:
            self.config_dir = Path(config_dir)

        # Ensure config directory exists with proper permissions
        self._ensure_config_dir()

    def account_path(self, account_name: str) -> Path:
        return self.config_dir / f"{account_name}{ACCOUNT_FILE_SUFFIX}"

    def store_account(self, account: SteamGuardAccount, account_name: Optional[str] = None) -> bool:
        """Store an account securely.

        Args:
            account: Account returned by the linker
            account_name: File name to use when the account has no account_name

        Returns:
            True if stored successfully, False otherwise
        """
        name = account.account_name or account_name
        if not name:
            logger.error("Cannot store an account without a name")
            return False

        try:
            target = self.account_path(name)

            # Write to a temporary file first
            temp_file = target.with_suffix(".tmp")

            with open(temp_file, "w") as f:
                json.dump(account.model_dump(), f, indent=2)

            # Set secure permissions (owner read/write only)
            os.chmod(temp_file, stat.S_IRUSR | stat.S_IWUSR)

            # Atomically replace the account file
            temp_file.replace(target)

            logger.info(f"Stored account {name} (fully enrolled: {account.fully_enrolled})")
            return True

        except OSError as e:
            logger.error(f"Failed to store account {name}: {e}")
            return False

    def load_account(self, account_name: str) -> tuple[bool, Optional[SteamGuardAccount]]:
        """Load a stored account.

        Returns:
            Tuple of (success, account)
        """
        path = self.account_path(account_name)
        try:
            if not path.exists():
                logger.debug(f"No account file for {account_name}")
                return False, None

            if not self._check_file_permissions(path):
                logger.warning(f"Account file for {account_name} has insecure permissions")
                return False, None

            with open(path, "r") as f:
                data = json.load(f)

            account = SteamGuardAccount.model_validate(data)
            logger.debug(f"Loaded account {account_name}")
            return True, account

        except (OSError, ValueError, ValidationError) as e:
            logger.error(f"Failed to load account {account_name}: {e}")
            return False, None

    def remove_account(self, account_name: str) -> bool:
        """Remove a stored account.

        Returns:
            True if removed (or absent), False otherwise
        """
        try:
            path = self.account_path(account_name)
            if path.exists():
                path.unlink()
                logger.info(f"Removed account {account_name}")
            return True

        except OSError as e:
            logger.error(f"Failed to remove account {account_name}: {e}")
            return False

    def list_accounts(self) -> list[str]:
        """Names of all stored accounts."""
        return sorted(path.stem for path in self.config_dir.glob(f"*{ACCOUNT_FILE_SUFFIX}"))

    def _ensure_config_dir(self) -> None:
        """Ensure config directory exists with proper permissions."""
        try:
            self.config_dir.mkdir(mode=0o700, parents=True, exist_ok=True)

            # Owner read/write/execute only
            os.chmod(self.config_dir, stat.S_IRWXU)

        except OSError as e:
            logger.error(f"Failed to create config directory: {e}")
            raise

    def _check_file_permissions(self, path: Path) -> bool:
        """Check that the file is readable/writable only by its owner."""
        try:
            file_stat = path.stat()

            if file_stat.st_mode & (stat.S_IRGRP | stat.S_IWGRP | stat.S_IROTH | stat.S_IWOTH):
                logger.warning(f"Insecure permissions on {path}: {stat.filemode(file_stat.st_mode)}")
                return False

            return True

        except OSError as e:
            logger.error(f"Failed to check file permissions: {e}")
            return False
