"""Authenticator linking and device transfer."""

from .linker import AuthenticatorLinker, FinalizeResult, LinkResult, generate_device_id
from .models import SteamGuardAccount, decode_replacement_token

__all__ = [
    "AuthenticatorLinker",
    "FinalizeResult",
    "LinkResult",
    "SteamGuardAccount",
    "decode_replacement_token",
    "generate_device_id",
]
