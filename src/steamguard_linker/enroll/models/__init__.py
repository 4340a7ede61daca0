"""Linking data models."""

from .account import SteamGuardAccount, decode_replacement_token, generate_steam_guard_code
from .responses import (
    AddAuthenticatorResponse,
    FinalizeAuthenticatorResponse,
    HasPhoneResponse,
    RemoveTwoFactorResponse,
    ResetOptionsResponse,
    SuccessResponse,
)

__all__ = [
    "SteamGuardAccount",
    "decode_replacement_token",
    "generate_steam_guard_code",
    "AddAuthenticatorResponse",
    "FinalizeAuthenticatorResponse",
    "HasPhoneResponse",
    "RemoveTwoFactorResponse",
    "ResetOptionsResponse",
    "SuccessResponse",
]
