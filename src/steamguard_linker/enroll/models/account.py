"""The linked authenticator account and its code generator."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import struct

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...errors import DecodeError

STEAM_GUARD_CODE_CHARS = "23456789BCDFGHJKMNPQRTVWXY"
STEAM_GUARD_CODE_LENGTH = 5
STEAM_GUARD_CODE_PERIOD = 30


def generate_steam_guard_code(shared_secret: str, timestamp: int) -> str:
    """Generate the Steam Guard code for a given unix time.

    HMAC-SHA1 of the 30-second counter, dynamically truncated and rendered in
    Steam's 26-character alphabet.
    """
    key = base64.b64decode(shared_secret)
    digest = hmac.new(key, struct.pack(">Q", timestamp // STEAM_GUARD_CODE_PERIOD), hashlib.sha1).digest()

    start = digest[19] & 0x0F
    code_point = struct.unpack(">I", digest[start : start + 4])[0] & 0x7FFFFFFF

    chars = []
    for _ in range(STEAM_GUARD_CODE_LENGTH):
        code_point, index = divmod(code_point, len(STEAM_GUARD_CODE_CHARS))
        chars.append(STEAM_GUARD_CODE_CHARS[index])
    return "".join(chars)


class SteamGuardAccount(BaseModel):
    """Secret material and status issued for a mobile authenticator.

    Instances are immutable. The linker stamps the device id and the
    fully-enrolled flag through with_device_id() and mark_fully_enrolled(),
    which return updated copies and never undo an earlier stamp. An account
    taken over from another device is rebound by the move flow instead.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    shared_secret: str = Field(..., min_length=1, description="Base64 secret used for login codes")
    serial_number: str = Field("", description="Authenticator serial number")
    revocation_code: str = Field("", description="Code that removes the authenticator from the account")
    uri: str = Field("", description="otpauth URI")
    server_time: int = Field(0, description="Server time when the authenticator was issued")
    account_name: str = Field("", description="Login name of the account")
    token_gid: str = Field("", description="Token group id")
    identity_secret: str = Field("", description="Base64 secret used for confirmations")
    secret_1: str = Field("", description="Additional secret")
    status: int = Field(0, description="Enrollment status code reported by the server")
    device_id: str = Field("", description="Device identifier the authenticator is bound to")
    fully_enrolled: bool = Field(False, description="True once FinalizeAddAuthenticator succeeded")

    @property
    def is_complete(self) -> bool:
        """True when the account can be handed out as a successful enrollment."""
        return bool(self.device_id) and self.fully_enrolled

    @field_validator("shared_secret")
    @classmethod
    def validate_shared_secret(cls, v: str) -> str:
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"shared_secret is not valid base64: {e}") from e
        return v

    def generate_steam_guard_code(self, timestamp: int) -> str:
        return generate_steam_guard_code(self.shared_secret, timestamp)

    def with_device_id(self, device_id: str) -> SteamGuardAccount:
        """Return a copy bound to device_id.

        Raises:
            ValueError: if the account is already bound to another device
        """
        if not device_id:
            raise ValueError("device_id must not be empty")
        if self.device_id and self.device_id != device_id:
            raise ValueError(f"Account is already bound to device {self.device_id}")
        return self.model_copy(update={"device_id": device_id})

    def mark_fully_enrolled(self) -> SteamGuardAccount:
        return self.model_copy(update={"fully_enrolled": True})


def decode_replacement_token(token: str) -> SteamGuardAccount:
    """Decode the replacement_token returned by /login/removetwofactor/.

    The token is base64 of a UTF-8 JSON document describing the account.
    Line breaks and other whitespace inside the token are ignored.

    Raises:
        DecodeError: if any decoding step fails or the account is incomplete
    """
    try:
        raw = base64.b64decode("".join(token.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Replacement token is not valid base64: {e}") from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"Replacement token is not UTF-8: {e}") from e

    try:
        return SteamGuardAccount.model_validate_json(text)
    except ValidationError as e:
        raise DecodeError(f"Replacement token does not describe an account: {e.error_count()} error(s)") from e
