"""Pydantic models for the responses of the linking endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Response(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SuccessResponse(_Response):
    """Generic {"success": bool} body (phoneajax, startremovetwofactor)."""

    success: bool = False


class HasPhoneResponse(_Response):
    """phoneajax op=has_phone."""

    has_phone: bool = False


class SmsResetOption(_Response):
    allowed: bool = False
    last_digits: Optional[str] = None


class ResetOptions(_Response):
    sms: Optional[SmsResetOption] = None


class ResetOptionsResponse(_Response):
    """/login/getresetoptions/."""

    success: bool = False
    options: Optional[ResetOptions] = None

    @property
    def sms_allowed(self) -> bool:
        return self.options is not None and self.options.sms is not None and self.options.sms.allowed


class RemoveTwoFactorResponse(_Response):
    """/login/removetwofactor/."""

    success: bool = False
    replacement_token: Optional[str] = None


class AddAuthenticatorStatus(BaseModel):
    """The "response" object of AddAuthenticator; carries the account fields on status 1."""

    model_config = ConfigDict(extra="allow")

    status: int = Field(..., description="1 on success, 29 if an authenticator is already present")


class AddAuthenticatorResponse(_Response):
    response: Optional[AddAuthenticatorStatus] = None


class FinalizeAuthenticatorStatus(_Response):
    status: int = 0
    server_time: int = 0
    want_more: bool = False
    success: bool = False


class FinalizeAuthenticatorResponse(_Response):
    response: Optional[FinalizeAuthenticatorStatus] = None
