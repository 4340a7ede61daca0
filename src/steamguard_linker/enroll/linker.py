"""Linking of a mobile authenticator to a Steam account.

This module drives two protocols against the remote service:
- Adding a new authenticator (optionally registering a phone number first)
- Moving an existing authenticator to this device via an SMS reset

Every call returns a result enum telling the caller what to do next. Remote
failures are folded into GENERAL_FAILURE; the only retries are the phone
verification fallback and the bounded activation loop.
"""

from __future__ import annotations

import threading
import uuid
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

from ..config.settings import ProtocolConfig
from ..errors import DecodeError, TransportError
from ..timesync import TimeAligner, get_default_time_aligner
from ..transport import RemoteAccountClient, SessionData, SteamWebClient
from .models import (
    AddAuthenticatorResponse,
    FinalizeAuthenticatorResponse,
    HasPhoneResponse,
    RemoveTwoFactorResponse,
    ResetOptionsResponse,
    SteamGuardAccount,
    SuccessResponse,
    decode_replacement_token,
)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

PHONE_AJAX_PATH = "/steamguard/phoneajax"
GET_RESET_OPTIONS_PATH = "/login/getresetoptions/"
START_REMOVE_TWO_FACTOR_PATH = "/login/startremovetwofactor/"
REMOVE_TWO_FACTOR_PATH = "/login/removetwofactor/"
ADD_AUTHENTICATOR_PATH = "/ITwoFactorService/AddAuthenticator/v0001"
FINALIZE_ADD_AUTHENTICATOR_PATH = "/ITwoFactorService/FinalizeAddAuthenticator/v0001"

STATUS_OK = 1
STATUS_AUTHENTICATOR_PRESENT = 29
STATUS_BAD_ACTIVATION_CODE = 88
STATUS_BAD_SMS_CODE = 89


class LinkResult(str, Enum):
    """Outcome of add_authenticator and move_authenticator."""

    MUST_PROVIDE_PHONE_NUMBER = "must_provide_phone_number"  # No phone number on the account
    MUST_REMOVE_PHONE_NUMBER = "must_remove_phone_number"  # A phone number is already on the account
    MUST_CONFIRM_EMAIL = "must_confirm_email"  # User must click the link in the confirmation email
    AWAITING_FINALIZATION = "awaiting_finalization"  # Must provide an SMS code
    GENERAL_FAILURE = "general_failure"
    AUTHENTICATOR_PRESENT = "authenticator_present"


class FinalizeResult(str, Enum):
    """Outcome of finalize_add_authenticator and finalize_move_authenticator."""

    BAD_SMS_CODE = "bad_sms_code"
    UNABLE_TO_GENERATE_CORRECT_CODES = "unable_to_generate_correct_codes"
    SUCCESS = "success"
    GENERAL_FAILURE = "general_failure"


def generate_device_id(prefix: str = "android:") -> str:
    """Random device identifier in the format the mobile app uses."""
    return f"{prefix}{uuid.uuid4()}"


class AuthenticatorLinker:
    """Drives the linking of one authenticator for one session.

    An instance holds the state of a single linking attempt and must be
    driven sequentially. The device id is generated once here and reused for
    every request, including retries after an email confirmation.
    """

    def __init__(
        self,
        session: SessionData,
        client: Optional[RemoteAccountClient] = None,
        time_aligner: Optional[TimeAligner] = None,
        protocol: Optional[ProtocolConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize the linker.

        Args:
            session: Authenticated session of the account to link
            client: Remote account client (defaults to a SteamWebClient for the session)
            time_aligner: Server time source (defaults to the process-wide aligner)
            protocol: Protocol tuning parameters
            cancel_event: Event that aborts pending waits and the activation loop
        """
        self.session = session
        self.client = client or SteamWebClient(session)
        self.time_aligner = time_aligner or get_default_time_aligner()
        self.protocol = protocol or ProtocolConfig()
        self._cancel_event = cancel_event or threading.Event()

        # Set to register a new phone number. Must be set if the account has
        # no phone number and must be None if it already has one.
        self.phone_number: Optional[str] = None

        self.device_id = generate_device_id(self.protocol.device_id_prefix)
        self.linked_account: Optional[SteamGuardAccount] = None
        self.finalized = False
        self._confirmation_email_sent = False

    @property
    def confirmation_email_sent(self) -> bool:
        return self._confirmation_email_sent

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Abort pending waits; the running call returns GENERAL_FAILURE."""
        self._cancel_event.set()

    def add_authenticator(self) -> LinkResult:
        """Start linking a new authenticator.

        May have to be called twice: when a phone number is being added the
        first call returns MUST_CONFIRM_EMAIL and the second call, made after
        the user clicked the email link, continues the flow.
        """
        has_phone = self._has_phone_attached()
        if has_phone is None:
            return LinkResult.GENERAL_FAILURE

        if has_phone and self.phone_number is not None:
            return LinkResult.MUST_REMOVE_PHONE_NUMBER

        if not has_phone and self.phone_number is None:
            return LinkResult.MUST_PROVIDE_PHONE_NUMBER

        if not has_phone:
            if self._confirmation_email_sent:
                if not self._check_email_confirmation():
                    logger.warning("Phone number email has not been confirmed yet")
                    return LinkResult.GENERAL_FAILURE
            elif not self._add_phone_number():
                return LinkResult.GENERAL_FAILURE
            else:
                self._confirmation_email_sent = True
                logger.info("Phone number submitted, waiting for email confirmation")
                return LinkResult.MUST_CONFIRM_EMAIL

        post_data = {
            "access_token": self.session.access_token,
            "steamid": str(self.session.steam_id),
            "authenticator_type": "1",
            "device_identifier": self.device_id,
            "sms_phone_id": "1",
        }
        response = self._api_post(ADD_AUTHENTICATOR_PATH, post_data, AddAuthenticatorResponse)
        if response is None or response.response is None:
            return LinkResult.GENERAL_FAILURE

        status = response.response.status
        if status == STATUS_AUTHENTICATOR_PRESENT:
            logger.warning("Account already has an authenticator")
            return LinkResult.AUTHENTICATOR_PRESENT

        if status != STATUS_OK:
            logger.error(f"AddAuthenticator failed with status {status}")
            return LinkResult.GENERAL_FAILURE

        try:
            account = SteamGuardAccount.model_validate(response.response.model_dump())
        except ValidationError as e:
            logger.error(f"AddAuthenticator returned an incomplete account: {e.error_count()} error(s)")
            return LinkResult.GENERAL_FAILURE

        self.linked_account = account.with_device_id(self.device_id)
        logger.info(f"Authenticator added for {account.account_name or self.session.steam_id}, awaiting finalization")
        return LinkResult.AWAITING_FINALIZATION

    def finalize_add_authenticator(self, sms_code: str) -> FinalizeResult:
        """Activate the authenticator with the SMS code sent to the account's phone."""
        if self.linked_account is None:
            logger.error("finalize_add_authenticator called before a successful add_authenticator")
            return FinalizeResult.GENERAL_FAILURE

        # Checking the SMS code is what makes Steam finish attaching the phone
        # number, so only do it when one is being added.
        if self.phone_number and not self._check_sms_code(sms_code):
            if self.cancelled:
                return FinalizeResult.GENERAL_FAILURE
            return FinalizeResult.BAD_SMS_CODE

        post_data = {
            "steamid": str(self.session.steam_id),
            "access_token": self.session.access_token,
            "activation_code": sms_code,
        }
        max_attempts = self.protocol.finalize_max_attempts
        last_attempt = max_attempts - 1

        tries = 0
        while tries < max_attempts:
            if self.cancelled:
                logger.warning(f"Activation cancelled after {tries} attempt(s)")
                return FinalizeResult.GENERAL_FAILURE

            steam_time = self.time_aligner.get_steam_time()
            post_data["authenticator_code"] = self.linked_account.generate_steam_guard_code(steam_time)
            post_data["authenticator_time"] = str(steam_time)

            response = self._api_post(FINALIZE_ADD_AUTHENTICATOR_PATH, post_data, FinalizeAuthenticatorResponse)
            if response is None or response.response is None:
                return FinalizeResult.GENERAL_FAILURE

            result = response.response
            if result.status == STATUS_BAD_SMS_CODE:
                logger.warning("Server rejected the SMS code")
                return FinalizeResult.BAD_SMS_CODE

            if result.status == STATUS_BAD_ACTIVATION_CODE and tries >= last_attempt:
                logger.error(f"Server rejected activation codes for {max_attempts} attempts")
                return FinalizeResult.UNABLE_TO_GENERATE_CORRECT_CODES

            if not result.success:
                logger.error(f"FinalizeAddAuthenticator failed with status {result.status}")
                return FinalizeResult.GENERAL_FAILURE

            if result.want_more:
                logger.debug(f"Server wants another activation code (attempt {tries + 1}/{max_attempts})")
                tries += 1
                continue

            return self._complete(self.linked_account)

        logger.error(f"Server still wanted activation codes after {max_attempts} attempts")
        return FinalizeResult.UNABLE_TO_GENERATE_CORRECT_CODES

    def move_authenticator(self) -> LinkResult:
        """Ask Steam to move the account's authenticator to this device via SMS."""
        response = self._community_post(GET_RESET_OPTIONS_PATH, {"donotcache": self._donotcache()}, ResetOptionsResponse)
        if response is None:
            return LinkResult.GENERAL_FAILURE

        if not response.success or not response.sms_allowed:
            logger.warning("SMS-based authenticator reset is not available for this account")
            return LinkResult.GENERAL_FAILURE

        start = self._community_post(START_REMOVE_TWO_FACTOR_PATH, {"donotcache": self._donotcache()}, SuccessResponse)
        if start is None or not start.success:
            return LinkResult.GENERAL_FAILURE

        logger.info("Authenticator move started, awaiting SMS code")
        return LinkResult.AWAITING_FINALIZATION

    def finalize_move_authenticator(self, sms_code: str) -> FinalizeResult:
        """Complete the move with the SMS code and take over the returned account."""
        post_data = {
            "donotcache": self._donotcache(),
            "reset": "1",
            "smscode": sms_code,
        }
        response = self._community_post(REMOVE_TWO_FACTOR_PATH, post_data, RemoveTwoFactorResponse)
        if response is None or not response.success or not response.replacement_token:
            logger.error("Authenticator move was rejected")
            return FinalizeResult.GENERAL_FAILURE

        try:
            account = decode_replacement_token(response.replacement_token)
        except DecodeError as e:
            logger.error(f"Failed to decode replacement token: {e}")
            return FinalizeResult.GENERAL_FAILURE

        # The token still names the previous device; this device takes it over
        if account.device_id and account.device_id != self.device_id:
            logger.info(f"Rebinding authenticator from device {account.device_id}")
        account = account.model_copy(update={"device_id": self.device_id, "status": STATUS_OK})

        return self._complete(account)

    def _complete(self, account: SteamGuardAccount) -> FinalizeResult:
        account = account.mark_fully_enrolled()
        if not account.is_complete:
            logger.error("Linked account is missing its device id")
            return FinalizeResult.GENERAL_FAILURE

        self.linked_account = account
        self.finalized = True
        logger.info(f"Authenticator linked to device {self.device_id}")
        return FinalizeResult.SUCCESS

    def _check_sms_code(self, sms_code: str) -> bool:
        post_data = {
            "op": "check_sms_code",
            "arg": sms_code,
            "checkfortos": "0",
            "skipvoip": "1",
            "sessionid": self.session.session_id,
        }
        response = self._community_post(PHONE_AJAX_PATH, post_data, SuccessResponse)
        if response is None:
            return False

        if response.success:
            return True

        # Steam may need a few seconds to finish attaching the number
        delay = self.protocol.phone_confirmation_delay_seconds
        logger.info(f"SMS code not confirmed yet, re-checking phone in {delay}s")
        if self._wait(delay):
            logger.warning("Phone verification wait cancelled")
            return False
        return bool(self._has_phone_attached())

    def _add_phone_number(self) -> bool:
        post_data = {
            "op": "add_phone_number",
            "arg": self.phone_number or "",
            "sessionid": self.session.session_id,
        }
        response = self._community_post(PHONE_AJAX_PATH, post_data, SuccessResponse)
        return response is not None and response.success

    def _check_email_confirmation(self) -> bool:
        post_data = {
            "op": "email_confirmation",
            "arg": "",
            "sessionid": self.session.session_id,
        }
        response = self._community_post(PHONE_AJAX_PATH, post_data, SuccessResponse)
        return response is not None and response.success

    def _has_phone_attached(self) -> Optional[bool]:
        """Return whether the account has a phone, or None if the check failed."""
        post_data = {
            "op": "has_phone",
            "arg": "null",
            "sessionid": self.session.session_id,
        }
        response = self._community_post(PHONE_AJAX_PATH, post_data, HasPhoneResponse)
        return None if response is None else response.has_phone

    def _donotcache(self) -> str:
        return str(self.time_aligner.get_steam_time() * 1000)

    def _wait(self, seconds: float) -> bool:
        """Sleep for seconds unless cancelled; returns True if cancelled."""
        return self._cancel_event.wait(seconds)

    def _community_post(self, path: str, data: Dict[str, str], model: type[ResponseT]) -> Optional[ResponseT]:
        return self._request(self.client.community_post, path, data, model)

    def _api_post(self, path: str, data: Dict[str, str], model: type[ResponseT]) -> Optional[ResponseT]:
        return self._request(self.client.api_post, path, data, model)

    def _request(
        self,
        send: Callable[[str, Dict[str, str]], Dict[str, Any]],
        path: str,
        data: Dict[str, str],
        model: type[ResponseT],
    ) -> Optional[ResponseT]:
        """Send one request and parse its body; None on any failure."""
        try:
            payload = send(path, data)
        except TransportError as e:
            logger.error(f"Request to {path} failed: {e}")
            return None

        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Malformed response from {path}: {e.error_count()} error(s)")
            return None
