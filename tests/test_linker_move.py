"""Tests for moving an existing authenticator to this device."""

from __future__ import annotations

import base64
import json

from conftest import SERVER_TIME, account_payload, replacement_token

from steamguard_linker.enroll import FinalizeResult, LinkResult
from steamguard_linker.enroll.linker import GET_RESET_OPTIONS_PATH, REMOVE_TWO_FACTOR_PATH, START_REMOVE_TWO_FACTOR_PATH
from steamguard_linker.errors import TransportError


def reset_options(success=True, allowed=True):
    return {"success": success, "options": {"sms": {"allowed": allowed, "last_digits": "0100"}}}


def test_move_started_when_sms_reset_allowed(linker, client):
    client.script(GET_RESET_OPTIONS_PATH, reset_options())
    client.script(START_REMOVE_TWO_FACTOR_PATH, {"success": True})

    assert linker.move_authenticator() == LinkResult.AWAITING_FINALIZATION

    expected = str(SERVER_TIME * 1000)
    assert client.calls_to(GET_RESET_OPTIONS_PATH) == [{"donotcache": expected}]
    assert client.calls_to(START_REMOVE_TWO_FACTOR_PATH) == [{"donotcache": expected}]


def test_move_refused_without_sms_reset(linker, client):
    client.script(GET_RESET_OPTIONS_PATH, reset_options(allowed=False))

    assert linker.move_authenticator() == LinkResult.GENERAL_FAILURE
    assert client.calls_to(START_REMOVE_TWO_FACTOR_PATH) == []


def test_move_refused_when_options_unsuccessful(linker, client):
    client.script(GET_RESET_OPTIONS_PATH, reset_options(success=False))

    assert linker.move_authenticator() == LinkResult.GENERAL_FAILURE


def test_move_refused_when_options_missing(linker, client):
    client.script(GET_RESET_OPTIONS_PATH, {"success": True})

    assert linker.move_authenticator() == LinkResult.GENERAL_FAILURE


def test_move_start_failure_is_general_failure(linker, client):
    client.script(GET_RESET_OPTIONS_PATH, reset_options())
    client.script(START_REMOVE_TWO_FACTOR_PATH, {"success": False})

    assert linker.move_authenticator() == LinkResult.GENERAL_FAILURE


def test_move_transport_failure_is_general_failure(linker, client):
    client.script(GET_RESET_OPTIONS_PATH, TransportError("Network error: name resolution failed"))

    assert linker.move_authenticator() == LinkResult.GENERAL_FAILURE


def test_finalize_move_takes_over_account(linker, client):
    client.script(
        REMOVE_TWO_FACTOR_PATH,
        {"success": True, "replacement_token": replacement_token(account_payload(status=5))},
    )

    assert linker.finalize_move_authenticator("24680") == FinalizeResult.SUCCESS

    account = linker.linked_account
    assert account.account_name == "tester"
    assert account.status == 1, "Moved accounts are reported with status 1"
    assert account.device_id == linker.device_id
    assert account.fully_enrolled is True
    assert linker.finalized is True

    request = client.calls_to(REMOVE_TWO_FACTOR_PATH)[0]
    assert request == {"donotcache": str(SERVER_TIME * 1000), "reset": "1", "smscode": "24680"}


def test_finalize_move_rejected(linker, client):
    client.script(REMOVE_TWO_FACTOR_PATH, {"success": False})

    assert linker.finalize_move_authenticator("24680") == FinalizeResult.GENERAL_FAILURE
    assert linker.linked_account is None


def test_finalize_move_with_garbage_token(linker, client):
    client.script(REMOVE_TWO_FACTOR_PATH, {"success": True, "replacement_token": "%%% not base64 %%%"})

    assert linker.finalize_move_authenticator("24680") == FinalizeResult.GENERAL_FAILURE
    assert linker.linked_account is None


def test_finalize_move_with_token_missing_secret(linker, client):
    token = base64.b64encode(b'{"account_name": "tester"}').decode()
    client.script(REMOVE_TWO_FACTOR_PATH, {"success": True, "replacement_token": token})

    assert linker.finalize_move_authenticator("24680") == FinalizeResult.GENERAL_FAILURE
    assert linker.finalized is False


def test_finalize_move_rebinds_account_from_previous_device(linker, client):
    token = replacement_token(account_payload(device_id="android:old-phone", fully_enrolled=True))
    client.script(REMOVE_TWO_FACTOR_PATH, {"success": True, "replacement_token": token})

    assert linker.finalize_move_authenticator("24680") == FinalizeResult.SUCCESS
    assert linker.linked_account.device_id == linker.device_id, "The moved account belongs to this device now"
    assert linker.linked_account.status == 1
    assert linker.finalized is True


def test_finalize_move_accepts_line_wrapped_token(linker, client):
    token = base64.encodebytes(json.dumps(account_payload(account_name="wrapped")).encode("utf-8")).decode()
    assert "\n" in token
    client.script(REMOVE_TWO_FACTOR_PATH, {"success": True, "replacement_token": token})

    assert linker.finalize_move_authenticator("24680") == FinalizeResult.SUCCESS
    assert linker.linked_account.account_name == "wrapped"


def test_finalize_move_with_invalid_shared_secret(linker, client):
    token = replacement_token(account_payload(shared_secret="abcde"))
    client.script(REMOVE_TWO_FACTOR_PATH, {"success": True, "replacement_token": token})

    assert linker.finalize_move_authenticator("24680") == FinalizeResult.GENERAL_FAILURE
    assert linker.linked_account is None
