"""Shared fixtures: a scripted remote client and a deterministic time aligner."""

from __future__ import annotations

import base64
import json
import os
from typing import Any, Dict, List, Mapping, Tuple, Union

import pytest

from steamguard_linker.config import ProtocolConfig
from steamguard_linker.enroll import AuthenticatorLinker
from steamguard_linker.errors import TransportError
from steamguard_linker.timesync import TimeAligner
from steamguard_linker.transport import RemoteAccountClient, SessionData

SERVER_TIME = 1_700_000_000
SHARED_SECRET = base64.b64encode(b"secretsecretsecret").decode()

Scripted = Union[Dict[str, Any], Exception]


class FakeSteamClient(RemoteAccountClient):
    """RemoteAccountClient that replays scripted responses.

    Community calls to phoneajax are keyed as "<path>:<op>", everything else by
    path. Each key holds a queue; the last response of a queue repeats.
    """

    def __init__(self, server_time: int = SERVER_TIME):
        self.server_time = server_time
        self.calls: List[Tuple[str, str, Dict[str, str]]] = []
        self._responses: Dict[str, List[Scripted]] = {}

    def script(self, key: str, *responses: Scripted) -> None:
        self._responses.setdefault(key, []).extend(responses)

    def calls_to(self, key: str) -> List[Dict[str, str]]:
        return [data for _, called, data in self.calls if called == key]

    def community_post(self, path: str, data: Mapping[str, str]) -> Dict[str, Any]:
        key = f"{path}:{data['op']}" if "op" in data else path
        return self._reply("community", key, data)

    def api_post(self, path: str, data: Mapping[str, str]) -> Dict[str, Any]:
        return self._reply("api", path, data)

    def query_server_time(self) -> int:
        return self.server_time

    def _reply(self, kind: str, key: str, data: Mapping[str, str]) -> Dict[str, Any]:
        self.calls.append((kind, key, dict(data)))
        queue = self._responses.get(key)
        if not queue:
            raise TransportError(f"No scripted response for {key}")
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response


def account_payload(**overrides: Any) -> Dict[str, Any]:
    payload = {
        "shared_secret": SHARED_SECRET,
        "serial_number": "1234567890",
        "revocation_code": "R12345",
        "uri": "otpauth://totp/Steam:tester?secret=ABC&issuer=Steam",
        "server_time": str(SERVER_TIME),
        "account_name": "tester",
        "token_gid": "2a1b3c",
        "identity_secret": base64.b64encode(b"identityidentity").decode(),
        "secret_1": base64.b64encode(b"secret1").decode(),
        "status": 1,
    }
    payload.update(overrides)
    return payload


def replacement_token(payload: Dict[str, Any]) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep STEAMGUARD_* variables of the developer's shell out of the tests."""
    for name in list(os.environ):
        if name.startswith("STEAMGUARD_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def session() -> SessionData:
    return SessionData(steam_id=76561198000000000, access_token="token", session_id="sess")


@pytest.fixture
def client() -> FakeSteamClient:
    return FakeSteamClient()


@pytest.fixture
def aligner() -> TimeAligner:
    return TimeAligner(time_query=lambda: SERVER_TIME, clock=lambda: SERVER_TIME)


@pytest.fixture
def protocol() -> ProtocolConfig:
    return ProtocolConfig(phone_confirmation_delay_seconds=0)


@pytest.fixture
def linker(session, client, aligner, protocol) -> AuthenticatorLinker:
    return AuthenticatorLinker(session, client=client, time_aligner=aligner, protocol=protocol)
