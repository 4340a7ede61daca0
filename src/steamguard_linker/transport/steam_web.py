"""HTTP transport for the Steam community site and Web API.

This module posts form-encoded requests over urllib and decodes the JSON
bodies. Every failure is raised as TransportError so callers can fold it into
their own result codes.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from ..config.settings import TransportConfig
from ..errors import TransportError
from .base import RemoteAccountClient
from .session import SessionData


class ServerTime(BaseModel):
    model_config = ConfigDict(extra="ignore")

    server_time: int


class TimeQueryResponse(BaseModel):
    """Body of ITwoFactorService/QueryTime."""

    model_config = ConfigDict(extra="ignore")

    response: ServerTime


class SteamWebClient(RemoteAccountClient):
    """urllib-backed client for the endpoints the linker talks to."""

    def __init__(
        self,
        session: Optional[SessionData] = None,
        config: Optional[TransportConfig] = None,
    ):
        """Initialize the client.

        Args:
            session: Authenticated session; only needed for community calls
            config: Transport configuration
        """
        self.session = session
        self.config = config or TransportConfig()

    def community_post(self, path: str, data: Mapping[str, str]) -> Dict[str, Any]:
        url = self.config.community_base.rstrip("/") + path
        headers = {
            "Accept": "text/javascript, text/html, application/xml, text/xml, */*",
            "Referer": self.config.community_base.rstrip("/") + "/mobilelogin?oauth_client_id=DE45CD61&oauth_scope=read_profile%20write_profile%20read_client%20write_client",
        }
        if self.session is not None:
            headers["Cookie"] = self.session.cookie_header()
        return self._post_json(url, data, headers)

    def api_post(self, path: str, data: Mapping[str, str]) -> Dict[str, Any]:
        url = self.config.api_base.rstrip("/") + path
        headers = {
            "Accept": "application/json",
            "X-Requested-With": "com.valvesoftware.android.steam.community",
        }
        return self._post_json(url, data, headers)

    def query_server_time(self) -> int:
        payload = self._post_json(self.config.time_query_url, {"steamid": "0"}, {"Accept": "application/json"})
        try:
            return TimeQueryResponse.model_validate(payload).response.server_time
        except ValidationError as e:
            raise TransportError(f"Malformed time query response: {e}", url=self.config.time_query_url) from e

    def _post_json(self, url: str, data: Mapping[str, str], headers: Mapping[str, str]) -> Dict[str, Any]:
        """Send a single form POST and decode the JSON object it returns.

        Args:
            url: Full endpoint URL
            data: Form fields
            headers: Extra request headers

        Returns:
            Decoded JSON object

        Raises:
            TransportError: on any network, HTTP or decoding failure
        """
        req = Request(
            url,
            data=urlencode(dict(data)).encode("utf-8"),
            headers={
                "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
                "User-Agent": self.config.user_agent,
                **headers,
            },
            method="POST",
        )

        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as response:
                if not 200 <= response.status < 300:
                    raise TransportError(f"HTTP {response.status}: {response.reason}", url=url)
                body = response.read().decode("utf-8")

        except HTTPError as e:
            raise TransportError(f"HTTP error: {e.code} {e.reason}", url=url) from e

        except URLError as e:
            raise TransportError(f"Network error: {e.reason}", url=url) from e

        except (TimeoutError, OSError) as e:
            raise TransportError(f"Request error: {e}", url=url) from e

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise TransportError(f"Response is not JSON: {e}", url=url) from e

        if not isinstance(payload, dict):
            raise TransportError("Response is not a JSON object", url=url)

        logger.debug(f"POST {url} -> {len(body)} bytes")
        return payload
