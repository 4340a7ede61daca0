"""Interface of the remote account service used by the linker."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping


class RemoteAccountClient(ABC):
    """Remote calls the linker and time aligner depend on.

    Implementations raise ``TransportError`` for every kind of failure
    (network, timeout, non-2xx status, body that is not a JSON object).
    """

    @abstractmethod
    def community_post(self, path: str, data: Mapping[str, str]) -> Dict[str, Any]:
        """POST a form to a community endpoint and return the decoded JSON body."""

    @abstractmethod
    def api_post(self, path: str, data: Mapping[str, str]) -> Dict[str, Any]:
        """POST a form to a Web API endpoint and return the decoded JSON body."""

    @abstractmethod
    def query_server_time(self) -> int:
        """Return the authoritative server time in unix seconds."""
