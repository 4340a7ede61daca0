"""HTTP transport for the remote account service."""

from .base import RemoteAccountClient
from .session import SessionData
from .steam_web import SteamWebClient, TimeQueryResponse

__all__ = ["RemoteAccountClient", "SessionData", "SteamWebClient", "TimeQueryResponse"]
