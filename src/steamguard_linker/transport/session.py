"""Authenticated session handed to the linker by the caller."""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionData(BaseModel):
    """Session credentials for an already logged-in account.

    The linker never logs in by itself; whoever performed the login builds
    this and passes it in.
    """

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, extra="forbid")

    steam_id: int = Field(..., gt=0, description="64-bit SteamID of the account")
    access_token: str = Field(..., min_length=1, description="OAuth/access token for the Web API")
    session_id: str = Field(..., min_length=1, description="Community sessionid cookie value")
    steam_login_secure: Optional[str] = Field(None, description="steamLoginSecure cookie value")
    cookies: Dict[str, str] = Field(default_factory=dict, description="Additional community cookies")

    def community_cookies(self) -> Dict[str, str]:
        """Cookies sent with every community request, as the mobile app does."""
        cookies = {
            "mobileClientVersion": "0 (2.1.3)",
            "mobileClient": "android",
            "Steam_Language": "english",
            "steamid": str(self.steam_id),
            "sessionid": self.session_id,
        }
        if self.steam_login_secure:
            cookies["steamLoginSecure"] = self.steam_login_secure
        cookies.update(self.cookies)
        return cookies

    def cookie_header(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self.community_cookies().items())
