"""steamguard-linker - mobile authenticator linking with server time alignment."""

from .config import get_config_manager
from .enroll import AuthenticatorLinker, FinalizeResult, LinkResult, SteamGuardAccount
from .timesync import TimeAligner, get_default_time_aligner
from .transport import SessionData

__version__ = "1.0.0"

__all__ = [
    "AuthenticatorLinker",
    "FinalizeResult",
    "LinkResult",
    "SessionData",
    "SteamGuardAccount",
    "TimeAligner",
    "get_config_manager",
    "get_default_time_aligner",
]
