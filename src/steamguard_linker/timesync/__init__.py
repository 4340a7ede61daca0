"""Server time alignment."""

from .aligner import ClockOffset, TimeAligner, get_default_time_aligner, system_unix_time

__all__ = ["ClockOffset", "TimeAligner", "get_default_time_aligner", "system_unix_time"]
