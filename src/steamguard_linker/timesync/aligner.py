"""Alignment of local time with the Steam server clock.

Activation codes are time-windowed, so they must be generated from the
server's notion of "now". The aligner queries the server once, remembers the
offset and applies it to the local clock from then on. In general the error
is below one second while Steam is operational.
"""

from __future__ import annotations

import asyncio
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from ..errors import TransportError

TimeQuery = Callable[[], int]
Clock = Callable[[], int]


def system_unix_time() -> int:
    """Current local time in whole unix seconds."""
    return int(time.time())


@dataclass(frozen=True)
class ClockOffset:
    """Consistent view of the aligner state."""

    offset: int
    aligned: bool


class TimeAligner:
    """Keeps the offset between the local clock and the server clock.

    The offset is computed lazily on the first time request and never
    refreshed automatically. If the server cannot be reached the aligner stays
    unaligned and reports plain local time, so code generation is never
    blocked on alignment; the next request tries again.
    """

    def __init__(self, time_query: Optional[TimeQuery] = None, clock: Clock = system_unix_time):
        """Initialize the aligner.

        Args:
            time_query: Returns the server time; defaults to the Web API time endpoint
            clock: Local clock in unix seconds
        """
        self._time_query = time_query
        self._clock = clock
        self._offset = 0
        self._aligned = False
        self._state_lock = threading.Lock()
        # Serializes queries so concurrent first callers align only once
        self._align_lock = threading.Lock()

    @property
    def aligned(self) -> bool:
        with self._state_lock:
            return self._aligned

    @property
    def offset(self) -> int:
        with self._state_lock:
            return self._offset

    def snapshot(self) -> ClockOffset:
        """Return offset and aligned flag read together."""
        with self._state_lock:
            return ClockOffset(offset=self._offset, aligned=self._aligned)

    def get_steam_time(self) -> int:
        """Return the authoritative time in unix seconds."""
        if not self.aligned:
            self.align_time()
        return self._clock() + self.offset

    async def get_steam_time_async(self) -> int:
        """Awaitable variant of get_steam_time with the same semantics."""
        if not self.aligned:
            await self.align_time_async()
        return self._clock() + self.offset

    def align_time(self) -> bool:
        """Query the server once and store the offset.

        Returns:
            True if the aligner is aligned after the call
        """
        with self._align_lock:
            if self.aligned:
                return True

            current_time = self._clock()
            try:
                server_time = self._query()
            except TransportError as e:
                logger.warning(f"Time alignment failed, using local clock: {e}")
                return False

            offset = int(server_time - current_time)
            with self._state_lock:
                self._offset = offset
                self._aligned = True

            logger.info(f"Aligned with server time (offset {offset:+d}s)")
            return True

    async def align_time_async(self) -> bool:
        """Awaitable variant of align_time; the query runs in a worker thread."""
        return await asyncio.to_thread(self.align_time)

    def reset(self) -> None:
        """Forget the current alignment."""
        with self._align_lock, self._state_lock:
            self._offset = 0
            self._aligned = False

    def _query(self) -> int:
        if self._time_query is None:
            from ..transport.steam_web import SteamWebClient

            self._time_query = SteamWebClient().query_server_time
        return self._time_query()


_default_aligner: Optional[TimeAligner] = None
_default_aligner_lock = threading.Lock()


def get_default_time_aligner() -> TimeAligner:
    """Get the process-wide time aligner."""
    global _default_aligner
    with _default_aligner_lock:
        if _default_aligner is None:
            _default_aligner = TimeAligner()
        return _default_aligner
