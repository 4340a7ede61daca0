"""Exceptions raised by the linker stack.

Protocol outcomes are reported as result enums, not exceptions. These types
only cross the seams between the transport, decoding and the linker.
"""

from __future__ import annotations


class LinkerError(Exception):
    """Base class for steamguard-linker errors."""


class TransportError(LinkerError):
    """A remote call failed (network, timeout, non-2xx or malformed body)."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class DecodeError(LinkerError):
    """A replacement token could not be decoded into an account."""


class ConfigurationError(LinkerError):
    """Required configuration is missing or invalid."""
