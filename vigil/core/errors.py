"""Exception types raised by the element command core.

Commands raise these before or after talking to the automation backend so that
callers can tell a malformed call apart from a missing element or a failed
protocol action.
"""
from __future__ import annotations

from typing import Any


class VigilError(Exception):
    """Base class for all errors raised by vigil."""


class ConfigurationError(VigilError):
    """Raised when the configuration file cannot be mapped to settings."""


class InvalidArgument(VigilError, ValueError):
    """Raised when a command is called with a malformed selector or options.

    Always raised before any protocol action is issued.
    """


class ElementNotFound(VigilError):
    """Raised when element lookup exhausts its timeout.

    Not raised when the caller asked for not-found errors to be suppressed.
    """

    def __init__(self, selector: Any, timeout_ms: int) -> None:
        self.selector = selector
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Timed out while waiting for element {selector} to be present for {timeout_ms} milliseconds."
        )


class ProtocolError(VigilError):
    """Raised by executor adapters when a protocol action fails.

    The command core passes it through to the caller unchanged.
    """

    def __init__(self, action: str, message: str) -> None:
        self.action = action
        super().__init__(f"{action}: {message}")


class UnsupportedCapability(VigilError):
    """Raised when the session capabilities lack a field a quirk rule needs.

    Never reaches the caller; the capability inspector treats it as
    "quirk does not apply".
    """
