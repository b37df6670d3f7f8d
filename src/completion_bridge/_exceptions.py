"""
Translate transport tracebacks and malformed responses into a unified
`BridgeError`, while preserving the original exception for full tracebacks.
"""

from __future__ import annotations

import logging
from typing import Optional

from openai import APIConnectionError, APIStatusError, APITimeoutError

__all__: tuple[str, ...] = (
    "BridgeError",
    "WireTransportError",
    "WireParseError",
    "ProtocolViolation",
    "classify_error",
)


class BridgeError(RuntimeError):
    """Public bridge-level exception.

    Attributes:
        original_exc: The underlying exception, if any.
    """

    original_exc: Optional[Exception]

    def __init__(self, message: str, original_exc: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.original_exc = original_exc
        self.__cause__ = original_exc


class WireTransportError(BridgeError):
    """Connection failure, timeout or non-2xx status from the completion endpoint."""


class WireParseError(BridgeError):
    """The completion endpoint answered with a body that is not valid JSON."""


class ProtocolViolation(BridgeError):
    """Valid JSON, wrong shape (or an unknown message role on the way out)."""


def classify_error(
    exc: Exception,
    logger: Optional[logging.Logger] = None,
) -> WireTransportError:
    """Wrap an SDK/transport exception in WireTransportError with a concise message."""
    log = logger or logging.getLogger("completion_bridge.exceptions")

    if isinstance(exc, APITimeoutError):
        msg = "Timed out waiting for the completion endpoint"
    elif isinstance(exc, APIConnectionError):
        msg = "Connection problem – unable to reach the completion endpoint"
    elif isinstance(exc, APIStatusError):
        msg = f"Completion endpoint returned HTTP {exc.status_code}"
    elif isinstance(exc, (TimeoutError, ConnectionError)):
        msg = "Connection problem – unable to reach the completion endpoint"
    else:
        msg = exc.__class__.__name__

    log.warning("Wrapping transport exception", extra={"exc": exc})
    return WireTransportError(f"{msg}: {exc}", exc)
