"""
Error types raised by the Pwned Passwords checker.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio


class ConfigurationError(TypeError):
    """Invalid argument or request option, raised before any network call."""


class PwnedError(Exception):
    """A request to the Pwned Passwords API failed.

    The underlying exception is available as ``__cause__``.
    """


class PwnedTimeoutError(PwnedError):
    """The Pwned Passwords API did not answer within the configured timeout."""


def classify_error(exc: BaseException) -> PwnedError:
    """Map a transport or protocol failure onto the package error types.

    Args:
        exc: Exception raised while requesting or reading a range response

    Returns:
        A PwnedTimeoutError for connect/read timeouts, a PwnedError otherwise.
        Errors that are already PwnedError instances are returned unchanged.
    """
    if isinstance(exc, PwnedError):
        return exc

    # aiohttp's ServerTimeoutError and ConnectionTimeoutError subclass this too
    if isinstance(exc, asyncio.TimeoutError):
        detail = str(exc) or "request timed out"
        return PwnedTimeoutError(f"Pwned Passwords API timeout: {detail}")

    detail = str(exc) or type(exc).__name__
    return PwnedError(f"Pwned Passwords API request failed: {detail}")
