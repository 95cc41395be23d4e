"""
Pwned Passwords client.

Checks passwords against the Have I Been Pwned Pwned Passwords corpus using
the k-anonymity range API: only the first 5 characters of the password's
SHA-1 hash ever leave this process.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

__version__ = "1.0.0"

from collections.abc import Mapping
from typing import Any

from pwnedcheck.config import (
    RequestConfig,
    RequestDefaults,
    get_default_request_options,
    set_default_request_options,
)
from pwnedcheck.errors import ConfigurationError, PwnedError, PwnedTimeoutError
from pwnedcheck.hashing import hash_password
from pwnedcheck.password import HashedPassword, Password


def pwned(password: str, request_options: Mapping[str, Any] | None = None) -> bool:
    """Whether ``password`` appears in any data breach.

    Example:
        pwnedcheck.pwned("password")  # True
    """
    return Password(password, request_options).is_pwned()


def pwned_count(password: str, request_options: Mapping[str, Any] | None = None) -> int:
    """Number of times ``password`` appears in data breaches."""
    return Password(password, request_options).pwned_count()


async def pwned_async(password: str, request_options: Mapping[str, Any] | None = None) -> bool:
    """Async version of pwned."""
    return await Password(password, request_options).fetch_is_pwned()


async def pwned_count_async(password: str, request_options: Mapping[str, Any] | None = None) -> int:
    """Async version of pwned_count."""
    return await Password(password, request_options).fetch_pwned_count()


__all__ = [
    "ConfigurationError",
    "HashedPassword",
    "Password",
    "PwnedError",
    "PwnedTimeoutError",
    "RequestConfig",
    "RequestDefaults",
    "get_default_request_options",
    "hash_password",
    "pwned",
    "pwned_async",
    "pwned_count",
    "pwned_count_async",
    "set_default_request_options",
]
