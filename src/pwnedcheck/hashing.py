"""
SHA-1 helpers for the k-anonymity range protocol.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import hashlib

from pwnedcheck.errors import ConfigurationError

# Only this many leading hash characters are ever sent to the API
HASH_PREFIX_LENGTH = 5
SHA1_LENGTH = 40

_HEX_DIGITS = frozenset("0123456789ABCDEF")


def hash_password(password: str) -> str:
    """Return the uppercase SHA-1 hex digest of a password.

    The hash can be passed around (e.g. through a queue) and checked later
    with HashedPassword without keeping the plaintext.

    Args:
        password: Password to hash (NOT stored or logged)

    Returns:
        40 character uppercase hexadecimal digest
    """
    if not isinstance(password, str):
        raise ConfigurationError("password must be of type str")
    return hashlib.sha1(password.encode("utf-8")).hexdigest().upper()


def normalize_hash(hashed_password: str) -> str:
    """Type-check and uppercase a precomputed SHA-1 hash."""
    if not isinstance(hashed_password, str):
        raise ConfigurationError("hashed_password must be of type str")
    normalized = hashed_password.strip().upper()
    if len(normalized) != SHA1_LENGTH or not all(c in _HEX_DIGITS for c in normalized):
        raise ConfigurationError(
            f"hashed_password must be {SHA1_LENGTH} hexadecimal characters"
        )
    return normalized


def split_hash(hashed_password: str) -> tuple[str, str]:
    """Split a hash into the (prefix, suffix) pair used by the range API."""
    return hashed_password[:HASH_PREFIX_LENGTH], hashed_password[HASH_PREFIX_LENGTH:]
