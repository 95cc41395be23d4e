"""
Password checkers for the Pwned Passwords API.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from pwnedcheck.client import RangeClient
from pwnedcheck.config import RequestConfig, RequestDefaults, get_request_defaults
from pwnedcheck.hashing import hash_password, normalize_hash


class HashedPassword:
    """A SHA-1 password hash to check against Pwned Passwords.

    Request options are resolved when the object is created, so invalid
    options fail here rather than on the first request. The count is cached
    after the first successful lookup; failed lookups are not cached.

    Example:
        checker = HashedPassword("5BAA61E4C9B93F3F0682250B6CF8331B7EE68FD8")
        checker.pwned_count()  # 3303003
    """

    def __init__(
        self,
        hashed_password: str,
        request_options: Mapping[str, Any] | None = None,
        *,
        defaults: RequestDefaults | None = None,
        client: RangeClient | None = None,
    ):
        """Initialize checker.

        Args:
            hashed_password: Full SHA-1 hash, any case
            request_options: headers, proxy, ignore_env_proxy and timeout
                options overriding the defaults for this check
            defaults: Default options (default: the process-wide defaults)
            client: Range API client (default: a new RangeClient)

        Raises:
            ConfigurationError: On a non-string hash or invalid options
        """
        self.hashed_password = normalize_hash(hashed_password)
        self.request_config: RequestConfig = (defaults or get_request_defaults()).resolve(
            request_options
        )
        self._client = client or RangeClient()
        self._pwned_count: int | None = None
        self._fetch_lock: asyncio.Lock | None = None
        self._fetch_loop: asyncio.AbstractEventLoop | None = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(prefix={self.hashed_password[:5]!r})"

    def _lock_for_running_loop(self) -> asyncio.Lock:
        # asyncio.Lock is bound to one loop; each asyncio.run gets a new one
        loop = asyncio.get_running_loop()
        if self._fetch_lock is None or self._fetch_loop is not loop:
            self._fetch_lock = asyncio.Lock()
            self._fetch_loop = loop
        return self._fetch_lock

    async def fetch_pwned_count(self) -> int:
        """Number of times the password appears in data breaches.

        Concurrent calls on the same checker share a single request.

        Raises:
            PwnedTimeoutError: If the API timed out
            PwnedError: On any other API failure
        """
        if self._pwned_count is not None:
            return self._pwned_count

        async with self._lock_for_running_loop():
            if self._pwned_count is None:
                self._pwned_count = await self._client.fetch_count(
                    self.hashed_password, self.request_config
                )
        return self._pwned_count

    async def fetch_is_pwned(self) -> bool:
        """Whether the password appears in any data breach."""
        return await self.fetch_pwned_count() > 0

    def pwned_count(self) -> int:
        """Synchronous fetch_pwned_count.

        Called from inside a running event loop (an async web handler, a
        notebook), the lookup runs on a worker thread with its own loop and
        the caller blocks until it finishes.
        """
        if self._pwned_count is not None:
            return self._pwned_count

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.fetch_pwned_count())

        with ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(lambda: asyncio.run(self.fetch_pwned_count())).result()

    def is_pwned(self) -> bool:
        """Synchronous fetch_is_pwned."""
        return self.pwned_count() > 0


class Password(HashedPassword):
    """A plaintext password to check against Pwned Passwords.

    The password is hashed once, locally; only the first 5 characters of
    the hash are ever sent.
    """

    def __init__(
        self,
        password: str,
        request_options: Mapping[str, Any] | None = None,
        *,
        defaults: RequestDefaults | None = None,
        client: RangeClient | None = None,
    ):
        super().__init__(
            hash_password(password),
            request_options,
            defaults=defaults,
            client=client,
        )
        self.password = password
