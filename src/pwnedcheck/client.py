"""
Pwned Passwords range API client.

Implements the k-anonymity lookup: only the first 5 characters of the
SHA-1 hash are sent, the API answers with every known suffix sharing that
prefix, and the suffix is matched locally while the body streams in.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
from contextlib import aclosing
from typing import Any, AsyncIterator

import aiohttp

from pwnedcheck.config import RequestConfig
from pwnedcheck.errors import classify_error
from pwnedcheck.hashing import split_hash
from pwnedcheck.stream import aiter_lines, amatch_count

logger = logging.getLogger(__name__)


class RangeClient:
    """Client for the Pwned Passwords range endpoint.

    Every lookup opens its own session and connection, which is released as
    soon as the matching line has been read.
    """

    # API endpoint
    PWNED_PASSWORDS_API = "https://api.pwnedpasswords.com"

    def __init__(self, api_url: str | None = None):
        """Initialize range client.

        Args:
            api_url: Base URL of the API (default: PWNED_PASSWORDS_API)
        """
        self.api_url = (api_url or self.PWNED_PASSWORDS_API).rstrip("/")

    def range_url(self, prefix: str) -> str:
        """URL listing every suffix for a hash prefix."""
        return f"{self.api_url}/range/{prefix}"

    @staticmethod
    def session_kwargs(config: RequestConfig) -> dict[str, Any]:
        """Keyword arguments for aiohttp.ClientSession."""
        return {
            "headers": dict(config.headers),
            "timeout": config.client_timeout(),
            # Environment proxies (http_proxy, https_proxy, no_proxy)
            "trust_env": not config.ignore_env_proxy,
        }

    @staticmethod
    def request_kwargs(config: RequestConfig) -> dict[str, Any]:
        """Keyword arguments for the GET request.

        Pass-through transport options (``ssl``, ``allow_redirects``, ...)
        are forwarded as given. An explicit proxy takes precedence over any
        environment proxy.
        """
        kwargs = dict(config.transport_options)
        if config.proxy is not None:
            kwargs["proxy"] = config.proxy.url
            kwargs["proxy_auth"] = config.proxy.auth
        return kwargs

    async def iter_lines(self, prefix: str, config: RequestConfig) -> AsyncIterator[str]:
        """Stream the lines of the range response for ``prefix``.

        The connection stays open only while the generator is being consumed;
        close it (``aclose``) to abandon the rest of the body.

        Raises:
            aiohttp.ClientResponseError: On a non-2xx status
            aiohttp.ClientError: On other transport failures
            asyncio.TimeoutError: On connect or read timeout
        """
        url = self.range_url(prefix)
        logger.debug(f"Requesting range {prefix}")

        async with aiohttp.ClientSession(**self.session_kwargs(config)) as session:
            async with session.get(url, **self.request_kwargs(config)) as response:
                logger.debug(f"Range {prefix} answered HTTP {response.status}")
                response.raise_for_status()

                async for line in aiter_lines(response.content.iter_any()):
                    yield line

    async def fetch_count(self, hashed_password: str, config: RequestConfig) -> int:
        """Return how many times a hash appears in the breach corpus.

        Args:
            hashed_password: Uppercase 40 character SHA-1 hash
            config: Resolved request configuration

        Returns:
            Occurrence count, 0 if the hash is not listed

        Raises:
            PwnedTimeoutError: If the request timed out
            PwnedError: On any other request or response failure
        """
        prefix, suffix = split_hash(hashed_password)

        try:
            async with aclosing(self.iter_lines(prefix, config)) as lines:
                count = await amatch_count(lines, suffix)
        except Exception as e:
            error = classify_error(e)
            logger.warning(f"Range lookup for {prefix} failed: {error}")
            if error is e:
                raise
            raise error from e

        logger.debug(f"Range {prefix} lookup complete")
        return count
