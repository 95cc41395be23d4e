"""
Request configuration for the Pwned Passwords range API.

Request options are layered: built-in default headers, then process-wide
defaults, then per-call options. Nested mappings (such as ``headers``) are
deep-merged so an override only replaces the keys it names.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
import os
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import unquote, urlsplit

import aiohttp

from pwnedcheck import __version__
from pwnedcheck.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"pwnedcheck/{__version__}"

DEFAULT_REQUEST_HEADERS: Mapping[str, str] = MappingProxyType({
    "User-Agent": DEFAULT_USER_AGENT,
})

# Total request budget in seconds when no timeout option is given
DEFAULT_TIMEOUT = 30.0

# Timeout option name -> aiohttp.ClientTimeout field
TIMEOUT_OPTIONS = {
    "timeout": "total",
    "open_timeout": "connect",
    "connect_timeout": "connect",
    "read_timeout": "sock_read",
}


def _copy_mappings(value: Any) -> Any:
    # Leaf values such as ssl.SSLContext cannot be deep-copied, so only the
    # mapping structure is duplicated.
    if isinstance(value, Mapping):
        return {key: _copy_mappings(item) for key, item in value.items()}
    return value


def deep_merge(base: Mapping[str, Any], other: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``other`` on top of ``base`` without mutating either.

    Values that are mappings on both sides are merged recursively, anything
    else in ``other`` replaces the value in ``base``. Nested mappings in the
    result are fresh dicts; other values are shared with the inputs.
    """
    merged = _copy_mappings(base)
    for key, value in other.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = _copy_mappings(value)
    return merged


@dataclass(frozen=True)
class ProxySettings:
    """An explicit HTTP proxy, parsed from a URL."""

    host: str
    port: int | None = None
    scheme: str = "http"
    user: str | None = None
    password: str | None = None

    @classmethod
    def from_url(cls, url: str) -> "ProxySettings":
        """Parse ``[scheme://][user[:password]@]host[:port]``."""
        if not isinstance(url, str):
            raise ConfigurationError("proxy must be of type str")
        if "://" not in url:
            url = f"http://{url}"

        parts = urlsplit(url)
        try:
            port = parts.port
        except ValueError as e:
            raise ConfigurationError(f"Invalid proxy URL: {e}") from e
        if not parts.hostname:
            raise ConfigurationError("proxy URL must include a host")

        return cls(
            host=parts.hostname,
            port=port,
            scheme=parts.scheme,
            user=unquote(parts.username) if parts.username else None,
            password=unquote(parts.password) if parts.password else None,
        )

    @property
    def url(self) -> str:
        """Proxy URL without credentials."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is not None:
            return f"{self.scheme}://{host}:{self.port}"
        return f"{self.scheme}://{host}"

    @property
    def auth(self) -> aiohttp.BasicAuth | None:
        """Proxy credentials for aiohttp, if the URL carried any."""
        if self.user is None:
            return None
        return aiohttp.BasicAuth(self.user, self.password or "")

    def masked_url(self) -> str:
        """Proxy URL safe for display."""
        if self.user is None:
            return self.url
        scheme, rest = self.url.split("://", 1)
        return f"{scheme}://{self.user}:***@{rest}"


@dataclass(frozen=True)
class RequestConfig:
    """Fully resolved options for a single range request."""

    headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_REQUEST_HEADERS))
    proxy: ProxySettings | None = None
    ignore_env_proxy: bool = False
    timeouts: dict[str, float | None] = field(default_factory=dict)
    # Forwarded unchanged to ClientSession.get (ssl, allow_redirects, ...)
    transport_options: dict[str, Any] = field(default_factory=dict)

    def client_timeout(self) -> aiohttp.ClientTimeout:
        """Build the aiohttp timeout from the timeout options.

        The DEFAULT_TIMEOUT total budget applies only when no timeout option
        was given; otherwise unset fields stay unlimited, so a long
        ``read_timeout`` is not capped by a total the caller never asked for.
        """
        if not self.timeouts:
            return aiohttp.ClientTimeout(total=DEFAULT_TIMEOUT)
        kwargs = {TIMEOUT_OPTIONS[name]: value for name, value in self.timeouts.items()}
        return aiohttp.ClientTimeout(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (proxy credentials masked)."""
        return {
            "headers": dict(self.headers),
            "proxy": self.proxy.masked_url() if self.proxy else None,
            "ignore_env_proxy": self.ignore_env_proxy,
            "timeouts": dict(self.timeouts),
            "transport_options": {name: repr(value) for name, value in self.transport_options.items()},
        }


def _check_mapping(options: Any, name: str) -> Mapping[str, Any]:
    if options is None:
        return {}
    if not isinstance(options, Mapping):
        raise ConfigurationError(f"{name} must be a mapping")
    return options


def _resolve_headers(headers: Any) -> dict[str, str]:
    headers = _check_mapping(headers, "headers")
    for name, value in headers.items():
        if not isinstance(name, str) or not isinstance(value, str):
            raise ConfigurationError("header names and values must be of type str")
    return {**DEFAULT_REQUEST_HEADERS, **headers}


def _resolve_timeouts(options: Mapping[str, Any]) -> dict[str, float | None]:
    resolved: dict[str, float | None] = {}
    for name, value in options.items():
        if value is not None:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"request option {name!r} must be a number")
            if value < 0:
                raise ConfigurationError(f"request option {name!r} must not be negative")
            value = float(value)
        resolved[name] = value
    return resolved


def resolve_request_options(
    process_defaults: Mapping[str, Any] | None = None,
    per_call_options: Mapping[str, Any] | None = None,
) -> RequestConfig:
    """Merge default and per-call options into a RequestConfig.

    Args:
        process_defaults: Process-wide default options
        per_call_options: Options for this request, taking precedence

    Returns:
        Resolved configuration

    Raises:
        ConfigurationError: If any option has the wrong type
    """
    options = deep_merge(
        _check_mapping(process_defaults, "default request options"),
        _check_mapping(per_call_options, "request options"),
    )

    headers = _resolve_headers(options.pop("headers", None))

    proxy = options.pop("proxy", None)
    proxy_settings = ProxySettings.from_url(proxy) if proxy is not None else None

    ignore_env_proxy = options.pop("ignore_env_proxy", False)
    if not isinstance(ignore_env_proxy, bool):
        raise ConfigurationError("ignore_env_proxy must be of type bool")

    timeouts = {name: options.pop(name) for name in TIMEOUT_OPTIONS if name in options}
    for name in options:
        if not isinstance(name, str):
            raise ConfigurationError("request option names must be of type str")

    return RequestConfig(
        headers=headers,
        proxy=proxy_settings,
        ignore_env_proxy=ignore_env_proxy,
        timeouts=_resolve_timeouts(timeouts),
        transport_options=options,
    )


class RequestDefaults:
    """Process-wide default request options.

    Defaults are validated and snapshotted on ``set``; readers always get a
    private copy, so checks running concurrently never observe a partial
    update or each other's overrides.
    """

    def __init__(self, options: Mapping[str, Any] | None = None):
        self._lock = threading.Lock()
        self._options: Mapping[str, Any] = MappingProxyType({})
        if options:
            self.set(options)

    def get(self) -> dict[str, Any]:
        """Return a copy of the current default options."""
        with self._lock:
            return _copy_mappings(self._options)

    def set(self, options: Mapping[str, Any] | None) -> None:
        """Replace the default options.

        Raises:
            ConfigurationError: If the options do not resolve
        """
        snapshot = _copy_mappings(_check_mapping(options, "default request options"))
        resolve_request_options(snapshot)
        with self._lock:
            self._options = MappingProxyType(snapshot)
        logger.debug(f"Default request options updated: {sorted(snapshot)}")

    def resolve(self, per_call_options: Mapping[str, Any] | None = None) -> RequestConfig:
        """Resolve per-call options on top of these defaults."""
        return resolve_request_options(self.get(), per_call_options)

    @classmethod
    def from_env(cls) -> "RequestDefaults":
        """Load default options from environment variables."""
        options: dict[str, Any] = {}

        user_agent = os.environ.get("PWNEDCHECK_USER_AGENT")
        if user_agent:
            options["headers"] = {"User-Agent": user_agent}

        proxy = os.environ.get("PWNEDCHECK_PROXY")
        if proxy:
            options["proxy"] = proxy

        ignore_env_proxy = os.environ.get("PWNEDCHECK_IGNORE_ENV_PROXY")
        if ignore_env_proxy is not None:
            options["ignore_env_proxy"] = ignore_env_proxy.lower() in ("true", "yes", "1")

        for option, variable in (
            ("timeout", "PWNEDCHECK_TIMEOUT"),
            ("open_timeout", "PWNEDCHECK_OPEN_TIMEOUT"),
            ("read_timeout", "PWNEDCHECK_READ_TIMEOUT"),
        ):
            value = os.environ.get(variable)
            if value:
                try:
                    options[option] = float(value)
                except ValueError as e:
                    raise ConfigurationError(f"{variable} must be a number") from e

        return cls(options)


_default_request_options = RequestDefaults()


def get_request_defaults() -> RequestDefaults:
    """Return the shared process-wide RequestDefaults instance."""
    return _default_request_options


def get_default_request_options() -> dict[str, Any]:
    """Return a copy of the process-wide default request options."""
    return _default_request_options.get()


def set_default_request_options(options: Mapping[str, Any] | None) -> None:
    """Set the process-wide default request options.

    Applied to every checker created afterwards unless overridden per call.
    """
    _default_request_options.set(options)
