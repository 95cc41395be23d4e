"""
Framework-agnostic password validator backed by Pwned Passwords.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pwnedcheck.config import RequestDefaults
from pwnedcheck.errors import ConfigurationError, PwnedError
from pwnedcheck.password import Password

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "has previously appeared in a data breach and should not be used"
DEFAULT_ERROR_MESSAGE = "could not be verified against the past data breaches"

# What to do when the API cannot be reached
ON_ERROR_VALID = "valid"
ON_ERROR_INVALID = "invalid"
ON_ERROR_RAISE = "raise_error"

OnError = str | Callable[[Any, PwnedError], None]


class NotPwnedValidator:
    """Rejects passwords that appear in the Pwned Passwords corpus.

    ``validate`` returns a list of error messages, empty when the value is
    acceptable. Hook it into a form or model layer by attaching the messages
    to the field being validated.

    Example:
        validator = NotPwnedValidator(threshold=1, on_error="invalid")
        errors = validator.validate(form["password"], record=form)
    """

    def __init__(
        self,
        threshold: int = 0,
        on_error: OnError = ON_ERROR_VALID,
        request_options: Mapping[str, Any] | None = None,
        message: str = DEFAULT_MESSAGE,
        error_message: str = DEFAULT_ERROR_MESSAGE,
        defaults: RequestDefaults | None = None,
    ):
        """Initialize validator.

        Args:
            threshold: Highest breach count still accepted
            on_error: "valid", "invalid", "raise_error", or a callable
                receiving (record, error) when the API fails
            request_options: Options for every lookup
            message: Error for pwned values; may use ``{count}``
            error_message: Error used by on_error="invalid"
            defaults: Default request options (default: process-wide)

        Raises:
            ConfigurationError: On a non-integer threshold or unknown on_error
        """
        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise ConfigurationError(f"{type(self).__name__} option 'threshold' must be of type int")
        if not callable(on_error) and on_error not in (ON_ERROR_VALID, ON_ERROR_INVALID, ON_ERROR_RAISE):
            raise ConfigurationError(f"Unknown on_error behaviour: {on_error!r}")

        self.threshold = threshold
        self.on_error = on_error
        self.request_options = dict(request_options or {})
        self.message = message
        self.error_message = error_message
        self.defaults = defaults

    def validate(self, value: str | None, record: Any = None) -> list[str]:
        """Check a password, returning validation error messages.

        Blank values are not sent to the API: the empty string never appears
        in the corpus.

        Raises:
            PwnedError: If the API fails and on_error is "raise_error"
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            return []

        checker = Password(value, self.request_options, defaults=self.defaults)
        try:
            count = checker.pwned_count()
        except PwnedError as error:
            return self._handle_error(record, error)

        if count > self.threshold:
            return [self.message.format(count=count)]
        return []

    def __call__(self, value: str | None, record: Any = None) -> list[str]:
        return self.validate(value, record)

    def _handle_error(self, record: Any, error: PwnedError) -> list[str]:
        if callable(self.on_error):
            self.on_error(record, error)
            return []
        if self.on_error == ON_ERROR_INVALID:
            return [self.error_message]
        if self.on_error == ON_ERROR_RAISE:
            raise error

        logger.info(f"Pwned Passwords check skipped, treating value as valid: {error}")
        return []
