"""
Data models for Pwned Passwords lookups.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from pwnedcheck.errors import PwnedError
from pwnedcheck.hashing import HASH_PREFIX_LENGTH

if TYPE_CHECKING:
    from pwnedcheck.password import HashedPassword


class RiskLevel(str, Enum):
    """Risk level based on password exposure."""

    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Exclusive upper breach count of each band; anything above is CRITICAL
RISK_BANDS: tuple[tuple[int, RiskLevel], ...] = (
    (1, RiskLevel.SAFE),
    (10, RiskLevel.LOW),
    (1_000, RiskLevel.MEDIUM),
    (100_000, RiskLevel.HIGH),
)


@dataclass
class PasswordCheckResult:
    """Result of checking a password against Pwned Passwords.

    ``threshold`` is the highest breach count still accepted, the same rule
    NotPwnedValidator applies.
    """

    occurrences: int = 0
    threshold: int = 0
    checked_at: datetime = field(default_factory=datetime.now)
    error: str | None = None
    # Never store the actual password or full hash!
    hash_prefix: str = ""  # Only first 5 chars of SHA-1

    @property
    def is_pwned(self) -> bool:
        """Check if password was found in breaches."""
        return self.occurrences > 0

    @property
    def acceptable(self) -> bool:
        """Whether the breach count is within the threshold."""
        return self.error is None and self.occurrences <= self.threshold

    @property
    def risk_level(self) -> RiskLevel:
        """Band the breach count falls into."""
        for upper, level in RISK_BANDS:
            if self.occurrences < upper:
                return level
        return RiskLevel.CRITICAL

    @property
    def risk_description(self) -> str:
        """Get human-readable risk description."""
        descriptions = {
            RiskLevel.SAFE: "Not found in the Pwned Passwords corpus.",
            RiskLevel.LOW: f"Seen {self.occurrences} times in data breaches. Consider a different password.",
            RiskLevel.MEDIUM: f"Seen {self.occurrences} times in data breaches. Do not use it.",
            RiskLevel.HIGH: f"Seen {self.occurrences:,} times in data breaches! Replace it immediately.",
            RiskLevel.CRITICAL: f"Seen {self.occurrences:,} times in data breaches! It is in every attacker wordlist.",
        }
        return descriptions[self.risk_level]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "is_pwned": self.is_pwned,
            "occurrences": self.occurrences,
            "threshold": self.threshold,
            "acceptable": self.acceptable,
            "risk_level": self.risk_level.value,
            "risk_description": self.risk_description,
            "hash_prefix": self.hash_prefix,
            "checked_at": self.checked_at.isoformat(),
            "error": self.error,
        }

    @classmethod
    async def from_checker(cls, checker: "HashedPassword", threshold: int = 0) -> "PasswordCheckResult":
        """Run a lookup and record its outcome.

        API failures are stored in ``error`` instead of being raised.
        """
        result = cls(threshold=threshold, hash_prefix=checker.hashed_password[:HASH_PREFIX_LENGTH])
        try:
            result.occurrences = await checker.fetch_pwned_count()
        except PwnedError as e:
            result.error = str(e)
        return result
