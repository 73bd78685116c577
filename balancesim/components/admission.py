"""Admission filtering by origin address range.

The filter reads the first dotted component of a request's origin
address and rejects the request when that octet falls inside any
configured blocked range. Addresses whose leading component is not an
octet are rejected with a separate outcome so they can be told apart
from range blocks in reports.

Filters are plain classes with no simulation state beyond their own
counters; the engine decides what to do with each decision.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from balancesim.core.errors import AddressParseError, ConfigurationError
from balancesim.core.request import Request

logger = logging.getLogger(__name__)

OCTET_MIN = 0
OCTET_MAX = 255


class AdmissionOutcome(Enum):
    ACCEPTED = "accepted"
    BLOCKED_RANGE = "blocked_range"
    MALFORMED_ADDRESS = "malformed_address"


@dataclass(frozen=True)
class BlockedRange:
    """Closed interval of leading octets to reject."""

    low: int
    high: int

    def __post_init__(self) -> None:
        for bound in (self.low, self.high):
            if not OCTET_MIN <= bound <= OCTET_MAX:
                raise ConfigurationError(
                    f"blocked range bound {bound} outside [{OCTET_MIN}, {OCTET_MAX}]"
                )
        if self.low > self.high:
            raise ConfigurationError(f"blocked range is empty: [{self.low}, {self.high}]")

    @classmethod
    def parse(cls, text: str) -> BlockedRange:
        """Build a range from ``"LOW-HIGH"`` or a single ``"N"``."""
        parts = text.strip().split("-")
        try:
            if len(parts) == 1:
                value = int(parts[0])
                return cls(value, value)
            if len(parts) == 2:
                return cls(int(parts[0]), int(parts[1]))
        except ValueError as exc:
            raise ConfigurationError(f"invalid blocked range {text!r}") from exc
        raise ConfigurationError(f"invalid blocked range {text!r}")

    def __contains__(self, octet: int) -> bool:
        return self.low <= octet <= self.high

    def __str__(self) -> str:
        return f"{self.low}-{self.high}"


DEFAULT_BLOCKED_RANGES = (BlockedRange(192, 192),)


@dataclass(frozen=True)
class AdmissionDecision:
    """Result of filtering one request."""

    outcome: AdmissionOutcome
    reason: str = ""

    @property
    def accepted(self) -> bool:
        return self.outcome is AdmissionOutcome.ACCEPTED


_ACCEPTED = AdmissionDecision(AdmissionOutcome.ACCEPTED)


def parse_leading_octet(address: str) -> int:
    """Return the integer value of the first dotted component.

    Raises:
        AddressParseError: If the component is missing, not a plain
            decimal number, or outside [0, 255].
    """
    head = address.split(".", 1)[0]
    if not head:
        raise AddressParseError(address, "empty leading component")
    if not head.isdigit() or not head.isascii():
        raise AddressParseError(address, f"{head!r} is not a decimal number")
    value = int(head)
    if value > OCTET_MAX:
        raise AddressParseError(address, f"{value} exceeds {OCTET_MAX}")
    return value


@dataclass(frozen=True)
class AdmissionFilterStats:
    """Statistics tracked by AdmissionFilter."""

    inspected: int = 0
    accepted: int = 0
    blocked_range: int = 0
    malformed: int = 0


class AdmissionFilter:
    """Rejects requests whose origin's leading octet is in a blocked range.

    Args:
        blocked_ranges: Ranges to reject. An empty iterable admits every
            well-formed address.
    """

    def __init__(self, blocked_ranges: Iterable[BlockedRange] = DEFAULT_BLOCKED_RANGES):
        self._ranges = tuple(blocked_ranges)

        self._inspected = 0
        self._accepted = 0
        self._blocked_range = 0
        self._malformed = 0

    @property
    def blocked_ranges(self) -> tuple[BlockedRange, ...]:
        return self._ranges

    @property
    def stats(self) -> AdmissionFilterStats:
        """Return a frozen snapshot of current statistics."""
        return AdmissionFilterStats(
            inspected=self._inspected,
            accepted=self._accepted,
            blocked_range=self._blocked_range,
            malformed=self._malformed,
        )

    def is_blocked(self, octet: int) -> bool:
        return any(octet in r for r in self._ranges)

    def check(self, request: Request) -> AdmissionDecision:
        """Decide whether ``request`` may enter the pending queue."""
        self._inspected += 1
        try:
            octet = parse_leading_octet(request.origin_address)
        except AddressParseError as exc:
            self._malformed += 1
            logger.debug("Rejecting malformed origin: %s", exc)
            return AdmissionDecision(AdmissionOutcome.MALFORMED_ADDRESS, str(exc))

        if self.is_blocked(octet):
            self._blocked_range += 1
            return AdmissionDecision(
                AdmissionOutcome.BLOCKED_RANGE,
                f"origin {request.origin_address} in blocked range",
            )

        self._accepted += 1
        return _ACCEPTED
