"""Exception hierarchy for balancesim.

All library errors derive from BalanceSimError so callers can catch
everything the simulator raises with a single except clause.

- ConfigurationError: run parameters or policy values rejected before
  the engine is built.
- InvariantViolation: an internal contract was broken (a programming
  error). The run must abort.
- AddressParseError: an origin address whose leading component cannot be
  read. Recoverable; the admission filter turns it into a rejection.
- SimulationFinished: stepping an engine past its configured run length.
"""

from __future__ import annotations


class BalanceSimError(Exception):
    """Base class for all balancesim errors."""


class ConfigurationError(BalanceSimError, ValueError):
    """Invalid run parameter or policy setting."""


class InvariantViolation(BalanceSimError, RuntimeError):
    """An engine or worker invariant was violated."""


class AddressParseError(BalanceSimError, ValueError):
    """The leading component of an address is not an octet."""

    def __init__(self, address: str, reason: str):
        super().__init__(f"cannot parse leading octet of {address!r}: {reason}")
        self.address = address
        self.reason = reason


class SimulationFinished(BalanceSimError):
    """Raised when step() is called after the run length was reached."""
