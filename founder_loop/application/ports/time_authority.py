"""Time Authority Protocol - interface for consistent timestamp provisioning.

All services that need the current time MUST inject a TimeAuthorityProtocol
implementation instead of calling datetime.now() directly. Every weekly-loop
rule is a deadline comparison, so tests drive the engine through a fake
clock rather than waiting on a real one.

For production:
    Use SystemTimeAuthority from founder_loop/application/services/

For testing:
    Use FakeTimeAuthority from tests/helpers/fake_time_authority.py
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Abstract interface for time authority."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time.

        Returns:
            Current timezone-aware datetime.
        """
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return monotonic clock value for measuring elapsed time.

        Returns:
            Monotonically increasing float value (in seconds). Only
            differences between values are meaningful.
        """
        ...
