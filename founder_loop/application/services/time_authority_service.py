"""System time authority.

Production implementation of TimeAuthorityProtocol backed by the host
clock. Always returns UTC; the engine converts to the program timezone.
"""

import time
from datetime import datetime, timezone

from founder_loop.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Time authority reading the host clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()
