"""Clocks — implementations of core.repository_protocols.Clock.

Invariants:
    - now() always returns a timezone-aware UTC datetime
"""

from datetime import datetime, timezone


class SystemClock:
    """Wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Returns a pinned instant; advance() moves it. Used by tests and replays."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, delta) -> None:
        self._instant = self._instant + delta
