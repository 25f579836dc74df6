# trackvault/common/clock.py
from __future__ import annotations

from datetime import date

from django.utils import timezone


class Clock:
    """Source of "today" for date-based business rules."""

    def today(self) -> date:
        raise NotImplementedError  # pragma: no cover


class SystemClock(Clock):
    def today(self) -> date:
        # Local date in settings.TIME_ZONE, not the UTC date.
        return timezone.localdate()


class FixedClock(Clock):
    def __init__(self, today: date) -> None:
        self._today = today

    def today(self) -> date:
        return self._today
