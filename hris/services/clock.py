"""Current timestamp and calendar date, injectable so "today" can be pinned."""

from datetime import date, datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Wall clock in UTC; "today" is the UTC calendar date."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


system_clock = SystemClock()


def get_clock() -> Clock:
    return system_clock
