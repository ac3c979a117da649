"""
Injectable clocks.

SystemClock is wall time plus an optional debug offset; ManualClock only
moves when told to.
"""
from datetime import datetime, timedelta, timezone

from config import DEBUG_TIME_OFFSET_DAYS


class SystemClock:
    def __init__(self, offset: timedelta | None = None):
        self.offset = offset if offset is not None else timedelta(days=DEBUG_TIME_OFFSET_DAYS)

    def now(self) -> datetime:
        return datetime.now(timezone.utc) + self.offset


class ManualClock:
    def __init__(self, start: datetime):
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> datetime:
        """advance(days=1, hours=2) - same keywords as timedelta"""
        self._now = self._now + timedelta(**kwargs)
        return self._now

    def set(self, moment: datetime) -> None:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        self._now = moment
