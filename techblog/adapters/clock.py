from datetime import UTC, datetime, timedelta


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class FrozenClock:
    """Clock pinned to a given instant; advance() moves it forward."""

    def __init__(self, now: datetime):
        self._now = now

    def now_utc(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> datetime:
        self._now = self._now + timedelta(seconds=seconds)
        return self._now
