"""Test helpers shared across the suite."""

from datetime import datetime, timedelta

THERAPIST_ID = "therapist_1"
OTHER_THERAPIST_ID = "therapist_2"


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now
