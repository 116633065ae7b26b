# tests/fake_clock.py

HOUR = 60 * 60 * 1000


class FakeClock:
    """A millisecond clock that only moves when told to."""

    def __init__(self, now):
        self.now = now
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.now

    def advance(self, ms):
        self.now += ms
