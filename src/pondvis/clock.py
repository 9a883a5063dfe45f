import time


class SystemClock:
    """Wall clock in milliseconds."""

    def now(self):
        return time.monotonic() * 1000.0


class ManualClock:
    """
    Clock that only moves when told to.
    Used for offline rendering (one step per video frame) and for tests.
    """

    def __init__(self, start=0.0):
        self.current = float(start)

    def now(self):
        return self.current

    def set(self, ms):
        self.current = float(ms)

    def advance(self, ms):
        self.current += ms
        return self.current
