# Timers - delay and sound count down towards zero at 60Hz of wall-clock time,
# however many instructions the host runs in between.

from .constants import TIMER_HZ

TIMER_PERIOD = 1.0 / TIMER_HZ
# float clocks built from 1/120 steps can land a hair short of 1/60
_TOLERANCE = 1e-9


class Timer:

    def __init__(self, name):
        self.name = name
        self.value = 0
        self.last = None

    def reset(self):
        self.value = 0
        self.last = None

    def load(self, value):
        self.value = value & 0xFF

    def tick(self, now):
        if self.last is None:
            self.last = now
            return False
        if now - self.last < TIMER_PERIOD - _TOLERANCE:
            return False
        # keep to the 1/60 grid; a host that fell more than a period behind starts a new one
        self.last += TIMER_PERIOD
        if now - self.last > TIMER_PERIOD + _TOLERANCE:
            self.last = now
        if self.value > 0:
            self.value -= 1
            return True
        return False


class TimerPair:

    def __init__(self):
        self.delay = Timer("delay")
        self.sound = Timer("sound")

    def reset(self):
        self.delay.reset()
        self.sound.reset()

    def tick(self, now):
        self.delay.tick(now)
        self.sound.tick(now)

    @property
    def beeping(self):
        return self.sound.value > 0
