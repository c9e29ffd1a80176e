# Input - store key input states; the host fills them, the CPU only reads them.

import numpy as np

from .constants import NUM_KEYS


class Keypad:

    def __init__(self):
        self.keys = np.zeros(NUM_KEYS, dtype=bool)

    def reset(self):
        self.keys[:] = False

    def _check(self, index):
        if not 0 <= index < NUM_KEYS:
            raise ValueError("Key index out of range: %r" % (index,))

    def set_key(self, index, pressed):
        self._check(index)
        self.keys[index] = bool(pressed)

    def is_pressed(self, index):
        self._check(index)
        return bool(self.keys[index])

    def first_pressed(self):
        """Lowest pressed key index, or None if nothing is held."""
        pressed = np.flatnonzero(self.keys)
        return int(pressed[0]) if pressed.size else None
