# Output - 64x32 display (pixels are either in the on or off state), 128x64 in extended mode.
# Sprites are XORed onto the grid and wrap around both edges.

from collections import namedtuple

import numpy as np

from .constants import WIDTH, HEIGHT, HIRES_WIDTH, HIRES_HEIGHT

Frame = namedtuple("Frame", ["width", "height", "cells"])


class Display:

    def __init__(self):
        self.extended = False
        self.width, self.height = WIDTH, HEIGHT
        self.vram = np.zeros((self.height, self.width), dtype=bool)
        self.should_draw = True

    def reset(self):
        self.set_extended(False)
        self.should_draw = True

    def set_extended(self, extended):
        # Mode changes always clear the screen, even when the mode is unchanged
        self.extended = bool(extended)
        self.width, self.height = (HIRES_WIDTH, HIRES_HEIGHT) if self.extended else (WIDTH, HEIGHT)
        self.vram = np.zeros((self.height, self.width), dtype=bool)
        self.should_draw = True

    def clear(self):
        self.vram[:] = False
        self.should_draw = True

    def draw_sprite(self, x, y, data, sprite_width=8):
        """XOR ``data`` onto the grid with its top-left corner at (x, y).

        ``data`` holds one byte per row for 8-wide sprites, two bytes per row
        (big-endian) for 16-wide ones.  Returns True if any lit pixel was
        switched off.
        """
        bits = np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8))
        bits = bits.reshape(-1, sprite_width).astype(bool)
        rows = np.arange(bits.shape[0]) + y
        cols = np.arange(sprite_width) + x
        region = np.ix_(rows % self.height, cols % self.width)

        current = self.vram[region]
        collided = bool(np.any(current & bits))
        self.vram[region] = current ^ bits
        self.should_draw = True
        return collided

    def scroll_down(self, n):
        n = min(n, self.height)
        if n:
            self.vram[n:] = self.vram[:self.height - n].copy()
            self.vram[:n] = False
        self.should_draw = True

    def scroll_right(self, n):
        n = min(n, self.width)
        if n:
            self.vram[:, n:] = self.vram[:, :self.width - n].copy()
            self.vram[:, :n] = False
        self.should_draw = True

    def scroll_left(self, n):
        n = min(n, self.width)
        if n:
            self.vram[:, :self.width - n] = self.vram[:, n:].copy()
            self.vram[:, self.width - n:] = False
        self.should_draw = True

    def frame(self):
        cells = self.vram.copy()
        cells.flags.writeable = False
        return Frame(self.width, self.height, cells)

    def pixel(self, x, y):
        return bool(self.vram[y % self.height, x % self.width])
