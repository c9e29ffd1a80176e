# We're subclassing pyglet (that'll handle graphics, sound output, and keyboard handling)
# and overriding whatever we need from there.  The window only talks to the VM through
# set_key / step / tick_timers / consume_frame / snapshot.

import logging
import random

import numpy as np
import pyglet
from pyglet.window import key
from pyglet.media import synthesis

from .constants import SCALE, CPU_HZ, TIMER_HZ, WIDTH, HEIGHT

log = logging.getLogger(__name__)

OVERLAY_WIDTH = 200

# map binding keys
KEYMAP = {
    key._1: 0x1, key._2: 0x2, key._3: 0x3, key._4: 0xC,
    key.Q: 0x4, key.W: 0x5, key.E: 0x6, key.R: 0xD,
    key.A: 0x7, key.S: 0x8, key.D: 0x9, key.F: 0xE,
    key.Z: 0xA, key.X: 0x0, key.C: 0xB, key.V: 0xF,
}


class Chip8Window(pyglet.window.Window):

    def __init__(self, vm, scale=SCALE, cpu_hz=CPU_HZ, overlay=False, caption="CHIP-8 Emulator"):
        self.screen_width = WIDTH * scale
        self.screen_height = HEIGHT * scale
        super().__init__(
            width=self.screen_width + (OVERLAY_WIDTH if overlay else 0),
            height=self.screen_height,
            caption=caption,
            vsync=False,
        )
        self.vm = vm
        self.overlay = overlay
        self.cycles_per_frame = max(1, cpu_hz // TIMER_HZ)
        self.paused = False
        self.sound_playing = False
        self.image = None

        # Performance tracking
        self._cps_counter = 0
        self.cycles_per_second = 0

        self.overlay_label = pyglet.text.Label(
            "",
            font_name="Courier New",
            font_size=9,
            x=self.screen_width + 8,
            y=self.screen_height - 8,
            width=OVERLAY_WIDTH - 16,
            multiline=True,
            anchor_x='left',
            anchor_y='top',
            color=(255, 255, 255, 255),
        )

        # Schedule the loops
        pyglet.clock.schedule_interval(self.tick, 1 / TIMER_HZ)
        pyglet.clock.schedule_interval(self._update_bench, 1.0)

    # ---- CPU + timers, once per host frame ----
    def tick(self, dt):
        vm = self.vm
        if not self.paused:
            for _ in range(self.cycles_per_frame):
                if vm.step() is None:
                    break
                self._cps_counter += 1
        vm.tick_timers(pyglet.clock.get_default().time())
        self._update_sound()

    def _update_bench(self, dt):
        self.cycles_per_second = self._cps_counter
        self._cps_counter = 0

    # ---- Sound ----
    def _update_sound(self):
        if self.vm.sound_timer > 0:
            if not self.sound_playing:
                self._play_beep()
        else:
            self.sound_playing = False

    def _play_beep(self, duration=0.2, frequency=440, pitch_variation=15):
        freq = frequency + random.randint(-pitch_variation, pitch_variation)
        wave = synthesis.Sine(duration=duration, frequency=freq, sample_rate=44100)
        player = pyglet.media.Player()
        player.queue(wave)
        player.play()
        self.sound_playing = True

        def on_eos():
            self.sound_playing = False
            player.delete()

        player.on_eos = on_eos

    # ---- Drawing ----
    def _frame_image(self, frame):
        factor = max(1, self.screen_width // frame.width)
        # pyglet images are bottom-up
        pixels = np.flipud(frame.cells).astype(np.uint8) * 255
        scaled = np.repeat(np.repeat(pixels, factor, axis=0), factor, axis=1)
        rgba = np.empty(scaled.shape + (4,), dtype=np.uint8)
        rgba[..., :3] = scaled[..., None]
        rgba[..., 3] = 255
        height, width = scaled.shape
        return pyglet.image.ImageData(width, height, 'RGBA', rgba.tobytes(), pitch=width * 4)

    def on_draw(self):
        if self.vm.should_draw or self.image is None:
            self.image = self._frame_image(self.vm.consume_frame())

        self.clear()
        self.image.blit(0, 0)

        if self.overlay:
            lines = self.vm.snapshot().lines()
            lines.append("")
            lines.append("Cycles/s: %d" % self.cycles_per_second)
            if self.paused:
                lines.append("PAUSED (SPACE steps, O resumes)")
            self.overlay_label.text = "\n".join(lines)
            self.overlay_label.draw()

    # ---- Input ----
    def on_key_press(self, symbol, modifiers):
        if symbol == key.ESCAPE:
            self.close()
        elif symbol in KEYMAP:
            self.vm.set_key(KEYMAP[symbol], True)
        elif symbol == key.F1:
            package_log = logging.getLogger("chip8vm")
            debug = package_log.getEffectiveLevel() > logging.DEBUG
            package_log.setLevel(logging.DEBUG if debug else logging.INFO)
            log.info("Instruction trace %s", "on" if debug else "off")
        elif symbol == key.P:
            self.paused = True
        elif symbol == key.O:
            self.paused = False
        elif symbol == key.SPACE and self.paused:
            self.vm.step()

    def on_key_release(self, symbol, modifiers):
        if symbol in KEYMAP:
            self.vm.set_key(KEYMAP[symbol], False)


def run(vm, **kwargs):
    window = Chip8Window(vm, **kwargs)
    pyglet.app.run()
    return window
