# CHIP8 Virtual Machine Steps:
# Input - the host stores key input states, the CPU checks them per cycle.
# Output - 64x32 display (128x64 in extended mode) & a sound timer the host can beep on.
# CPU - one fetch / decode / execute per step.
# Memory - 4096 bytes which includes: the reserved interpreter area, fonts, and the loaded ROM.
#----------------------------------------------------------------------------------------------
# Everything lives on the Chip8 object, so any number of machines can run side by side.
# The host decides how many steps to run per frame and when to tick the timers.

import logging
import random
import time
from collections import deque

from .constants import LOAD_ADDRESS, MEMORY_SIZE
from .cpu import CPU
from .decoder import decode
from .display import Display
from .errors import CPUError, LoadError
from .keypad import Keypad
from .quirks import Quirks
from .state import MachineState, Snapshot
from .timers import TimerPair

log = logging.getLogger(__name__)

MAX_DIAGNOSTICS = 64


class Chip8:

    def __init__(self, quirks=None, rng=None, seed=None):
        self.quirks = quirks or Quirks()
        self.rng = rng or random.Random(seed)
        self.state = MachineState()
        self.display = Display()
        self.keypad = Keypad()
        self.timers = TimerPair()
        self.diagnostics = deque(maxlen=MAX_DIAGNOSTICS)
        self.cpu = CPU(self.state, self.display, self.keypad, self.timers, self.quirks, self.rng,
                       report=self._diagnose)
        self.last_instruction = None
        self.cycle_count = 0
        self._rom = None
        self._rom_address = LOAD_ADDRESS
        self.reset()

    # ---- Load ROM ----
    def load(self, data, address=LOAD_ADDRESS):
        data = bytes(data)
        if address < 0 or address + len(data) > MEMORY_SIZE:
            raise LoadError(
                "ROM of %d bytes does not fit at 0x%03X (%d bytes available)"
                % (len(data), address, max(0, MEMORY_SIZE - address))
            )
        self._rom = data
        self._rom_address = address
        self.reset()
        log.info("Loaded %d byte ROM at 0x%03X", len(data), address)

    def reset(self):
        self.state.reset(pc=self._rom_address)
        if self._rom is not None:
            start = self._rom_address
            self.state.memory[start:start + len(self._rom)] = self._rom
        self.display.reset()
        self.keypad.reset()
        self.timers.reset()
        self.diagnostics.clear()
        self.last_instruction = None
        self.cycle_count = 0

    # ---- Cycle ----
    def step(self):
        """Fetch, decode and execute one instruction.

        Returns the executed ``Instruction``, or None once the program has
        run EXIT.  Execution problems are recorded in ``diagnostics`` and
        never raised.
        """
        state = self.state
        if state.halted:
            return None

        ins = decode(self.cpu.fetch())
        self.last_instruction = ins
        self.cycle_count += 1
        if log.isEnabledFor(logging.DEBUG):
            log.debug("%03X  %s", self.cpu.debug_pc, ins)

        state.pc = (state.pc + 2) & 0xFFFF
        try:
            self.cpu.execute(ins)
        except CPUError as e:
            self._diagnose(e)
        return ins

    def run(self, cycles):
        for _ in range(cycles):
            if self.step() is None:
                break

    def _diagnose(self, error):
        self.diagnostics.append(error)
        log.warning("%s: %s", type(error).__name__, error)

    # ---- Timers ----
    def tick_timers(self, now=None):
        self.timers.tick(time.perf_counter() if now is None else now)

    @property
    def delay_timer(self):
        return self.timers.delay.value

    @property
    def sound_timer(self):
        return self.timers.sound.value

    # ---- Input ----
    def set_key(self, index, pressed):
        self.keypad.set_key(index, pressed)

    def is_pressed(self, index):
        return self.keypad.is_pressed(index)

    # ---- Output ----
    @property
    def should_draw(self):
        return self.display.should_draw

    def framebuffer(self):
        return self.display.frame()

    def consume_frame(self):
        frame = self.display.frame()
        self.display.should_draw = False
        return frame

    @property
    def halted(self):
        return self.state.halted

    def snapshot(self):
        state = self.state
        return Snapshot(
            pc=state.pc,
            sp=state.sp,
            index=state.I,
            delay=self.timers.delay.value,
            sound=self.timers.sound.value,
            registers=tuple(state.V),
            stack=tuple(int(addr) for addr in state.stack),
            extended=self.display.extended,
            mnemonic=self.last_instruction.mnemonic() if self.last_instruction else "",
        )
