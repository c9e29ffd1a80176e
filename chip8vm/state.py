# CPU state - memory, 16 registers, the index register I, the program counter,
# a stack of 16 return addresses and the Super-CHIP RPL flag registers.

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .constants import (MEMORY_SIZE, NUM_REGISTERS, STACK_DEPTH, NUM_RPL, LOAD_ADDRESS,
                        FONTSET, BIG_FONTSET, SMALL_FONT_ADDRESS, BIG_FONT_ADDRESS)


class MachineState:

    def __init__(self):
        self.memory = bytearray(MEMORY_SIZE)
        self.V = bytearray(NUM_REGISTERS)
        self.I = 0
        self.pc = LOAD_ADDRESS
        self.stack = np.zeros(STACK_DEPTH, dtype=np.uint16)
        self.sp = 0
        self.rpl = bytearray(NUM_RPL)
        self.halted = False
        self.reset()

    def reset(self, pc=LOAD_ADDRESS):
        self.memory[:] = bytes(MEMORY_SIZE)
        self.memory[SMALL_FONT_ADDRESS:SMALL_FONT_ADDRESS + len(FONTSET)] = FONTSET
        self.memory[BIG_FONT_ADDRESS:BIG_FONT_ADDRESS + len(BIG_FONTSET)] = BIG_FONTSET
        self.V[:] = bytes(NUM_REGISTERS)
        self.I = 0
        self.pc = pc
        self.stack[:] = 0
        self.sp = 0
        self.rpl[:] = bytes(NUM_RPL)
        self.halted = False


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the machine for debug overlays."""

    pc: int
    sp: int
    index: int
    delay: int
    sound: int
    registers: Tuple[int, ...]
    stack: Tuple[int, ...]
    extended: bool
    mnemonic: str

    def lines(self):
        out = [
            "PC    : %03X" % self.pc,
            "SP    : %d" % self.sp,
            "INDEX : %03X" % self.index,
            "DELAY : %d" % self.delay,
            "SOUND : %d" % self.sound,
        ]
        for n, (reg, slot) in enumerate(zip(self.registers, self.stack)):
            out.append("V%X : %02X   Stack[%X] : %03X" % (n, reg, n, slot))
        out.append(self.mnemonic)
        return out
