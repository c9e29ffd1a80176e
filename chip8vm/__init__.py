"""CHIP-8 / Super-CHIP virtual machine."""

from .decoder import Instruction, Op, decode, disassemble
from .display import Frame
from .errors import (Chip8Error, LoadError, CPUError, UnknownOpcode, StackUnderflow, StackOverflow,
                     AddressOverflow)
from .quirks import Quirks
from .state import Snapshot
from .vm import Chip8

__version__ = "0.1.0"

__all__ = [
    "Chip8", "Quirks", "Snapshot", "Frame", "Instruction", "Op", "decode", "disassemble",
    "Chip8Error", "LoadError", "CPUError", "UnknownOpcode", "StackUnderflow", "StackOverflow",
    "AddressOverflow",
]
