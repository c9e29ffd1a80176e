"""Exceptions raised by the interpreter.

``LoadError`` is surfaced to the caller.  Everything derived from ``CPUError``
is raised inside an instruction handler and turned into a diagnostic by
``Chip8.step``; it never stops the machine.
"""


class Chip8Error(Exception):
    pass


class LoadError(Chip8Error):
    pass


class CPUError(Chip8Error):
    def __init__(self, message, pc=None, opcode=None):
        super().__init__(message)
        self.pc = pc
        self.opcode = opcode

    def __str__(self):
        text = super().__str__()
        if self.opcode is not None and self.pc is not None:
            return "%s (opcode %04X at 0x%03X)" % (text, self.opcode, self.pc)
        return text


class UnknownOpcode(CPUError):
    pass


class StackUnderflow(CPUError):
    pass


class StackOverflow(CPUError):
    pass


class AddressOverflow(CPUError):
    pass
