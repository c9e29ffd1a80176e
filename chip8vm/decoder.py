# CPU - Cowgod's CHIP-8 Technical reference http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
# Decoding splits the 16-bit word into nibbles:
#   nnn = address (low 12 bits), kk = byte (low 8 bits), n = nibble (low 4 bits),
#   x/y = registers (second and third nibble).
# Every word decodes to exactly one Op; anything unrecognised becomes Op.UNKNOWN.

from enum import Enum, auto
from typing import NamedTuple


class Op(Enum):
    CLS = auto()
    RET = auto()
    SYS = auto()
    JP = auto()
    CALL = auto()
    SE_VX_KK = auto()
    SNE_VX_KK = auto()
    SE_VX_VY = auto()
    LD_VX_KK = auto()
    ADD_VX_KK = auto()
    LD_VX_VY = auto()
    OR = auto()
    AND = auto()
    XOR = auto()
    ADD = auto()
    SUB = auto()
    SHR = auto()
    SUBN = auto()
    SHL = auto()
    SNE_VX_VY = auto()
    LD_I = auto()
    JP_V0 = auto()
    RND = auto()
    DRW = auto()
    SKP = auto()
    SKNP = auto()
    LD_VX_DT = auto()
    LD_VX_K = auto()
    LD_DT_VX = auto()
    LD_ST_VX = auto()
    ADD_I_VX = auto()
    LD_F_VX = auto()
    LD_B_VX = auto()
    LD_I_VX = auto()
    LD_VX_I = auto()
    # Super-CHIP
    SCD = auto()
    SCR = auto()
    SCL = auto()
    EXIT = auto()
    LOW = auto()
    HIGH = auto()
    LD_HF_VX = auto()
    LD_R_VX = auto()
    LD_VX_R = auto()
    UNKNOWN = auto()

    @property
    def mnemonic(self):
        if self is Op.UNKNOWN:
            return "???"
        return self.name.split("_")[0]


EXTENDED_OPS = frozenset({
    Op.SCD, Op.SCR, Op.SCL, Op.EXIT, Op.LOW, Op.HIGH, Op.LD_HF_VX, Op.LD_R_VX, Op.LD_VX_R,
})

# Operand layouts used for rendering, keyed by op
_OPERANDS = {
    Op.SYS: "{nnn:03X}",
    Op.JP: "{nnn:03X}",
    Op.CALL: "{nnn:03X}",
    Op.SE_VX_KK: "V{x:X}, {kk:02X}",
    Op.SNE_VX_KK: "V{x:X}, {kk:02X}",
    Op.SE_VX_VY: "V{x:X}, V{y:X}",
    Op.LD_VX_KK: "V{x:X}, {kk:02X}",
    Op.ADD_VX_KK: "V{x:X}, {kk:02X}",
    Op.LD_VX_VY: "V{x:X}, V{y:X}",
    Op.OR: "V{x:X}, V{y:X}",
    Op.AND: "V{x:X}, V{y:X}",
    Op.XOR: "V{x:X}, V{y:X}",
    Op.ADD: "V{x:X}, V{y:X}",
    Op.SUB: "V{x:X}, V{y:X}",
    Op.SHR: "V{x:X} {{, V{y:X}}}",
    Op.SUBN: "V{x:X}, V{y:X}",
    Op.SHL: "V{x:X} {{, V{y:X}}}",
    Op.SNE_VX_VY: "V{x:X}, V{y:X}",
    Op.LD_I: "I, {nnn:03X}",
    Op.JP_V0: "V0, {nnn:03X}",
    Op.RND: "V{x:X}, {kk:02X}",
    Op.DRW: "V{x:X}, V{y:X}, {n:X}",
    Op.SKP: "V{x:X}",
    Op.SKNP: "V{x:X}",
    Op.LD_VX_DT: "V{x:X}, DT",
    Op.LD_VX_K: "V{x:X}, K",
    Op.LD_DT_VX: "DT, V{x:X}",
    Op.LD_ST_VX: "ST, V{x:X}",
    Op.ADD_I_VX: "I, V{x:X}",
    Op.LD_F_VX: "F, V{x:X}",
    Op.LD_B_VX: "B, V{x:X}",
    Op.LD_I_VX: "[I], V{x:X}",
    Op.LD_VX_I: "V{x:X}, [I]",
    Op.SCD: "{n:X}",
    Op.LD_HF_VX: "HF, V{x:X}",
    Op.LD_R_VX: "R, V{x:X}",
    Op.LD_VX_R: "V{x:X}, R",
    Op.UNKNOWN: "{word:04X}",
}


class Instruction(NamedTuple):
    op: Op
    word: int
    x: int
    y: int
    n: int
    kk: int
    nnn: int

    @property
    def extended(self):
        return self.op in EXTENDED_OPS

    def mnemonic(self):
        operands = _OPERANDS.get(self.op)
        if operands is None:
            return self.op.mnemonic
        return "%s %s" % (self.op.mnemonic, operands.format(**self._asdict()))

    def __str__(self):
        return "%04X  %s" % (self.word, self.mnemonic())


# 0x0 family, matched on the whole word
_ZERO_FAMILY = {
    0x00E0: Op.CLS,
    0x00EE: Op.RET,
    0x00FB: Op.SCR,
    0x00FC: Op.SCL,
    0x00FD: Op.EXIT,
    0x00FE: Op.LOW,
    0x00FF: Op.HIGH,
}

# 0x8 family, matched on the low nibble
_ALU_FAMILY = {
    0x0: Op.LD_VX_VY,
    0x1: Op.OR,
    0x2: Op.AND,
    0x3: Op.XOR,
    0x4: Op.ADD,
    0x5: Op.SUB,
    0x6: Op.SHR,
    0x7: Op.SUBN,
    0xE: Op.SHL,
}

# 0xE family, matched on the low byte
_KEY_FAMILY = {
    0x9E: Op.SKP,
    0xA1: Op.SKNP,
}

# 0xF family, matched on the low byte
_MISC_FAMILY = {
    0x07: Op.LD_VX_DT,
    0x0A: Op.LD_VX_K,
    0x15: Op.LD_DT_VX,
    0x18: Op.LD_ST_VX,
    0x1E: Op.ADD_I_VX,
    0x29: Op.LD_F_VX,
    0x30: Op.LD_HF_VX,
    0x33: Op.LD_B_VX,
    0x55: Op.LD_I_VX,
    0x65: Op.LD_VX_I,
    0x75: Op.LD_R_VX,
    0x85: Op.LD_VX_R,
}

# Families that only need the top nibble
_SIMPLE_FAMILY = {
    0x1: Op.JP,
    0x2: Op.CALL,
    0x3: Op.SE_VX_KK,
    0x4: Op.SNE_VX_KK,
    0x6: Op.LD_VX_KK,
    0x7: Op.ADD_VX_KK,
    0xA: Op.LD_I,
    0xB: Op.JP_V0,
    0xC: Op.RND,
    0xD: Op.DRW,
}


def _decode_op(word):
    prefix = word >> 12
    n = word & 0xF
    kk = word & 0xFF

    if prefix in _SIMPLE_FAMILY:
        return _SIMPLE_FAMILY[prefix]
    if prefix == 0x0:
        if word in _ZERO_FAMILY:
            return _ZERO_FAMILY[word]
        if word & 0xFFF0 == 0x00C0:
            return Op.SCD
        return Op.SYS
    if prefix == 0x5:
        return Op.SE_VX_VY if n == 0 else Op.UNKNOWN
    if prefix == 0x9:
        return Op.SNE_VX_VY if n == 0 else Op.UNKNOWN
    if prefix == 0x8:
        return _ALU_FAMILY.get(n, Op.UNKNOWN)
    if prefix == 0xE:
        return _KEY_FAMILY.get(kk, Op.UNKNOWN)
    return _MISC_FAMILY.get(kk, Op.UNKNOWN)


def decode(word):
    """Decode a 16-bit instruction word into an ``Instruction``."""
    word &= 0xFFFF
    return Instruction(
        op=_decode_op(word),
        word=word,
        x=(word >> 8) & 0xF,
        y=(word >> 4) & 0xF,
        n=word & 0xF,
        kk=word & 0xFF,
        nnn=word & 0xFFF,
    )


def disassemble(data, address=0):
    """Yield ``(address, Instruction)`` pairs for a block of bytes."""
    for offset in range(0, len(data) - 1, 2):
        yield address + offset, decode(data[offset] << 8 | data[offset + 1])
