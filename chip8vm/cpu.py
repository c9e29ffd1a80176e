# CPU - executes one decoded instruction against the machine state.
# The program counter has already been moved past the instruction when a handler runs,
# so jumps overwrite it and skips add another 2.

import logging

from .constants import (ADDRESS_MASK, NUM_RPL, STACK_DEPTH, SMALL_FONT_ADDRESS, SMALL_FONT_HEIGHT,
                        BIG_FONT_ADDRESS, BIG_FONT_HEIGHT)
from .decoder import Op
from .errors import UnknownOpcode, StackUnderflow, StackOverflow, AddressOverflow

log = logging.getLogger(__name__)


class CPU:

    def __init__(self, state, display, keypad, timers, quirks, rng, report=None):
        self.state = state
        self.display = display
        self.keypad = keypad
        self.timers = timers
        self.quirks = quirks
        self.rng = rng
        self.report = report or (lambda error: log.warning("%s", error))
        self.opcode = 0
        self.debug_pc = state.pc

        # opcode function map
        self.funcmap = {
            Op.CLS: self.op_CLS,
            Op.RET: self.op_RET,
            Op.SYS: self.op_SYS,
            Op.JP: self.op_JP,
            Op.CALL: self.op_CALL,
            Op.SE_VX_KK: self.op_SE_Vx_kk,
            Op.SNE_VX_KK: self.op_SNE_Vx_kk,
            Op.SE_VX_VY: self.op_SE_Vx_Vy,
            Op.LD_VX_KK: self.op_LD_Vx_kk,
            Op.ADD_VX_KK: self.op_ADD_Vx_kk,
            Op.LD_VX_VY: self.op_LD_Vx_Vy,
            Op.OR: self.op_OR,
            Op.AND: self.op_AND,
            Op.XOR: self.op_XOR,
            Op.ADD: self.op_ADD,
            Op.SUB: self.op_SUB,
            Op.SHR: self.op_SHR,
            Op.SUBN: self.op_SUBN,
            Op.SHL: self.op_SHL,
            Op.SNE_VX_VY: self.op_SNE_Vx_Vy,
            Op.LD_I: self.op_LD_I,
            Op.JP_V0: self.op_JP_V0,
            Op.RND: self.op_RND,
            Op.DRW: self.op_DRW,
            Op.SKP: self.op_SKP,
            Op.SKNP: self.op_SKNP,
            Op.LD_VX_DT: self.op_LD_Vx_DT,
            Op.LD_VX_K: self.op_WAITKEY,
            Op.LD_DT_VX: self.op_LD_DT_Vx,
            Op.LD_ST_VX: self.op_LD_ST_Vx,
            Op.ADD_I_VX: self.op_ADD_I_Vx,
            Op.LD_F_VX: self.op_FONT,
            Op.LD_B_VX: self.op_BCD,
            Op.LD_I_VX: self.op_STORE,
            Op.LD_VX_I: self.op_LOAD,
            Op.SCD: self.op_SCD,
            Op.SCR: self.op_SCR,
            Op.SCL: self.op_SCL,
            Op.EXIT: self.op_EXIT,
            Op.LOW: self.op_LOW,
            Op.HIGH: self.op_HIGH,
            Op.LD_HF_VX: self.op_BIGFONT,
            Op.LD_R_VX: self.op_STORE_RPL,
            Op.LD_VX_R: self.op_LOAD_RPL,
            Op.UNKNOWN: self.op_UNKNOWN,
        }

    # ---- Memory access ----
    def _address(self, addr):
        if not 0 <= addr <= ADDRESS_MASK:
            self.report(AddressOverflow("Address 0x%X outside memory" % addr, self.debug_pc, self.opcode))
            addr &= ADDRESS_MASK
        return addr

    def read(self, addr):
        return self.state.memory[self._address(addr)]

    def write(self, addr, value):
        self.state.memory[self._address(addr)] = value

    def read_block(self, addr, length):
        if addr + length - 1 <= ADDRESS_MASK:
            return bytes(self.state.memory[addr:addr + length])
        return bytes(self.read(addr + offset) for offset in range(length))

    def fetch(self):
        state = self.state
        self.debug_pc = state.pc
        self.opcode = (self.read(state.pc) << 8) | self.read(state.pc + 1)
        return self.opcode

    def _skip(self):
        self.state.pc = (self.state.pc + 2) & 0xFFFF

    def _jump(self, addr):
        self.state.pc = self._address(addr)

    # ---- Execute ----
    def execute(self, ins):
        if ins.extended and not self.quirks.extended_sprite_support:
            raise self._unknown(ins)
        self.funcmap[ins.op](ins)

    def _unknown(self, ins, reason="Unknown opcode"):
        return UnknownOpcode(reason, self.debug_pc, ins.word)

    # ---- Opcode Handlers ----

    # 00E0 - CLS
    def op_CLS(self, ins):
        self.display.clear()

    # 00EE - RET
    def op_RET(self, ins):
        state = self.state
        if state.sp == 0:
            raise StackUnderflow("Stack underflow on RET", self.debug_pc, ins.word)
        state.sp -= 1
        self._jump(int(state.stack[state.sp]) + 2)

    # 0nnn - SYS addr, ignored on modern interpreters
    def op_SYS(self, ins):
        log.debug("SYS call ignored (%04X)", ins.word)

    # 1nnn - JP addr
    def op_JP(self, ins):
        self.state.pc = ins.nnn

    # 2nnn - CALL addr, the stack keeps the address of the call itself
    def op_CALL(self, ins):
        state = self.state
        if state.sp >= STACK_DEPTH:
            raise StackOverflow("Stack overflow on CALL", self.debug_pc, ins.word)
        state.stack[state.sp] = self.debug_pc
        state.sp += 1
        state.pc = ins.nnn

    # 3xkk - SE Vx, byte
    def op_SE_Vx_kk(self, ins):
        if self.state.V[ins.x] == ins.kk:
            self._skip()

    # 4xkk - SNE Vx, byte
    def op_SNE_Vx_kk(self, ins):
        if self.state.V[ins.x] != ins.kk:
            self._skip()

    # 5xy0 - SE Vx, Vy
    def op_SE_Vx_Vy(self, ins):
        if self.state.V[ins.x] == self.state.V[ins.y]:
            self._skip()

    # 6xkk - LD Vx, byte
    def op_LD_Vx_kk(self, ins):
        self.state.V[ins.x] = ins.kk

    # 7xkk - ADD Vx, byte (no carry)
    def op_ADD_Vx_kk(self, ins):
        V = self.state.V
        V[ins.x] = (V[ins.x] + ins.kk) & 0xFF

    # 8xy0..8xyE - flags are computed from the operands before anything is written,
    # and VF is written last so the flag wins when x is F
    def op_LD_Vx_Vy(self, ins):
        V = self.state.V
        V[ins.x] = V[ins.y]

    def op_OR(self, ins):
        V = self.state.V
        V[ins.x] |= V[ins.y]

    def op_AND(self, ins):
        V = self.state.V
        V[ins.x] &= V[ins.y]

    def op_XOR(self, ins):
        V = self.state.V
        V[ins.x] ^= V[ins.y]

    def op_ADD(self, ins):
        V = self.state.V
        total = V[ins.x] + V[ins.y]
        V[ins.x] = total & 0xFF
        V[0xF] = 1 if total > 0xFF else 0

    def op_SUB(self, ins):
        V = self.state.V
        vx, vy = V[ins.x], V[ins.y]
        V[ins.x] = (vx - vy) & 0xFF
        V[0xF] = 1 if vx >= vy else 0

    def op_SUBN(self, ins):
        V = self.state.V
        vx, vy = V[ins.x], V[ins.y]
        V[ins.x] = (vy - vx) & 0xFF
        V[0xF] = 1 if vy >= vx else 0

    def _shift_source(self, ins):
        V = self.state.V
        return V[ins.x] if self.quirks.shift_ignores_vy else V[ins.y]

    def op_SHR(self, ins):
        V = self.state.V
        value = self._shift_source(ins)
        V[ins.x] = value >> 1
        V[0xF] = value & 1

    def op_SHL(self, ins):
        V = self.state.V
        value = self._shift_source(ins)
        V[ins.x] = (value << 1) & 0xFF
        V[0xF] = (value >> 7) & 1

    # 9xy0 - SNE Vx, Vy
    def op_SNE_Vx_Vy(self, ins):
        if self.state.V[ins.x] != self.state.V[ins.y]:
            self._skip()

    # Annn - LD I, addr
    def op_LD_I(self, ins):
        self.state.I = ins.nnn

    # Bnnn - JP V0, addr (Bxnn - JP Vx, addr with the jump quirk)
    def op_JP_V0(self, ins):
        register = ins.x if self.quirks.jump_quirk else 0
        self._jump(ins.nnn + self.state.V[register])

    # Cxkk - RND Vx, byte
    def op_RND(self, ins):
        self.state.V[ins.x] = self.rng.getrandbits(8) & ins.kk

    # Dxyn - DRW Vx, Vy, nibble
    def op_DRW(self, ins):
        height, width = ins.n, 8
        if height == 0 and self.quirks.extended_sprite_support:
            # 16x16 in extended mode, 8x16 otherwise
            height = 16
            width = 16 if self.display.extended else 8
        data = self.read_block(self.state.I, height * width // 8)
        V = self.state.V
        collided = self.display.draw_sprite(V[ins.x], V[ins.y], data, width)
        V[0xF] = 1 if collided else 0

    # Ex9E / ExA1 - SKP / SKNP
    def op_SKP(self, ins):
        if self.keypad.is_pressed(self.state.V[ins.x] & 0xF):
            self._skip()

    def op_SKNP(self, ins):
        if not self.keypad.is_pressed(self.state.V[ins.x] & 0xF):
            self._skip()

    # Fx07 - LD Vx, DT
    def op_LD_Vx_DT(self, ins):
        self.state.V[ins.x] = self.timers.delay.value

    # Fx0A - LD Vx, K: stays on this instruction until a key is held.
    # A key already held when the wait starts completes it; no release is needed.
    def op_WAITKEY(self, ins):
        key = self.keypad.first_pressed()
        if key is None:
            self.state.pc = self.debug_pc
        else:
            self.state.V[ins.x] = key

    # Fx15 - LD DT, Vx
    def op_LD_DT_Vx(self, ins):
        self.timers.delay.load(self.state.V[ins.x])

    # Fx18 - LD ST, Vx
    def op_LD_ST_Vx(self, ins):
        self.timers.sound.load(self.state.V[ins.x])

    # Fx1E - ADD I, Vx; I is clamped to 16 bits, VF flags leaving the 12-bit address space
    def op_ADD_I_Vx(self, ins):
        state = self.state
        total = state.I + state.V[ins.x]
        if self.quirks.index_overflow_inclusive:
            overflow = total >= ADDRESS_MASK
        else:
            overflow = total > ADDRESS_MASK
        state.I = total & 0xFFFF
        state.V[0xF] = 1 if overflow else 0

    # Fx29 - LD F, Vx
    def op_FONT(self, ins):
        digit = self.state.V[ins.x] & 0xF
        if self.display.extended:
            self.state.I = BIG_FONT_ADDRESS + digit * BIG_FONT_HEIGHT
        else:
            self.state.I = SMALL_FONT_ADDRESS + digit * SMALL_FONT_HEIGHT

    # Fx30 - LD HF, Vx
    def op_BIGFONT(self, ins):
        self.state.I = BIG_FONT_ADDRESS + (self.state.V[ins.x] & 0xF) * BIG_FONT_HEIGHT

    # Fx33 - LD B, Vx
    def op_BCD(self, ins):
        value = self.state.V[ins.x]
        i = self.state.I
        self.write(i, value // 100)
        self.write(i + 1, (value // 10) % 10)
        self.write(i + 2, value % 10)

    # Fx55 - LD [I], Vx
    def op_STORE(self, ins):
        state = self.state
        for reg in range(ins.x + 1):
            self.write(state.I + reg, state.V[reg])
        self._post_store_load(ins)

    # Fx65 - LD Vx, [I]
    def op_LOAD(self, ins):
        state = self.state
        for reg in range(ins.x + 1):
            state.V[reg] = self.read(state.I + reg)
        self._post_store_load(ins)

    def _post_store_load(self, ins):
        if self.quirks.store_load_increments_index:
            self.state.I = (self.state.I + ins.x + 1) & 0xFFFF

    # ---- Super-CHIP ----

    # 00Cn - SCD n
    def op_SCD(self, ins):
        self.display.scroll_down(ins.n)

    # 00FB - SCR
    def op_SCR(self, ins):
        self.display.scroll_right(4)

    # 00FC - SCL
    def op_SCL(self, ins):
        self.display.scroll_left(4)

    # 00FD - EXIT: park on this instruction
    def op_EXIT(self, ins):
        self.state.pc = self.debug_pc
        self.state.halted = True
        log.info("Program exited at 0x%03X", self.debug_pc)

    # 00FE - LOW
    def op_LOW(self, ins):
        self.display.set_extended(False)

    # 00FF - HIGH
    def op_HIGH(self, ins):
        self.display.set_extended(True)

    # Fx75 - LD R, Vx
    def op_STORE_RPL(self, ins):
        if ins.x >= NUM_RPL:
            raise self._unknown(ins, "RPL register out of range")
        self.state.rpl[:ins.x + 1] = self.state.V[:ins.x + 1]

    # Fx85 - LD Vx, R
    def op_LOAD_RPL(self, ins):
        if ins.x >= NUM_RPL:
            raise self._unknown(ins, "RPL register out of range")
        self.state.V[:ins.x + 1] = self.state.rpl[:ins.x + 1]

    def op_UNKNOWN(self, ins):
        raise self._unknown(ins)
