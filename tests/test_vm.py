import logging

import pytest

from chip8vm import AddressOverflow, Chip8, LoadError, UnknownOpcode
from chip8vm.roms import SPLASH_ROM

from conftest import program, run


def test_add_program_end_to_end(vm):
    vm.load(bytes([0x60, 0x05, 0x61, 0x0A, 0x80, 0x14, 0x00, 0x00]))
    vm.run(3)
    assert vm.state.V[0] == 15
    assert vm.state.V[1] == 10
    assert vm.state.V[0xF] == 0
    assert vm.state.pc == 0x206
    assert vm.cycle_count == 3


def test_load_places_rom_and_fonts(vm):
    vm.load(program(0x1234, 0x5678))
    assert vm.state.memory[0x200:0x204] == bytes([0x12, 0x34, 0x56, 0x78])
    assert vm.state.memory[0:5] == bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])
    assert vm.state.memory[0x50] == 0x3C
    assert vm.state.pc == 0x200


def test_load_at_other_address(vm):
    vm.load(program(0x6001), address=0x600)
    assert vm.state.pc == 0x600
    vm.step()
    assert vm.state.V[0] == 1


def test_full_size_rom_fits(vm):
    vm.load(bytes(4096 - 0x200))
    assert len(vm.state.memory) == 4096


@pytest.mark.parametrize("size, address", [(4096 - 0x200 + 1, 0x200), (2, 4095), (2, -1)])
def test_oversized_load_leaves_machine_untouched(vm, size, address):
    run(vm, 0x6001, 0x6102)
    with pytest.raises(LoadError):
        vm.load(bytes(size), address)
    assert vm.state.pc == 0x204
    assert tuple(vm.state.V[:2]) == (1, 2)
    assert vm.state.memory[0x200:0x202] == bytes([0x60, 0x01])


def test_reset_reloads_last_rom(vm):
    run(vm, 0x6001, 0xA300, 0xF055)
    vm.state.memory[0x200] = 0xFF
    vm.timers.delay.load(9)
    vm.reset()
    assert vm.state.pc == 0x200
    assert vm.state.memory[0x200] == 0x60
    assert vm.state.memory[0x300] == 0
    assert vm.state.V[0] == 0
    assert vm.delay_timer == 0
    assert vm.cycle_count == 0


def test_reset_without_rom_is_clean():
    vm = Chip8()
    vm.reset()
    assert vm.state.pc == 0x200
    assert vm.state.memory[0x200:] == bytes(4096 - 0x200)


def test_step_returns_the_instruction(vm):
    vm.load(program(0x6A05))
    ins = vm.step()
    assert ins.word == 0x6A05
    assert vm.last_instruction is ins


def test_instruction_trace_logged_at_debug(vm, caplog):
    vm.load(program(0x6A05))
    with caplog.at_level(logging.DEBUG, logger="chip8vm"):
        vm.step()
    assert "LD VA, 05" in caplog.text


def test_diagnostics_are_logged_and_bounded(vm, caplog):
    with caplog.at_level(logging.WARNING, logger="chip8vm"):
        run(vm, *[0xFFFF] * 100)
    assert len(vm.diagnostics) == 64
    assert all(isinstance(error, UnknownOpcode) for error in vm.diagnostics)
    assert "UnknownOpcode" in caplog.text
    assert vm.state.pc == 0x200 + 200


def test_fetch_past_end_of_memory_wraps(vm):
    vm.load(program(0x1FFE))
    vm.run(3)
    assert any(isinstance(error, AddressOverflow) for error in vm.diagnostics)


def test_snapshot(vm):
    run(vm, 0x6A05, 0xA123, 0x2300)
    snap = vm.snapshot()
    assert snap.pc == 0x300
    assert snap.sp == 1
    assert snap.index == 0x123
    assert snap.registers[0xA] == 5
    assert snap.stack[0] == 0x204
    assert snap.mnemonic == "CALL 300"
    lines = snap.lines()
    assert lines[0] == "PC    : 300"
    assert "VA : 05   Stack[A] : 000" in lines
    assert lines[-1] == "CALL 300"
    assert len(lines) == 5 + 16 + 1


def test_snapshot_before_any_step(vm):
    assert vm.snapshot().mnemonic == ""


def test_consume_frame_clears_redraw_flag(vm):
    run(vm, 0x00E0)
    assert vm.should_draw
    frame = vm.consume_frame()
    assert (frame.width, frame.height) == (64, 32)
    assert not vm.should_draw
    vm.run(1)
    assert not vm.should_draw


def test_draw_sets_collision_flag(vm):
    run(vm, 0x6000, 0xF029, 0xD005, 0xD005)
    assert vm.state.V[0xF] == 1
    assert not vm.framebuffer().cells.any()


def test_splash_rom_draws_c8(vm):
    vm.load(SPLASH_ROM)
    vm.run(20)
    frame = vm.framebuffer()
    assert frame.cells[13, 26:30].all()
    assert frame.cells[13, 32:36].all()
    assert not frame.cells[13, 30]
    assert vm.state.pc == 0x214
    assert not vm.diagnostics


def test_machines_are_independent():
    a, b = Chip8(), Chip8()
    run(a, 0x6001)
    assert b.state.V[0] == 0
