import pytest

from chip8vm import UnknownOpcode, decode

from conftest import program, run


def test_high_and_low_switch_resolution(schip_vm):
    run(schip_vm, 0x00FF)
    assert schip_vm.display.extended
    assert schip_vm.framebuffer().width == 128
    assert schip_vm.snapshot().extended
    run(schip_vm, 0x00FF, 0x00FE)
    assert schip_vm.framebuffer().height == 32


def test_reset_returns_to_low_resolution(schip_vm):
    run(schip_vm, 0x00FF)
    schip_vm.reset()
    assert not schip_vm.display.extended


def test_big_sprite_in_extended_mode(schip_vm):
    schip_vm.load(program(0x00FF, 0xA300, 0x6078, 0x6138, 0xD010, 0xD010))
    schip_vm.state.memory[0x300:0x320] = b"\xff" * 32
    schip_vm.run(5)
    cells = schip_vm.framebuffer().cells
    assert cells[56:64, 120:128].all()
    # wraps to the top left
    assert cells[0:8, 0:8].all()
    assert cells.sum() == 256
    assert schip_vm.state.V[0xF] == 0
    schip_vm.step()
    assert schip_vm.state.V[0xF] == 1
    assert not schip_vm.framebuffer().cells.any()


def test_tall_sprite_in_low_resolution(schip_vm):
    schip_vm.load(program(0xA300, 0xD000))
    schip_vm.state.memory[0x300:0x310] = b"\xff" * 16
    schip_vm.run(2)
    cells = schip_vm.framebuffer().cells
    assert cells[0:16, 0:8].all()
    assert cells.sum() == 128


def test_zero_height_sprite_without_extended_support(vm):
    vm.load(program(0x6F01, 0xA300, 0xD000))
    vm.state.memory[0x300:0x320] = b"\xff" * 32
    vm.run(3)
    assert not vm.framebuffer().cells.any()
    assert vm.state.V[0xF] == 0
    assert not vm.diagnostics


def test_scroll_down_instruction(schip_vm):
    schip_vm.load(program(0xA300, 0x6000, 0xD001, 0x00C2))
    schip_vm.state.memory[0x300] = 0x80
    schip_vm.run(4)
    assert schip_vm.display.pixel(0, 2)
    assert not schip_vm.display.pixel(0, 0)


def test_scroll_sideways_instructions(schip_vm):
    schip_vm.load(program(0xA300, 0x6008, 0xD011, 0x00FB, 0x00FC, 0x00FC))
    schip_vm.state.memory[0x300] = 0x80
    schip_vm.run(4)
    assert schip_vm.display.pixel(12, 0)
    schip_vm.step()
    assert schip_vm.display.pixel(8, 0)
    schip_vm.step()
    assert schip_vm.display.pixel(4, 0)
    assert schip_vm.framebuffer().cells.sum() == 1


def test_big_font(schip_vm):
    run(schip_vm, 0x6003, 0xF030)
    assert schip_vm.state.I == 0x50 + 3 * 10


def test_font_lookup_follows_resolution(schip_vm):
    run(schip_vm, 0x00FF, 0x6003, 0xF029)
    assert schip_vm.state.I == 0x50 + 3 * 10
    run(schip_vm, 0x6003, 0xF029)
    assert schip_vm.state.I == 3 * 5


def test_rpl_round_trip(schip_vm):
    run(schip_vm, 0x6011, 0x6122, 0x6233, 0xF175, 0x6000, 0x6100, 0xF285)
    assert tuple(schip_vm.state.V[:3]) == (0x11, 0x22, 0x00)
    assert bytes(schip_vm.state.rpl[:2]) == bytes([0x11, 0x22])


def test_rpl_out_of_range(schip_vm):
    run(schip_vm, 0xF875, 0x6001)
    assert isinstance(schip_vm.diagnostics[0], UnknownOpcode)
    assert schip_vm.state.V[0] == 1


def test_exit_halts(schip_vm):
    schip_vm.load(program(0x00FD, 0x6001))
    assert schip_vm.step() is not None
    assert schip_vm.halted
    assert schip_vm.step() is None
    schip_vm.run(10)
    assert schip_vm.state.pc == 0x200
    assert schip_vm.state.V[0] == 0
    schip_vm.reset()
    assert not schip_vm.halted


@pytest.mark.parametrize("word", [0x00FF, 0x00FE, 0x00FD, 0x00FB, 0x00FC, 0x00C4, 0xF030, 0xF075, 0xF085])
def test_extended_ops_need_support(vm, word):
    run(vm, word)
    assert isinstance(vm.diagnostics[0], UnknownOpcode)
    assert vm.state.pc == 0x202
    assert not vm.halted
    assert not vm.display.extended


def test_schip_jump_quirk(schip_vm):
    run(schip_vm, 0x6010, 0x6320, 0xB300)
    assert schip_vm.state.pc == 0x320


def test_disabled_extended_op_does_not_run(vm):
    vm.load(program(0x00FD))
    with pytest.raises(UnknownOpcode):
        vm.cpu.execute(decode(0x00FD))
    assert not vm.halted
    assert vm.state.pc == 0x200
