import pytest

from chip8vm.cli import build_parser, build_vm, main
from chip8vm.quirks import Quirks, preset
from chip8vm.roms import SPLASH_ROM, fit_rom

from conftest import program


def parse(*argv):
    return build_parser().parse_args(list(argv))


def test_defaults():
    args = parse()
    assert args.rom is None
    assert args.preset == "chip8"
    assert args.quirk == []
    assert args.cpu_hz == 600
    assert args.scale == 10
    assert not args.overlay


def test_splash_is_loaded_without_a_rom():
    vm = build_vm(parse())
    assert vm.state.memory[0x200:0x200 + len(SPLASH_ROM)] == SPLASH_ROM
    assert vm.quirks == Quirks()


def test_preset_and_overrides():
    vm = build_vm(parse("--preset", "schip", "--quirk", "jump_quirk=off", "--quirk", "store-load-increments-index"))
    assert vm.quirks.extended_sprite_support
    assert not vm.quirks.jump_quirk
    assert vm.quirks.store_load_increments_index


@pytest.mark.parametrize("bad", ["nonsense=on", "jump_quirk=maybe"])
def test_bad_quirk_is_rejected(bad):
    with pytest.raises(SystemExit):
        parse("--quirk", bad)


def test_rom_file_is_loaded(tmp_path):
    rom = tmp_path / "game.ch8"
    rom.write_bytes(program(0x6042))
    vm = build_vm(parse(str(rom), "--seed", "3"))
    vm.step()
    assert vm.state.V[0] == 0x42


def test_missing_rom_exits_with_error(tmp_path):
    assert main([str(tmp_path / "missing.ch8")]) == 1


def test_fit_rom_truncates():
    assert len(fit_rom(bytes(5000))) == 4096 - 0x200
    assert fit_rom(b"\x00\xe0") == b"\x00\xe0"


def test_quirk_presets():
    assert preset("chip8") == Quirks.chip8()
    assert preset("schip").jump_quirk
    with pytest.raises(ValueError):
        preset("xochip")


def test_unknown_override_name():
    with pytest.raises(ValueError):
        Quirks().with_overrides(warp_speed=True)


@pytest.mark.parametrize("scale", ["1", "3", "0", "-2", "big"])
def test_scale_must_be_even(scale):
    with pytest.raises(SystemExit):
        parse("--scale", scale)


def test_even_scale_accepted():
    assert parse("--scale", "4").scale == 4
