import argparse
import logging
import sys

from .constants import SCALE, CPU_HZ, LOAD_ADDRESS
from .errors import LoadError
from .quirks import PRESETS, Quirks, preset
from .roms import SPLASH_ROM, read_rom, fit_rom
from .vm import Chip8

log = logging.getLogger(__name__)


def _quirk_override(text):
    name, sep, value = text.partition("=")
    name = name.strip().replace("-", "_")
    if name not in Quirks.names():
        raise argparse.ArgumentTypeError(
            "unknown quirk %r (choose from %s)" % (name, ", ".join(Quirks.names())))
    value = value.strip().lower() if sep else "on"
    if value not in ("on", "off", "1", "0", "true", "false"):
        raise argparse.ArgumentTypeError("quirk value must be on or off, got %r" % value)
    return name, value in ("on", "1", "true")


def _scale(text):
    # hires frames are drawn at half this factor
    value = int(text)
    if value < 2 or value % 2:
        raise argparse.ArgumentTypeError("scale must be an even number of at least 2, got %d" % value)
    return value


def build_parser():
    parser = argparse.ArgumentParser(
        prog="chip8vm",
        description="CHIP-8 / Super-CHIP virtual machine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Keys:\n"
               "  1 2 3 4 / Q W E R / A S D F / Z X C V   keypad\n"
               "  ESC quit, F1 toggle instruction trace, P pause, SPACE step, O resume",
    )
    parser.add_argument("rom", nargs="?", default=None,
                        help="ROM file to run (default: built-in splash screen)")
    parser.add_argument("--preset", choices=sorted(PRESETS), default="chip8",
                        help="Quirk preset (default: chip8)")
    parser.add_argument("--quirk", type=_quirk_override, action="append", default=[],
                        metavar="NAME[=on|off]",
                        help="Override a single quirk (can repeat): %s" % ", ".join(Quirks.names()))
    parser.add_argument("--cpu-hz", type=int, default=CPU_HZ, metavar="N",
                        help="Instructions per second (default: %d)" % CPU_HZ)
    parser.add_argument("--scale", type=_scale, default=SCALE, metavar="N",
                        help="Pixel scale factor for the window, even (default: %d)" % SCALE)
    parser.add_argument("--overlay", action="store_true",
                        help="Show the register overlay beside the screen")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the RND instruction")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log every executed instruction")
    return parser


def build_vm(args):
    quirks = preset(args.preset).with_overrides(**dict(args.quirk))
    vm = Chip8(quirks=quirks, seed=args.seed)
    data = SPLASH_ROM if args.rom is None else read_rom(args.rom)
    vm.load(fit_rom(data, LOAD_ADDRESS), LOAD_ADDRESS)
    return vm


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        vm = build_vm(args)
    except (OSError, LoadError) as e:
        log.error("Could not load ROM: %s", e)
        return 1

    # pyglet opens a display on import, so only pull it in when a window is wanted
    from .app import run
    run(vm, scale=args.scale, cpu_hz=args.cpu_hz, overlay=args.overlay,
        caption="CHIP-8 Emulator - %s" % (args.rom or "splash"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
