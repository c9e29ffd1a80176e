"""Behavioral variations between historical CHIP-8 interpreters.

- shift_ignores_vy            : SHR/SHL shift Vx in place.  Off: Vx = Vy shifted (COSMAC VIP).
- store_load_increments_index : Fx55/Fx65 leave I pointing past the last register copied.
- jump_quirk                  : Bnnn jumps to nnn + Vx, x being the top nibble of nnn (Super-CHIP).
- extended_sprite_support     : recognise the Super-CHIP instructions (hires mode, 16x16 sprites,
                                scrolling, large font, RPL registers).
- index_overflow_inclusive    : Fx1E sets VF when I + Vx >= 0xFFF instead of > 0xFFF.
"""

from dataclasses import dataclass, fields, replace


@dataclass(frozen=True)
class Quirks:
    shift_ignores_vy: bool = True
    store_load_increments_index: bool = False
    jump_quirk: bool = False
    extended_sprite_support: bool = False
    index_overflow_inclusive: bool = False

    @classmethod
    def chip8(cls):
        return cls()

    @classmethod
    def schip(cls):
        return cls(jump_quirk=True, extended_sprite_support=True)

    @classmethod
    def names(cls):
        return [f.name for f in fields(cls)]

    def with_overrides(self, **overrides):
        unknown = set(overrides) - set(self.names())
        if unknown:
            raise ValueError("Unknown quirk(s): %s" % ", ".join(sorted(unknown)))
        return replace(self, **overrides)


PRESETS = {
    "chip8": Quirks.chip8,
    "schip": Quirks.schip,
}


def preset(name):
    try:
        return PRESETS[name]()
    except KeyError:
        raise ValueError("Unknown quirk preset: %s" % name) from None
