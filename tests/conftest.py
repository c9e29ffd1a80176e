import pytest

from chip8vm import Chip8, Quirks


def program(*words):
    """Assemble 16-bit words into ROM bytes."""
    out = bytearray()
    for word in words:
        out += bytes([(word >> 8) & 0xFF, word & 0xFF])
    return bytes(out)


def run(vm, *words, steps=None):
    vm.load(program(*words))
    for _ in range(len(words) if steps is None else steps):
        vm.step()
    return vm


@pytest.fixture
def vm():
    return Chip8(seed=1234)


@pytest.fixture
def schip_vm():
    return Chip8(quirks=Quirks.schip(), seed=1234)
