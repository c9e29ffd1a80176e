# ROM helpers - reading ROM files and the built-in splash screen that runs
# when no ROM is given on the command line.

import logging
from pathlib import Path

from .constants import LOAD_ADDRESS, MEMORY_SIZE

log = logging.getLogger(__name__)

# Draws "C8" in the middle of the screen, then loops forever
SPLASH_ROM = bytes([
    0x00, 0xE0,  # CLS
    0x60, 0x1A,  # LD V0, 1A
    0x61, 0x0D,  # LD V1, 0D
    0x62, 0x0C,  # LD V2, 0C
    0xF2, 0x29,  # LD F, V2
    0xD0, 0x15,  # DRW V0, V1, 5
    0x70, 0x06,  # ADD V0, 06
    0x62, 0x08,  # LD V2, 08
    0xF2, 0x29,  # LD F, V2
    0xD0, 0x15,  # DRW V0, V1, 5
    0x12, 0x14,  # JP 214
])


def read_rom(path):
    log.info("Loading ROM: %s", path)
    return Path(path).read_bytes()


def fit_rom(data, address=LOAD_ADDRESS):
    """Truncate ``data`` to the space left between ``address`` and the end of memory."""
    capacity = MEMORY_SIZE - address
    if len(data) > capacity:
        log.warning("ROM is %d bytes, truncating to %d", len(data), capacity)
        return data[:capacity]
    return data
