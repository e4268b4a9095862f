# Machine constants and driver settings.
from dataclasses import dataclass

# ---- Machine ----
MEMORY_SIZE = 4096
PROGRAM_START = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START
REGISTER_COUNT = 16
STACK_DEPTH = 16
KEY_COUNT = 16

width, height = 64, 32

# Standard CHIP-8 fontset, 16 glyphs x 5 bytes, stored from address 0
FONT_START = 0x000
GLYPH_SIZE = 5
fontset = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
]  # notice 80 bytes

# ---- Driver ----
scale = 10
window_width, window_height = width * scale, height * scale
CPU_HZ = 500
TIMER_HZ = 60


@dataclass
class Quirks:
    """Behaviour switches for instructions that historical interpreters disagree on.

    shift_uses_vy: 8xy6/8xyE shift Vy into Vx (COSMAC VIP) instead of shifting
        Vx in place (CHIP-48 / SUPER-CHIP).
    strict_borrow: 8xy5/8xy7 set VF only on a strictly greater minuend, so
        equal operands report a borrow.
    """
    shift_uses_vy: bool = False
    strict_borrow: bool = False
