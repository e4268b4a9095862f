"""Field extraction for 16-bit CHIP-8 instructions.

Every function is total over 0x0000-0xFFFF; whether an instruction is valid
is decided by the dispatch table, not here. Positions count from the least
significant end, so nibble(0xD123, 3) == 0xD and byte(0xD123, 1) == 0xD1.
"""
from collections import namedtuple

from .errors import InvalidFieldIndex

XKK = namedtuple("XKK", "x kk")
XY = namedtuple("XY", "x y")
XYN = namedtuple("XYN", "x y n")


def nibble(instr, i):
    if not 0 <= i < 4:
        raise InvalidFieldIndex(f"nibble index must be between 0 and 3, got {i}")
    return (instr >> (i * 4)) & 0xF


def byte(instr, i):
    if not 0 <= i < 2:
        raise InvalidFieldIndex(f"byte index must be between 0 and 1, got {i}")
    return (instr >> (i * 8)) & 0xFF


def address12(instr):
    return instr & 0x0FFF


def family(instr):
    return nibble(instr, 3)


def xkk(instr):
    return XKK(nibble(instr, 2), byte(instr, 0))


def xy(instr):
    return XY(nibble(instr, 2), nibble(instr, 1))


def xyn(instr):
    return XYN(nibble(instr, 2), nibble(instr, 1), nibble(instr, 0))
