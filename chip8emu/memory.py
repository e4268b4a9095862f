import logging

from .config import MEMORY_SIZE, PROGRAM_START, MAX_PROGRAM_SIZE, FONT_START, GLYPH_SIZE, fontset
from .errors import ProgramTooLarge

logger = logging.getLogger(__name__)


class Memory:
    """4096 bytes of RAM. 0x000-0x1FF holds the font, programs start at 0x200."""

    def __init__(self, glyphs=fontset):
        self.data = bytearray(MEMORY_SIZE)
        self.load_font(glyphs)

    def __len__(self):
        return len(self.data)

    def read(self, addr):
        return self.data[addr]

    def write(self, addr, value):
        self.data[addr] = value

    def read_word(self, addr):
        # Most significant byte first
        return (self.data[addr] << 8) | self.data[addr + 1]

    def load_font(self, glyphs):
        if FONT_START + len(glyphs) > PROGRAM_START:
            raise ProgramTooLarge(len(glyphs), PROGRAM_START - FONT_START)
        self.data[FONT_START:FONT_START + len(glyphs)] = bytes(glyphs)

    def load_program(self, program):
        if len(program) > MAX_PROGRAM_SIZE:
            raise ProgramTooLarge(len(program), MAX_PROGRAM_SIZE)
        self.data[PROGRAM_START:PROGRAM_START + len(program)] = bytes(program)
        logger.info("Loaded %d bytes at %03X", len(program), PROGRAM_START)

    def font_address(self, digit):
        return FONT_START + (digit & 0xF) * GLYPH_SIZE

    def dump(self, start, length, width=16):
        lines = []
        for row in range(start, min(start + length, MEMORY_SIZE), width):
            chunk = self.data[row:min(row + width, start + length)]
            lines.append(f"{row:03X}: {chunk.hex(' ').upper()}")
        return "\n".join(lines)
