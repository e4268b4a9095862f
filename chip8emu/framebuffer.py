import numpy as np

from .config import width, height


class Framebuffer:
    """64x32 monochrome display. Cells are addressed [row, col], origin top-left."""

    def __init__(self):
        self.cells = np.zeros((height, width), dtype=np.bool_)
        self.dirty = True  # so the renderer only redraws when needed

    def clear(self):
        self.cells[:] = False
        self.dirty = True

    def pixel(self, x, y):
        return bool(self.cells[y % height, x % width])

    def draw_byte(self, x, y, value):
        """XOR one sprite row at (x, y), wrapping both axes. Returns True on collision."""
        if not 0 <= value <= 0xFF:
            raise ValueError(f"sprite row must be a byte, got {value}")
        row = self.cells[y % height]
        collision = False
        for bit in range(8):
            if value & (0x80 >> bit):
                col = (x + bit) % width
                if row[col]:
                    collision = True
                row[col] = not row[col]
        self.dirty = True
        return collision

    def draw_sprite(self, x, y, rows):
        collision = False
        for i, value in enumerate(rows):
            if self.draw_byte(x, y + i, value):
                collision = True
        return collision

    def snapshot(self):
        grid = self.cells.copy()
        grid.flags.writeable = False
        return grid
