# Framebuffer -> pixels. Pure numpy so it can run without a window.
import numpy as np

ON = (255, 255, 255, 255)
OFF = (0, 0, 0, 255)


def to_rgba(grid, scale=1, on=ON, off=OFF, flip=True):
    """Turn a (rows, cols) bool grid into an upscaled RGBA uint8 array.

    pyglet's origin is bottom-left, so rows are flipped unless flip=False.
    """
    grid = np.asarray(grid, dtype=np.bool_)
    if flip:
        grid = grid[::-1]
    small = np.where(grid[..., None], np.array(on, dtype=np.uint8), np.array(off, dtype=np.uint8))
    if scale != 1:
        small = np.repeat(np.repeat(small, scale, axis=0), scale, axis=1)
    return small


def to_text(grid, on="*", off=" "):
    return "\n".join("".join(on if cell else off for cell in row) for row in grid)
