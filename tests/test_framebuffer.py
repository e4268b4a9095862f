import numpy as np
import pytest

from chip8emu import Framebuffer


def lit(fb):
    return {(int(c), int(r)) for r, c in zip(*np.nonzero(fb.cells))}


def test_starts_blank():
    fb = Framebuffer()
    assert fb.cells.shape == (32, 64)
    assert not fb.cells.any()


def test_draw_byte_msb_first():
    fb = Framebuffer()
    assert fb.draw_byte(0, 0, 0b10100001) is False
    assert lit(fb) == {(0, 0), (2, 0), (7, 0)}


def test_drawing_twice_erases_and_collides():
    fb = Framebuffer()
    fb.draw_byte(10, 5, 0x3C)
    assert fb.draw_byte(10, 5, 0x3C) is True
    assert not fb.cells.any()


def test_no_collision_without_overlap():
    fb = Framebuffer()
    fb.draw_byte(0, 0, 0xF0)
    assert fb.draw_byte(0, 0, 0x0F) is False
    assert fb.cells[0].sum() == 8


def test_horizontal_wraparound():
    fb = Framebuffer()
    fb.draw_byte(63, 0, 0xFF)
    assert lit(fb) == {(63, 0)} | {(c, 0) for c in range(7)}


def test_vertical_wraparound():
    fb = Framebuffer()
    fb.draw_sprite(0, 31, [0x80, 0x80])
    assert lit(fb) == {(0, 31), (0, 0)}


def test_coordinates_taken_modulo_screen():
    fb = Framebuffer()
    fb.draw_byte(64 + 2, 32 + 1, 0x80)
    assert lit(fb) == {(2, 1)}
    assert fb.pixel(2, 1)


@pytest.mark.parametrize("value", [-1, 256])
def test_draw_byte_rejects_non_bytes(value):
    with pytest.raises(ValueError):
        Framebuffer().draw_byte(0, 0, value)


def test_clear():
    fb = Framebuffer()
    fb.draw_sprite(3, 3, [0xFF] * 5)
    fb.dirty = False
    fb.clear()
    assert not fb.cells.any()
    assert fb.dirty


def test_snapshot_is_a_read_only_copy():
    fb = Framebuffer()
    fb.draw_byte(0, 0, 0x80)
    snap = fb.snapshot()
    fb.clear()
    assert snap[0, 0]
    with pytest.raises(ValueError):
        snap[0, 0] = False
