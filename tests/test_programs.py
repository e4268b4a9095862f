"""Small complete programs run through load_program() + step()."""
import numpy as np

from chip8emu import StepResult

from conftest import assemble

GLYPH_0 = [0xF0, 0x90, 0x90, 0x90, 0xF0]


def sprite_rows(cells, x, y, n):
    """Read n 8-pixel rows back out of the grid as bytes, with wraparound."""
    rows = []
    for r in range(n):
        value = 0
        for bit in range(8):
            if cells[(y + r) % 32, (x + bit) % 64]:
                value |= 0x80 >> bit
        rows.append(value)
    return rows


def test_add_with_carry_program(cpu):
    cpu.load_program(bytes([0x60, 0x05, 0x61, 0x03, 0x80, 0x14]))
    for _ in range(3):
        cpu.step()
    assert cpu.registers.V[0] == 8
    assert cpu.registers.V[0xF] == 0


def test_draw_font_glyph_program(cpu):
    cpu.load_program(bytes([0xA2, 0x00, 0xF0, 0x29, 0xD0, 0x05]))
    for _ in range(3):
        cpu.step()
    assert cpu.registers.I == 0
    assert sprite_rows(cpu.framebuffer.cells, 0, 0, 5) == GLYPH_0
    assert cpu.framebuffer.cells.sum() == 14
    assert cpu.registers.V[0xF] == 0


def test_second_draw_restores_screen_and_collides(cpu):
    cpu.load_program(assemble(0xA000, 0xD015, 0xD015))
    cpu.step()
    cpu.step()
    before = cpu.framebuffer.snapshot()
    assert before.any()
    assert cpu.registers.V[0xF] == 0
    cpu.step()
    assert not cpu.framebuffer.cells.any()
    assert cpu.registers.V[0xF] == 1


def test_collision_flag_clears_on_next_clean_draw(cpu):
    cpu.load_program(assemble(0xA000, 0xD015, 0xD015, 0x6020, 0xD015))
    for _ in range(3):
        cpu.step()
    assert cpu.registers.V[0xF] == 1
    cpu.step()
    cpu.step()
    assert cpu.registers.V[0xF] == 0


def test_sprite_wraps_at_bottom_right_corner(cpu):
    cpu.load_program(assemble(0x603F, 0x611F, 0xA000, 0xD015))
    for _ in range(4):
        cpu.step()
    cells = cpu.framebuffer.cells
    assert sprite_rows(cells, 63, 31, 5) == GLYPH_0
    # first glyph row lands on the last screen row and spills into column 0
    assert cells[31, 63] and cells[31, 0] and cells[31, 2] and not cells[31, 3]
    # the remaining rows wrap to the top of the screen
    assert cells[0, 63] and cells[0, 2] and not cells[0, 0]
    assert not cells[5:31].any()


def test_clear_screen_instruction(cpu):
    cpu.load_program(assemble(0xA000, 0xD015, 0x00E0))
    for _ in range(3):
        cpu.step()
    assert not cpu.framebuffer.cells.any()


def test_counting_loop_with_subroutine(cpu):
    program = assemble(
        0x6000,  # 200: V0 = 0
        0x220A,  # 202: CALL 20A
        0x300A,  # 204: skip if V0 == 10
        0x1202,  # 206: JP 202
        0x1208,  # 208: JP 208 (spin)
        0x7001,  # 20A: V0 += 1
        0x00EE,  # 20C: RET
    )
    cpu.load_program(program)
    for _ in range(200):
        if cpu.registers.pc == 0x208:
            break
        cpu.step()
    assert cpu.registers.pc == 0x208
    assert cpu.registers.V[0] == 10
    assert cpu.stack.is_empty


def test_print_decimal_digits(cpu):
    # BCD of 137 into 0x300, read the digits back and draw the hundreds digit
    program = assemble(
        0x6089,  # V0 = 137
        0xA300,  # I = 300
        0xF033,  # BCD V0
        0xF265,  # V0..V2 = 1, 3, 7
        0xF029,  # I = glyph(V0)
        0x6A00,  # VA = 0
        0xDAA5,  # draw at (0, 0)
    )
    cpu.load_program(program)
    while cpu.registers.pc < 0x200 + len(program):
        assert cpu.step() is StepResult.EXECUTED
    assert cpu.registers.V[:3] == [1, 3, 7]
    assert sprite_rows(cpu.framebuffer.cells, 0, 0, 5) == [0x20, 0x60, 0x20, 0x20, 0x70]
    assert np.count_nonzero(cpu.framebuffer.cells) == 8
