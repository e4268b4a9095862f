# CHIP-8 CPU - Cowgod's CHIP-8 Technical reference http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
#----------------------------------------------------------------------------------------------
# The CPU owns the whole machine state (memory, registers, stack, framebuffer) and talks
# to the outside world through a keypad object. A driver calls step() at the instruction
# rate and tick() at 60Hz; the two never call each other.
#----------------------------------------------------------------------------------------------

import logging
import random
from enum import Enum

from . import decoder
from .config import MEMORY_SIZE, PROGRAM_START, Quirks
from .errors import Chip8Error, MachineHalted, MemoryOutOfBounds, UnknownInstruction
from .framebuffer import Framebuffer
from .keypad import Keypad
from .memory import Memory
from .registers import RegisterFile
from .stack import Stack

logger = logging.getLogger(__name__)


class StepResult(Enum):
    EXECUTED = "executed"
    WAITING_FOR_KEY = "waiting_for_key"


# Which bits besides the high nibble pick the handler, per family
DISCRIMINANTS = {
    0x0: decoder.address12,              # 00E0, 00EE
    0x5: lambda op: decoder.nibble(op, 0),
    0x8: lambda op: decoder.nibble(op, 0),
    0x9: lambda op: decoder.nibble(op, 0),
    0xE: lambda op: decoder.byte(op, 0),
    0xF: lambda op: decoder.byte(op, 0),
}


def dispatch_key(opcode):
    fam = decoder.family(opcode)
    discriminant = DISCRIMINANTS.get(fam)
    return fam, discriminant(opcode) if discriminant else None


class CPU:
    def __init__(self, keypad=None, quirks=None, rng=None):
        # ---- machine state ----
        self.memory = Memory()
        self.registers = RegisterFile()
        self.stack = Stack()
        self.framebuffer = Framebuffer()

        # ---- collaborators ----
        self.keypad = keypad if keypad is not None else Keypad()
        self.quirks = quirks if quirks is not None else Quirks()
        self.rng = rng if rng is not None else random.Random()

        self.halted = False
        self.waiting_for_key = False
        self.cycles = 0

        self.setup_funcmap()

    # ---- Opcode function map ----
    def setup_funcmap(self):
        self.funcmap = {
            (0x0, 0x0E0): self.op_CLS,        # 00E0 - Clear the display
            (0x0, 0x0EE): self.op_RET,        # 00EE - Return from subroutine
            (0x1, None): self.op_JP,          # 1nnn - Jump to nnn
            (0x2, None): self.op_CALL,        # 2nnn - Call subroutine at nnn
            (0x3, None): self.op_SE_Vx_kk,    # 3xkk - Skip if Vx == kk
            (0x4, None): self.op_SNE_Vx_kk,   # 4xkk - Skip if Vx != kk
            (0x5, 0x0): self.op_SE_Vx_Vy,     # 5xy0 - Skip if Vx == Vy
            (0x6, None): self.op_LD_Vx_kk,    # 6xkk - Vx = kk
            (0x7, None): self.op_ADD_Vx_kk,   # 7xkk - Vx += kk, no carry

            (0x8, 0x0): self.op_LD_Vx_Vy,     # 8xy0 - Vx = Vy
            (0x8, 0x1): self.op_OR,           # 8xy1 - Vx |= Vy
            (0x8, 0x2): self.op_AND,          # 8xy2 - Vx &= Vy
            (0x8, 0x3): self.op_XOR,          # 8xy3 - Vx ^= Vy
            (0x8, 0x4): self.op_ADD,          # 8xy4 - Vx += Vy, VF = carry
            (0x8, 0x5): self.op_SUB,          # 8xy5 - Vx -= Vy, VF = NOT borrow
            (0x8, 0x6): self.op_SHR,          # 8xy6 - Vx >>= 1, VF = old LSB
            (0x8, 0x7): self.op_SUBN,         # 8xy7 - Vx = Vy - Vx, VF = NOT borrow
            (0x8, 0xE): self.op_SHL,          # 8xyE - Vx <<= 1, VF = old MSB

            (0x9, 0x0): self.op_SNE_Vx_Vy,    # 9xy0 - Skip if Vx != Vy
            (0xA, None): self.op_LD_I,        # Annn - I = nnn
            (0xB, None): self.op_JP_V0,       # Bnnn - Jump to nnn + V0
            (0xC, None): self.op_RND,         # Cxkk - Vx = random & kk
            (0xD, None): self.op_DRW,         # Dxyn - Draw sprite, VF = collision

            (0xE, 0x9E): self.op_SKP,         # Ex9E - Skip if key Vx is down
            (0xE, 0xA1): self.op_SKNP,        # ExA1 - Skip if key Vx is up

            (0xF, 0x07): self.op_LD_Vx_DT,    # Fx07 - Vx = delay timer
            (0xF, 0x0A): self.op_WAITKEY,     # Fx0A - Wait for key, Vx = key
            (0xF, 0x15): self.op_LD_DT_Vx,    # Fx15 - delay timer = Vx
            (0xF, 0x18): self.op_LD_ST_Vx,    # Fx18 - sound timer = Vx
            (0xF, 0x1E): self.op_ADD_I_Vx,    # Fx1E - I += Vx
            (0xF, 0x29): self.op_FONT,        # Fx29 - I = glyph for Vx
            (0xF, 0x33): self.op_BCD,         # Fx33 - BCD of Vx at I..I+2
            (0xF, 0x55): self.op_STORE,       # Fx55 - memory[I..] = V0..Vx
            (0xF, 0x65): self.op_LOAD,        # Fx65 - V0..Vx = memory[I..]
        }

    def lookup(self, opcode):
        return self.funcmap.get(dispatch_key(opcode))

    # ---- Program ----
    def load_program(self, program):
        self.memory.load_program(program)
        self.registers.pc = PROGRAM_START

    def reset(self):
        """Back to power-on state. Memory, and so the loaded program, is kept."""
        self.registers.reset()
        self.stack.clear()
        self.framebuffer.clear()
        self.halted = False
        self.waiting_for_key = False
        self.cycles = 0

    # ---- Cycle ----
    def step(self):
        if self.halted:
            raise MachineHalted("Machine is halted, reset() before stepping again")

        regs = self.registers
        pc = regs.pc
        try:
            if pc < 0 or pc + 1 >= MEMORY_SIZE:
                raise Chip8Error(f"PC out of bounds: {pc:03X}", pc=pc)
            opcode = self.memory.read_word(pc)
            regs.pc = pc + 2

            handler = self.lookup(opcode)
            if handler is None:
                raise UnknownInstruction(opcode, pc)
            result = handler(opcode) or StepResult.EXECUTED
        except Chip8Error as e:
            # leave PC on the faulting instruction
            regs.pc = pc
            self.halted = True
            if e.pc is None:
                e.pc = pc
            if e.instruction is None and pc + 1 < MEMORY_SIZE:
                e.instruction = self.memory.read_word(pc)
            logger.error("Emulation error: %s", e)
            raise

        self.waiting_for_key = result is StepResult.WAITING_FOR_KEY
        self.cycles += 1
        return result

    def run(self, cycles):
        """Step up to `cycles` times, stopping early if the program waits for a key."""
        result = StepResult.EXECUTED
        for _ in range(cycles):
            result = self.step()
            if result is StepResult.WAITING_FOR_KEY:
                break
        return result

    # ---- timers ----
    def tick(self):
        """60Hz tick: count the timers down and hand back a frame for the renderer."""
        self.registers.tick_timers()
        return self.framebuffer.snapshot()

    @property
    def sound_active(self):
        return self.registers.sound_active

    def state(self):
        regs = self.registers
        return {
            "pc": regs.pc,
            "I": regs.I,
            "V": list(regs.V),
            "sp": self.stack.sp,
            "delay_timer": regs.delay_timer,
            "sound_timer": regs.sound_timer,
            "halted": self.halted,
            "waiting_for_key": self.waiting_for_key,
            "cycles": self.cycles,
        }

    # ---- Opcode Handlers ----

    # 00E0 - CLS
    def op_CLS(self, opcode):
        self.framebuffer.clear()
        logger.debug("Clear the display")

    # 00EE - RET
    def op_RET(self, opcode):
        self.registers.pc = self.stack.pop()
        logger.debug("Return to %03X", self.registers.pc)

    # 1nnn - JP addr
    def op_JP(self, opcode):
        self.registers.pc = decoder.address12(opcode)
        logger.debug("Jump to address %03X", self.registers.pc)

    # 2nnn - CALL addr
    def op_CALL(self, opcode):
        self.stack.push(self.registers.pc)
        self.registers.pc = decoder.address12(opcode)
        logger.debug("Call subroutine at %03X", self.registers.pc)

    # 3xkk - SE Vx, byte
    def op_SE_Vx_kk(self, opcode):
        x, kk = decoder.xkk(opcode)
        if self.registers.V[x] == kk:
            self.registers.pc += 2
            logger.debug("Skip next instruction: V%X == %02X", x, kk)

    # 4xkk - SNE Vx, byte
    def op_SNE_Vx_kk(self, opcode):
        x, kk = decoder.xkk(opcode)
        if self.registers.V[x] != kk:
            self.registers.pc += 2
            logger.debug("Skip next instruction: V%X != %02X", x, kk)

    # 5xy0 - SE Vx, Vy
    def op_SE_Vx_Vy(self, opcode):
        x, y = decoder.xy(opcode)
        V = self.registers.V
        if V[x] == V[y]:
            self.registers.pc += 2
            logger.debug("Skip next instruction: V%X == V%X", x, y)

    # 6xkk - LD Vx, byte
    def op_LD_Vx_kk(self, opcode):
        x, kk = decoder.xkk(opcode)
        self.registers.V[x] = kk
        logger.debug("Set V%X = %02X", x, kk)

    # 7xkk - ADD Vx, byte
    def op_ADD_Vx_kk(self, opcode):
        x, kk = decoder.xkk(opcode)
        V = self.registers.V
        V[x] = (V[x] + kk) & 0xFF
        logger.debug("Add %02X to V%X: %02X", kk, x, V[x])

    # 8xy0..8xyE
    # The result register is written before VF, so for x == F the flag wins.

    def op_LD_Vx_Vy(self, opcode):
        x, y = decoder.xy(opcode)
        V = self.registers.V
        V[x] = V[y]
        logger.debug("Copy V%X (%02X) into V%X", y, V[y], x)

    def op_OR(self, opcode):
        x, y = decoder.xy(opcode)
        V = self.registers.V
        V[x] |= V[y]
        logger.debug("V%X = V%X OR V%X -> %02X", x, x, y, V[x])

    def op_AND(self, opcode):
        x, y = decoder.xy(opcode)
        V = self.registers.V
        V[x] &= V[y]
        logger.debug("V%X = V%X AND V%X -> %02X", x, x, y, V[x])

    def op_XOR(self, opcode):
        x, y = decoder.xy(opcode)
        V = self.registers.V
        V[x] ^= V[y]
        logger.debug("V%X = V%X XOR V%X -> %02X", x, x, y, V[x])

    def op_ADD(self, opcode):
        x, y = decoder.xy(opcode)
        V = self.registers.V
        total = V[x] + V[y]
        V[x] = total & 0xFF
        V[0xF] = 1 if total > 0xFF else 0
        logger.debug("Add V%X to V%X: result %02X, carry=%d", y, x, V[x], V[0xF])

    def _not_borrow(self, minuend, subtrahend):
        if self.quirks.strict_borrow:
            return 1 if minuend > subtrahend else 0
        return 1 if minuend >= subtrahend else 0

    def op_SUB(self, opcode):
        x, y = decoder.xy(opcode)
        V = self.registers.V
        flag = self._not_borrow(V[x], V[y])
        V[x] = (V[x] - V[y]) & 0xFF
        V[0xF] = flag
        logger.debug("Subtract V%X from V%X: result %02X, NOT borrow=%d", y, x, V[x], flag)

    def op_SHR(self, opcode):
        x, y = decoder.xy(opcode)
        V = self.registers.V
        src = V[y] if self.quirks.shift_uses_vy else V[x]
        V[x] = src >> 1
        V[0xF] = src & 1
        logger.debug("Shift right into V%X: %02X, least significant bit=%d", x, V[x], src & 1)

    def op_SUBN(self, opcode):
        x, y = decoder.xy(opcode)
        V = self.registers.V
        flag = self._not_borrow(V[y], V[x])
        V[x] = (V[y] - V[x]) & 0xFF
        V[0xF] = flag
        logger.debug("Set V%X = V%X - V%X: result %02X, NOT borrow=%d", x, y, x, V[x], flag)

    def op_SHL(self, opcode):
        x, y = decoder.xy(opcode)
        V = self.registers.V
        src = V[y] if self.quirks.shift_uses_vy else V[x]
        V[x] = (src << 1) & 0xFF
        V[0xF] = (src >> 7) & 1
        logger.debug("Shift left into V%X: %02X, most significant bit=%d", x, V[x], (src >> 7) & 1)

    # 9xy0 - SNE Vx, Vy
    def op_SNE_Vx_Vy(self, opcode):
        x, y = decoder.xy(opcode)
        V = self.registers.V
        if V[x] != V[y]:
            self.registers.pc += 2
            logger.debug("Skip next instruction: V%X != V%X", x, y)

    # Annn - LD I, addr
    def op_LD_I(self, opcode):
        self.registers.I = decoder.address12(opcode)
        logger.debug("Set I = %03X", self.registers.I)

    # Bnnn - JP V0, addr
    def op_JP_V0(self, opcode):
        self.registers.pc = (decoder.address12(opcode) + self.registers.V[0]) & 0xFFF
        logger.debug("Jump to address V0 + %03X = %03X", decoder.address12(opcode), self.registers.pc)

    # Cxkk - RND Vx, byte
    def op_RND(self, opcode):
        x, kk = decoder.xkk(opcode)
        self.registers.V[x] = self.rng.getrandbits(8) & kk
        logger.debug("Set V%X = random_byte & %02X -> %02X", x, kk, self.registers.V[x])

    # Dxyn - DRW Vx, Vy, nibble
    def op_DRW(self, opcode):
        x, y, n = decoder.xyn(opcode)
        regs = self.registers
        px, py = regs.V[x], regs.V[y]
        # rows past the end of memory are not drawn
        rows = self.memory.data[regs.I:regs.I + n]
        collision = self.framebuffer.draw_sprite(px, py, rows)
        regs.V[0xF] = 1 if collision else 0
        logger.debug("Drew %d-row sprite at (%d, %d), collision=%d", n, px, py, regs.V[0xF])

    # Ex9E - SKP Vx
    def op_SKP(self, opcode):
        x = decoder.nibble(opcode, 2)
        key = self.registers.V[x] & 0xF
        if self.keypad.is_down(key):
            self.registers.pc += 2
            logger.debug("Skip next instruction: key %X down", key)

    # ExA1 - SKNP Vx
    def op_SKNP(self, opcode):
        x = decoder.nibble(opcode, 2)
        key = self.registers.V[x] & 0xF
        if not self.keypad.is_down(key):
            self.registers.pc += 2
            logger.debug("Skip next instruction: key %X up", key)

    # Fx07 - LD Vx, DT
    def op_LD_Vx_DT(self, opcode):
        x = decoder.nibble(opcode, 2)
        self.registers.V[x] = self.registers.delay_timer

    # Fx0A - LD Vx, K
    def op_WAITKEY(self, opcode):
        x = decoder.nibble(opcode, 2)
        key = self.keypad.pending_key()
        if key is None:
            # stall: PC points back at this instruction so the next step retries it
            self.registers.pc -= 2
            if not self.waiting_for_key:
                logger.debug("Waiting for key into V%X", x)
            return StepResult.WAITING_FOR_KEY
        self.registers.V[x] = key
        logger.debug("Key %X pressed, stored in V%X", key, x)

    # Fx15 - LD DT, Vx
    def op_LD_DT_Vx(self, opcode):
        x = decoder.nibble(opcode, 2)
        self.registers.delay_timer = self.registers.V[x]

    # Fx18 - LD ST, Vx
    def op_LD_ST_Vx(self, opcode):
        x = decoder.nibble(opcode, 2)
        self.registers.sound_timer = self.registers.V[x]

    # Fx1E - ADD I, Vx
    def op_ADD_I_Vx(self, opcode):
        x = decoder.nibble(opcode, 2)
        regs = self.registers
        regs.I = (regs.I + regs.V[x]) & 0xFFF

    # Fx29 - LD F, Vx
    def op_FONT(self, opcode):
        x = decoder.nibble(opcode, 2)
        self.registers.I = self.memory.font_address(self.registers.V[x])

    def _check_span(self, addr, length):
        # I-relative block access must fit before any byte is touched
        if addr + length > MEMORY_SIZE:
            raise MemoryOutOfBounds(f"{length} bytes at {addr:03X} run past the end of memory")

    # Fx33 - LD B, Vx
    def op_BCD(self, opcode):
        x = decoder.nibble(opcode, 2)
        regs = self.registers
        self._check_span(regs.I, 3)
        v = regs.V[x]
        self.memory.write(regs.I, v // 100)
        self.memory.write(regs.I + 1, (v // 10) % 10)
        self.memory.write(regs.I + 2, v % 10)

    # Fx55 - LD [I], Vx
    def op_STORE(self, opcode):
        x = decoder.nibble(opcode, 2)
        regs = self.registers
        self._check_span(regs.I, x + 1)
        for i in range(x + 1):
            self.memory.write(regs.I + i, regs.V[i])

    # Fx65 - LD Vx, [I]
    def op_LOAD(self, opcode):
        x = decoder.nibble(opcode, 2)
        regs = self.registers
        self._check_span(regs.I, x + 1)
        for i in range(x + 1):
            regs.V[i] = self.memory.read(regs.I + i)
