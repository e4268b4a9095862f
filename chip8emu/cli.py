import argparse
import logging
import random
import sys

from .config import CPU_HZ, TIMER_HZ, Quirks, scale
from .cpu import CPU, StepResult
from .errors import Chip8Error
from .render import to_text
from .rom import read_rom

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog="chip8emu", description="CHIP-8 emulator")
    parser.add_argument("rom", help="path to a raw CHIP-8 ROM image")
    parser.add_argument("--scale", type=int, default=scale, help="pixels per CHIP-8 cell (default: %(default)s)")
    parser.add_argument("--cpu-hz", type=int, default=CPU_HZ, help="instructions per second (default: %(default)s)")
    parser.add_argument("--shift-uses-vy", action="store_true", help="8xy6/8xyE shift Vy into Vx")
    parser.add_argument("--strict-borrow", action="store_true", help="8xy5/8xy7 set VF only when minuend > subtrahend")
    parser.add_argument("--seed", type=int, help="seed for the Cxkk random generator")
    parser.add_argument("--headless", action="store_true", help="run without a window and print the final screen")
    parser.add_argument("--cycles", type=int, default=1000, help="instructions to run in headless mode (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="trace every instruction")
    return parser


def run_headless(cpu, cycles, cpu_hz=CPU_HZ, timer_hz=TIMER_HZ):
    """Run a fixed number of instructions, ticking timers at the emulated 60Hz rate."""
    steps_per_tick = max(1, cpu_hz // timer_hz)
    for n in range(cycles):
        if cpu.step() is StepResult.WAITING_FOR_KEY:
            logger.info("Program is waiting for a key after %d cycles", n + 1)
            break
        if (n + 1) % steps_per_tick == 0:
            cpu.tick()
    return cpu.framebuffer.snapshot()


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    quirks = Quirks(shift_uses_vy=args.shift_uses_vy, strict_borrow=args.strict_borrow)
    cpu = CPU(quirks=quirks, rng=random.Random(args.seed))
    try:
        cpu.load_program(read_rom(args.rom))
    except (OSError, Chip8Error) as e:
        logger.error("Could not load ROM: %s", e)
        return 1

    if args.headless:
        try:
            frame = run_headless(cpu, args.cycles, cpu_hz=args.cpu_hz)
        except Chip8Error as e:
            logger.error("Emulation error: %s", e)
            return 1
        print(to_text(frame))
        return 0

    from .window import run
    run(cpu, scale=args.scale, cpu_hz=args.cpu_hz)
    return 1 if cpu.halted else 0


if __name__ == "__main__":
    sys.exit(main())
