from .config import Quirks
from .cpu import CPU, StepResult
from .errors import (
    Chip8Error,
    InvalidFieldIndex,
    MachineHalted,
    MemoryOutOfBounds,
    ProgramTooLarge,
    StackOverflow,
    StackUnderflow,
    UnknownInstruction,
)
from .framebuffer import Framebuffer
from .keypad import Keypad
from .memory import Memory
from .registers import RegisterFile
from .stack import Stack

__version__ = "0.1.0"
