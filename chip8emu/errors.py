class Chip8Error(Exception):
    """Base class for every failure raised by the emulator."""

    def __init__(self, message, instruction=None, pc=None):
        super().__init__(message)
        self.instruction = instruction
        self.pc = pc

    def __str__(self):
        msg = super().__str__()
        if self.instruction is not None and self.pc is not None:
            return f"{msg} (opcode {self.instruction:04X} at {self.pc:03X})"
        return msg


class UnknownInstruction(Chip8Error):
    def __init__(self, instruction, pc):
        super().__init__(f"Unknown opcode: {instruction:04X}", instruction, pc)


class StackOverflow(Chip8Error):
    pass


class StackUnderflow(Chip8Error):
    pass


class MachineHalted(Chip8Error):
    pass


class ProgramTooLarge(Chip8Error):
    def __init__(self, size, limit):
        super().__init__(f"Program is {size} bytes, at most {limit} fit in memory")
        self.size = size
        self.limit = limit


class InvalidFieldIndex(Chip8Error):
    pass


class MemoryOutOfBounds(Chip8Error):
    pass
