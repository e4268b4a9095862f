from .config import REGISTER_COUNT, PROGRAM_START


class RegisterFile:
    def __init__(self):
        self.reset()

    def reset(self):
        self.V = [0] * REGISTER_COUNT  # V0..VF, VF doubles as the flag register
        self.I = 0                     # 12-bit address register
        self.pc = PROGRAM_START
        self.delay_timer = 0
        self.sound_timer = 0

    # ---- timers ----
    def tick_timers(self):
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    @property
    def sound_active(self):
        return self.sound_timer > 0

    def __repr__(self):
        regs = " ".join(f"V{i:X}={v:02X}" for i, v in enumerate(self.V))
        return (f"<RegisterFile {regs} I={self.I:03X} PC={self.pc:03X} "
                f"DT={self.delay_timer} ST={self.sound_timer}>")
