import numpy as np

from .config import KEY_COUNT


class Keypad:
    """State of the 16-key hex keypad (0x0-0xF).

    The CPU only calls is_down() and pending_key(), so any object with those
    two methods can stand in for it.
    """

    def __init__(self):
        self.keys = np.zeros(KEY_COUNT, dtype=np.uint8)

    def press(self, key):
        self.keys[key] = 1

    def release(self, key):
        self.keys[key] = 0

    def release_all(self):
        self.keys[:] = 0

    def is_down(self, key):
        return bool(self.keys[key & 0xF])

    def pending_key(self):
        # Lowest numbered key currently held, or None
        down = np.flatnonzero(self.keys)
        if len(down) == 0:
            return None
        return int(down[0])
