import random

import pytest

from chip8emu import CPU


class ScriptedKeypad:
    """Keypad fake: `down` holds the keys is_down() reports, `script` feeds pending_key()."""

    def __init__(self, script=()):
        self.script = list(script)
        self.down = set()

    def is_down(self, key):
        return key in self.down

    def pending_key(self):
        if self.script:
            return self.script.pop(0)
        return None


def assemble(*words):
    out = bytearray()
    for w in words:
        out += bytes([(w >> 8) & 0xFF, w & 0xFF])
    return bytes(out)


@pytest.fixture
def keypad():
    return ScriptedKeypad()


@pytest.fixture
def cpu(keypad):
    return CPU(keypad=keypad, rng=random.Random(1234))


@pytest.fixture
def run(cpu):
    """Load the given instruction words and step once per word (or `steps` times)."""
    def _run(*words, steps=None):
        cpu.load_program(assemble(*words))
        for _ in range(len(words) if steps is None else steps):
            cpu.step()
        return cpu
    return _run
