import numpy as np

from .config import STACK_DEPTH
from .errors import StackOverflow, StackUnderflow


class Stack:
    """Return-address stack. sp == -1 means empty; push pre-increments, pop post-decrements."""

    def __init__(self, depth=STACK_DEPTH):
        self.slots = np.zeros(depth, dtype=np.uint16)
        self.sp = -1

    @property
    def depth(self):
        return self.sp + 1

    @property
    def is_empty(self):
        return self.sp < 0

    @property
    def is_full(self):
        return self.sp + 1 >= len(self.slots)

    def push(self, addr):
        if self.is_full:
            raise StackOverflow(f"Stack overflow: {len(self.slots)} nested calls")
        self.sp += 1
        self.slots[self.sp] = addr

    def pop(self):
        if self.is_empty:
            raise StackUnderflow("Stack underflow: return with no caller")
        addr = int(self.slots[self.sp])
        self.sp -= 1
        return addr

    def peek(self):
        if self.is_empty:
            raise StackUnderflow("Stack is empty")
        return int(self.slots[self.sp])

    def clear(self):
        self.slots[:] = 0
        self.sp = -1

    def __len__(self):
        return self.depth
