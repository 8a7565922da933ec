import random

import pytest


class ScriptedRandom:
    """Random source that replays queued values, then falls back to a seeded Random"""

    def __init__(self, ints=(), floats=(), seed=0):
        self.ints = list(ints)
        self.floats = list(floats)
        self._fallback = random.Random(seed)

    def randint(self, a, b):
        if self.ints:
            value = self.ints.pop(0)
            assert a <= value <= b, f"scripted {value} outside [{a}, {b}]"
            return value
        return self._fallback.randint(a, b)

    def random(self):
        if self.floats:
            return self.floats.pop(0)
        return self._fallback.random()

    def choice(self, seq):
        return seq[self.randint(0, len(seq) - 1)]


@pytest.fixture
def scripted():
    return ScriptedRandom
