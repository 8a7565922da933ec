"""
Dice system

All randomness in a fight goes through one DiceRoller so a seeded or
scripted source makes the whole encounter reproducible.
"""
import math
import random
from typing import TYPE_CHECKING, Optional, Tuple

from .models.action import RollSpec

if TYPE_CHECKING:
    from .models.combatant import Combatant


class DiceRoller:
    """Dice roller backed by an injectable random source"""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: object exposing randint(a, b) and random(); defaults to a
                fresh random.Random()
        """
        self.rng = rng if rng is not None else random.Random()

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in [low, high] (bounds swapped when reversed)"""
        low, high = int(low), int(high)
        if high < low:
            low, high = high, low
        return self.rng.randint(low, high)

    def random(self) -> float:
        return self.rng.random()

    def chance(self, probability: Optional[float]) -> bool:
        """
        Trigger check

        None means always; values <= 0 never trigger.
        """
        if probability is None:
            return True
        if probability <= 0:
            return False
        if probability >= 1:
            return True
        return self.rng.random() < probability

    def d20(self) -> int:
        return self.randint(1, 20)

    def roll_range(self, damage: Tuple[int, int]) -> int:
        lo, hi = damage
        return self.randint(lo, hi)

    def roll_scaled(self, spec: Optional[RollSpec], source: Optional["Combatant"]) -> int:
        """
        Stat-scaled roll

        Args:
            spec: roll bounds plus stat adds (missing spec rolls 0)
            source: combatant whose stats feed the adds

        Returns:
            int: randint(min, max) + floor(stat * coefficient) per add,
                floored at 0
        """
        if spec is None:
            return 0
        total = self.randint(spec.min, spec.max)
        if source is not None:
            for stat, coefficient in spec.adds:
                total += math.floor(source.stat(stat) * coefficient)
            if spec.stat and spec.scale:
                total += math.floor(source.stat(spec.stat) * spec.scale)
        return max(0, total)
