import random

from skirmish.combat.dice import DiceRoller
from skirmish.combat.models.action import RollSpec
from skirmish.combat.models.combatant import Combatant


def _source(**stats) -> Combatant:
    return Combatant.from_dict({"name": "Caster", "hp": 10, "stats": stats})


def test_randint_swaps_reversed_bounds(scripted):
    dice = DiceRoller(scripted(ints=[5]))
    assert dice.randint(8, 3) == 5


def test_chance_edges(scripted):
    dice = DiceRoller(scripted(floats=[0.2, 0.8]))

    assert dice.chance(None) is True
    assert dice.chance(0) is False
    assert dice.chance(-1) is False
    assert dice.chance(1.0) is True
    assert dice.chance(0.5) is True
    assert dice.chance(0.5) is False


def test_roll_scaled_adds_floored_stat_terms(scripted):
    dice = DiceRoller(scripted(ints=[4]))
    spec = RollSpec(min=2, max=6, adds=(("STR", 0.5), ("INT", 0.8)))

    # 4 + floor(3 * 0.5) + floor(2 * 0.8)
    assert dice.roll_scaled(spec, _source(STR=3, INT=2)) == 6


def test_roll_scaled_legacy_stat_pair(scripted):
    dice = DiceRoller(scripted(ints=[1]))
    spec = RollSpec(min=1, max=1, stat="CHA", scale=1.5)

    assert dice.roll_scaled(spec, _source(CHA=3)) == 5


def test_roll_scaled_never_negative(scripted):
    dice = DiceRoller(scripted(ints=[0]))
    spec = RollSpec(min=0, max=2, adds=(("STR", 1.0),))

    assert dice.roll_scaled(spec, _source(STR=-3)) == 0
    assert dice.roll_scaled(None, _source()) == 0


def test_seeded_rolls_are_reproducible():
    first = DiceRoller(random.Random(42))
    second = DiceRoller(random.Random(42))

    assert [first.d20() for _ in range(10)] == [second.d20() for _ in range(10)]
