import random

import pytest

from skirmish.combat.rules import (
    CLASS_TEMPLATES,
    create_player,
    flee_difficulty,
    random_name,
)


def test_create_player_from_template():
    hero = create_player("Warrior", "Brand")

    assert hero.name == "Brand"
    assert hero.hp == hero.max_hp == 26
    assert hero.attacks == ["strike", "heavy", "quick", "guard"]
    assert hero.inventory == ["potion"]
    assert hero.stat("STR") == 3


def test_wizard_gets_abilities():
    wizard = create_player("Wizard", "Ione")
    assert wizard.abilities == ["flameBrand", "frostbind"]
    assert wizard.mp == 10


@pytest.mark.parametrize("class_name", sorted(CLASS_TEMPLATES))
def test_every_class_builds(class_name):
    hero = create_player(class_name, rng=random.Random(1))
    assert hero.name
    assert len(hero.attacks) <= 4
    assert hero.is_alive


def test_unknown_class():
    with pytest.raises(ValueError):
        create_player("Bard")


def test_random_name_is_seeded():
    assert random_name(random.Random(3)) == random_name(random.Random(3))


def test_flee_difficulty():
    assert flee_difficulty(10) == 14
    assert flee_difficulty(14) == 14
    assert flee_difficulty(15) == 15


def test_create_player_with_basic_picks():
    hero = create_player("Warrior", "Brand", moves=["wound", "fortify", "kidneyshot"])
    assert hero.attacks == ["wound", "fortify", "kidneyshot"]


@pytest.mark.parametrize(
    "moves",
    [
        [],
        ["strike", "heavy", "quick", "guard", "wound"],
        ["strike", "strike"],
        ["strike", "firebolt"],
        ["moonbeam"],
    ],
)
def test_basic_picks_must_come_from_class_pool(moves):
    with pytest.raises(ValueError):
        create_player("Warrior", "Brand", moves=moves)
