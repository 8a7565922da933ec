import logging

import pytest

from skirmish.combat.elements import Element
from skirmish.combat.models.action import CostPool
from skirmish.combat.models.combatant import Combatant, CombatantType, StatusEffectInstance
from skirmish.combat.models.status import StatusKey


def _build(**overrides) -> Combatant:
    data = {"name": "Hero", "hp": 20, "mp": 4, "sp": 6}
    data.update(overrides)
    return Combatant.from_dict(data, combatant_type=CombatantType.PLAYER)


def test_from_dict_accepts_uppercase_keys():
    hero = Combatant.from_dict(
        {"name": "Hero", "class": "Cleric", "HP": 12, "maxHP": 22, "MP": 8, "AC": 13, "CHA": 2}
    )

    assert hero.hp == 12
    assert hero.max_hp == 22
    assert hero.mp == 8
    assert hero.max_mp == 8
    assert hero.ac == 13
    assert hero.class_name == "Cleric"
    assert hero.stat("cha") == 2
    assert hero.combatant_type == CombatantType.PLAYER


def test_from_dict_clamps_current_pools():
    hero = _build(hp=30, max_hp=20)
    assert hero.hp == 20


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": ""},
        {"hp": None},
        {"hp": "ten"},
        {"max_hp": 0},
        {"stats": {"STR": 25}},
        {"damage": [5, 2]},
        {"damage": "1d6"},
        {"attacks": ["moonbeam"]},
        {"affinity": "Shadow"},
        {"status": {"confused": 2}},
        {"resist": {"Fire": "half"}},
    ],
)
def test_from_dict_rejects_malformed_input(overrides):
    with pytest.raises(ValueError):
        _build(**overrides)


def test_negative_resist_is_clamped_with_warning(caplog):
    with caplog.at_level(logging.WARNING):
        hero = _build(resist={"Fire": -0.5})

    assert hero.resist[Element.FIRE] == 0.0
    assert "negative resist" in caplog.text


def test_status_parsing():
    hero = _build(
        status={
            "stunned": 1,
            "regen": {"turns": "infinite", "heal": {"min": 1, "max": 2}},
            "acup": {"turns": 2, "acDelta": 3},
        }
    )

    assert hero.status[StatusKey.STUNNED].turns == 1
    assert hero.status[StatusKey.REGEN].is_infinite
    assert hero.status[StatusKey.REGEN].heal.max == 2
    assert hero.status[StatusKey.AC_UP].ac_delta == 3


def test_take_damage_and_heal_clamp():
    hero = _build()

    assert hero.take_damage(25) == 20
    assert hero.hp == 0
    assert not hero.is_alive
    assert hero.take_damage(-5) == 0

    assert hero.heal(50) == 20
    assert hero.hp == 20


def test_spend_is_all_or_nothing():
    hero = _build()

    assert hero.spend(CostPool.SP, 4) is True
    assert hero.sp == 2
    assert hero.spend(CostPool.SP, 3) is False
    assert hero.sp == 2
    assert hero.spend(CostPool.MP, 0) is True
    assert hero.mp == 4


def test_status_instance_tick():
    timed = StatusEffectInstance(turns=2)
    assert timed.tick() is False
    assert timed.tick() is True

    assert StatusEffectInstance(turns=None).tick() is False
    assert StatusEffectInstance(turns=1, persistent=True).tick() is False


def test_dmg_mult_maps_to_pct():
    instance = StatusEffectInstance.from_payload(turns=2, data={"dmgMult": 0.75})
    assert instance.pct == pytest.approx(0.25)


def test_loadout_drops_duplicates():
    hero = _build(attacks=["strike", "guard"], abilities=["guard", "heal"])
    assert hero.loadout() == ["strike", "guard", "heal"]


def test_to_dict_projection():
    hero = _build(status={"poison": {"turns": 2, "damage": 3}})
    data = hero.to_dict()

    assert data["HP"] == 20
    assert data["maxSP"] == 6
    assert data["status"]["poison"] == {"turns": 2, "persistent": False, "damage": 3}
    assert data["affinity"] == "Physical"
