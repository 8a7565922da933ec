import pytest

from skirmish.combat.effects import STATUS_REGISTRY, blocking_statuses, get_status_behavior
from skirmish.combat.models.combatant import Combatant, StatusEffectInstance
from skirmish.combat.models.status import StatusKey, parse_status_key


def test_every_key_has_a_behavior():
    for key in StatusKey:
        assert get_status_behavior(key) is not None
        assert get_status_behavior(key).key == key


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        STATUS_REGISTRY[StatusKey.POISON] = None


def test_blocking_statuses():
    hero = Combatant.from_dict({"name": "Hero", "hp": 10, "status": {"frozen": 1, "poison": 2}})
    assert blocking_statuses(hero) == [StatusKey.FROZEN]


def test_defending_halves_incoming_and_is_consumed_on_hit():
    behavior = get_status_behavior(StatusKey.DEFENDING)
    assert behavior.consume_on_hit
    assert behavior.modify_incoming_damage(7, StatusEffectInstance()) == 3.5
    assert behavior.modify_incoming_damage(8, StatusEffectInstance(pct=0.25)) == 6


def test_wounded_default_and_flat():
    behavior = get_status_behavior(StatusKey.WOUNDED)
    assert behavior.modify_outgoing_damage(8, StatusEffectInstance()) == 6
    assert behavior.modify_outgoing_damage(8, StatusEffectInstance(pct=0.5, flat=2)) == 2


def test_ac_and_to_hit_modifiers():
    ac_up = get_status_behavior(StatusKey.AC_UP)
    slowed = get_status_behavior(StatusKey.SLOWED)

    assert ac_up.modify_ac(12, StatusEffectInstance()) == 14
    assert ac_up.modify_ac(12, StatusEffectInstance(ac_delta=4)) == 16
    assert slowed.modify_to_hit(0, StatusEffectInstance()) == -2
    assert slowed.modify_to_hit(0, StatusEffectInstance(to_hit_delta=-5)) == -5


def test_parse_status_key_aliases():
    assert parse_status_key("acUp") == StatusKey.AC_UP
    assert parse_status_key("stun") == StatusKey.STUNNED
    assert parse_status_key(StatusKey.REGEN) == StatusKey.REGEN
    with pytest.raises(ValueError):
        parse_status_key("confused")
