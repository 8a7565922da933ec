import pytest

from skirmish.combat.ai_opponent import OpponentAI, weighted_choice
from skirmish.combat.dice import DiceRoller
from skirmish.combat.enemy_registry import ENEMY_TEMPLATES, create_enemy
from skirmish.combat.models.combatant import Combatant, CombatantType, StatusEffectInstance
from skirmish.combat.models.status import StatusKey


def _enemy(**overrides) -> Combatant:
    data = {
        "name": "Acolyte",
        "hp": 100,
        "mp": 5,
        "sp": 5,
        "ac": 12,
        "to_hit": 3,
        "damage": [2, 6],
    }
    data.update(overrides)
    return Combatant.from_dict(data, combatant_type=CombatantType.ENEMY)


def _ai(rng) -> OpponentAI:
    return OpponentAI(DiceRoller(rng))


def test_heal_threshold_is_strictly_below_half(scripted):
    ai = _ai(scripted(floats=[0.5, 0.5, 0.5]))
    enemy = _enemy(hp=50, max_hp=100, attacks=["heal", "strike"])

    decision = ai.decide_action(enemy)

    assert decision.action == "move"
    assert decision.move_id == "strike"
    assert decision.reason == "attack"


def test_heal_below_half(scripted):
    ai = _ai(scripted(floats=[0.5, 0.5]))
    enemy = _enemy(hp=49, max_hp=100, attacks=["heal", "strike"])

    decision = ai.decide_action(enemy)

    assert decision.move_id == "heal"
    assert decision.reason == "heal"


def test_unaffordable_heal_is_ignored(scripted):
    ai = _ai(scripted(floats=[0.5]))
    enemy = _enemy(hp=10, max_hp=100, mp=0, sp=0, attacks=["heal"])

    decision = ai.decide_action(enemy)

    assert decision.action == "attack"
    assert decision.reason == "fallback"


def test_taunt_takes_priority(scripted):
    ai = _ai(scripted(floats=[0.05]))
    enemy = _enemy(hp=10, max_hp=100, attacks=["heal"])

    decision = ai.decide_action(enemy)

    assert decision.action == "taunt"
    assert enemy.ai.turns_taken == 1


def test_buff_on_first_turn(scripted):
    ai = _ai(scripted(ints=[2, 0], floats=[0.5]))
    enemy = _enemy(attacks=["fortify", "strike"])

    decision = ai.decide_action(enemy)

    assert decision.move_id == "fortify"
    assert decision.reason == "buff"
    assert enemy.ai.last_buff_turn == 1


def test_active_buff_is_not_recast(scripted):
    ai = _ai(scripted(floats=[0.5, 0.5, 0.5]))
    enemy = _enemy(attacks=["fortify", "strike"])
    enemy.add_status(StatusKey.AC_UP, StatusEffectInstance(turns=2))

    decision = ai.decide_action(enemy)

    assert decision.move_id == "strike"


def test_buff_waits_for_window(scripted):
    ai = _ai(scripted(ints=[2], floats=[0.5, 0.5, 0.5]))
    enemy = _enemy(attacks=["fortify", "strike"], ai={"turns_taken": 1, "last_buff_turn": 1})

    decision = ai.decide_action(enemy)

    # second turn, one turn since the last buff, window of 2
    assert decision.move_id == "strike"
    assert decision.reason == "attack"
    assert enemy.ai.last_buff_turn == 1


def test_no_moves_falls_back_to_basic_attack(scripted):
    ai = _ai(scripted(floats=[0.5]))

    decision = ai.decide_action(_enemy())

    assert decision.action == "attack"
    assert decision.move_id is None


def test_affordable_moves_caps_attacks_but_keeps_abilities():
    ai = OpponentAI()
    enemy = _enemy(attacks=["strike", "quick", "heavy", "guard", "wound"], abilities=["fangs", "strike"])

    ids = [move.id for move in ai.affordable_moves(enemy)]

    assert ids == ["strike", "quick", "heavy", "guard", "fangs"]


@pytest.mark.parametrize("enemy_type", sorted(ENEMY_TEMPLATES))
def test_every_template_move_is_available_to_the_policy(enemy_type):
    enemy = create_enemy(enemy_type, trait="cunning")
    enemy.mp = enemy.max_mp = 99
    enemy.sp = enemy.max_sp = 99
    template = ENEMY_TEMPLATES[enemy_type]

    ids = {move.id for move in OpponentAI().affordable_moves(enemy)}

    assert ids == set(template.get("attacks", [])) | set(template.get("abilities", []))


def test_weighted_choice_never_picks_zero_weight(scripted):
    rng = scripted(floats=[0.0, 0.99])
    pairs = [("a", 0), ("b", 3), ("c", -1)]

    assert weighted_choice(rng, pairs) == "b"
    assert weighted_choice(rng, pairs) == "b"


def test_weighted_choice_uniform_when_no_positive_weight(scripted):
    rng = scripted(ints=[1])

    assert weighted_choice(rng, [("a", 0), ("b", -2)]) == "b"


def test_weighted_choice_empty(scripted):
    assert weighted_choice(scripted(), []) is None


def test_weighted_choice_follows_cumulative_weights(scripted):
    rng = scripted(floats=[0.1, 0.5, 0.9])
    pairs = [("low", 1), ("mid", 2), ("high", 1)]

    assert weighted_choice(rng, pairs) == "low"
    assert weighted_choice(rng, pairs) == "mid"
    assert weighted_choice(rng, pairs) == "high"
