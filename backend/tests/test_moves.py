import dataclasses

import pytest

from skirmish.combat.models.action import ApplyStatusEffect, CostPool, DamageEffect
from skirmish.combat.models.status import StatusKey
from skirmish.combat.moves import (
    MOVES,
    build_move,
    get_basic_move_pool,
    get_move_by_id,
    list_moves_by_ids,
)


def test_catalog_is_read_only():
    with pytest.raises(TypeError):
        MOVES["strike"] = MOVES["heavy"]

    with pytest.raises(dataclasses.FrozenInstanceError):
        MOVES["strike"].to_hit_bonus = 10


def test_catalog_entries():
    heavy = get_move_by_id("heavy")
    assert heavy.cost.pool == CostPool.SP
    assert heavy.cost.amount == 2
    assert heavy.to_hit_bonus == -2
    assert heavy.needs_to_hit_roll()

    fangs = get_move_by_id("fangs")
    assert isinstance(fangs.effects[0], DamageEffect)
    poison = fangs.on_hit[0]
    assert isinstance(poison, ApplyStatusEffect)
    assert poison.key == StatusKey.POISON
    assert poison.payload == {"damage": 3}

    guard = get_move_by_id("guard")
    assert not guard.needs_to_hit_roll()
    assert guard.status_keys() == (StatusKey.DEFENDING,)


def test_lookup_helpers():
    assert get_move_by_id("moonbeam") is None
    assert get_move_by_id(None) is None
    assert [m.id for m in list_moves_by_ids(["strike", "moonbeam", "heal"])] == ["strike", "heal"]
    assert "wound" in get_basic_move_pool("Warrior")
    assert get_basic_move_pool("Bard") == []


def test_build_move_parses_status_payload():
    move = build_move(
        {
            "id": "chill",
            "kind": "debuff",
            "target": "enemy",
            "element": "ice",
            "cost": {"pool": "MP", "amount": 1},
            "effects": [
                {"type": "apply_status", "chance": 0.3, "status": {"key": "slowed", "turns": "infinite"}}
            ],
        }
    )

    effect = move.effects[0]
    assert move.name == "chill"
    assert effect.turns is None
    assert effect.chance == pytest.approx(0.3)
    assert not move.needs_to_hit_roll()


@pytest.mark.parametrize(
    "definition",
    [
        {"kind": "attack", "target": "enemy"},
        {"id": "x", "kind": "dance", "target": "enemy"},
        {"id": "x", "kind": "attack", "target": "everyone"},
        {"id": "x", "kind": "attack", "target": "enemy", "cost": {"pool": "HP"}},
        {"id": "x", "kind": "attack", "target": "enemy", "effects": [{"type": "explode"}]},
        {"id": "x", "kind": "attack", "target": "enemy", "element": "Shadow"},
        {
            "id": "x",
            "kind": "attack",
            "target": "enemy",
            "effects": [{"type": "apply_status", "status": {"key": "confused"}}],
        },
    ],
)
def test_build_move_rejects_bad_definitions(definition):
    with pytest.raises(ValueError):
        build_move(definition)
