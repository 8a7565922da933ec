"""
Move catalog

Move definitions are written as plain dicts and run through a validating
builder once at import; the resulting table is read-only.
"""
import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .elements import Element, parse_element
from .models.action import (
    ApplyStatusEffect,
    Cost,
    CostPool,
    DamageEffect,
    Effect,
    EffectType,
    HealEffect,
    Move,
    MoveKind,
    MoveTarget,
    RollSpec,
)
from .models.status import parse_status_key

logger = logging.getLogger(__name__)


_MOVE_DEFINITIONS: List[Dict[str, Any]] = [
    # ---------------------------
    # Martial (SP)
    # ---------------------------
    {
        "id": "strike",
        "name": "Strike",
        "description": "A reliable weapon attack.",
        "element": "Physical",
        "kind": "attack",
        "target": "enemy",
        "cost": {"pool": "SP", "amount": 1},
        "effects": [{"type": "damage", "roll": {"min": 2, "max": 6, "adds": {"STR": 0.5}}}],
    },
    {
        "id": "kidneyshot",
        "name": "Kidney Shot",
        "description": "A disorienting blow to the abdomen.",
        "element": "Physical",
        "kind": "attack",
        "target": "enemy",
        "cost": {"pool": "SP", "amount": 3},
        "effects": [{"type": "damage", "roll": {"min": 4, "max": 7, "adds": {"DEX": 1.0}}}],
        "on_hit": [
            {"type": "apply_status", "chance": 0.5, "status": {"key": "stunned", "turns": 1}},
        ],
    },
    {
        "id": "heavy",
        "name": "Heavy Blow",
        "description": "Slower swing, hits harder.",
        "element": "Physical",
        "kind": "attack",
        "target": "enemy",
        "to_hit_bonus": -2,
        "cost": {"pool": "SP", "amount": 2},
        "effects": [{"type": "damage", "roll": {"min": 5, "max": 10, "adds": {"STR": 1.0}}}],
    },
    {
        "id": "quick",
        "name": "Quick Jab",
        "description": "Fast and accurate, but lighter damage.",
        "element": "Physical",
        "kind": "attack",
        "target": "enemy",
        "to_hit_bonus": 2,
        "cost": {"pool": "SP", "amount": 1},
        "effects": [{"type": "damage", "roll": {"min": 4, "max": 10, "adds": {"DEX": 1.0}}}],
    },
    {
        "id": "fangs",
        "name": "Fangs",
        "description": "Poison drips off these large fangs.",
        "element": "Physical",
        "kind": "attack",
        "target": "enemy",
        "to_hit_bonus": 1,
        "cost": {"pool": "SP", "amount": 1},
        "effects": [{"type": "damage", "roll": {"min": 4, "max": 8, "adds": {"DEX": 1.0}}}],
        "on_hit": [
            {"type": "apply_status", "status": {"key": "poison", "turns": 2, "data": {"damage": 3}}},
        ],
    },
    {
        "id": "guard",
        "name": "Guard",
        "description": "Brace to reduce the next hit (cannot miss).",
        "element": "Physical",
        "kind": "buff",
        "target": "self",
        "cost": {"pool": "SP", "amount": 1},
        "effects": [{"type": "apply_status", "status": {"key": "defending", "turns": 1}}],
    },
    {
        "id": "bleedStrike",
        "name": "Bleed Strike",
        "description": "A cutting attack that causes bleeding.",
        "element": "Physical",
        "kind": "attack",
        "target": "enemy",
        "cost": {"pool": "SP", "amount": 3},
        "effects": [{"type": "damage", "roll": {"min": 3, "max": 7, "adds": {"STR": 0.4}}}],
        "on_hit": [
            {"type": "apply_status", "status": {"key": "bleeding", "turns": 3, "data": {"damage": 2}}},
        ],
    },
    {
        "id": "wound",
        "name": "Wound",
        "description": "Cripples the target, reducing their damage output.",
        "element": "Physical",
        "kind": "debuff",
        "target": "enemy",
        "cost": {"pool": "SP", "amount": 1},
        "effects": [
            {"type": "apply_status", "status": {"key": "wounded", "turns": 3, "data": {"pct": 0.25}}},
        ],
    },
    {
        "id": "fortify",
        "name": "Fortify",
        "description": "+2 AC for 2 turns (cannot miss).",
        "element": "Physical",
        "kind": "buff",
        "target": "self",
        "cost": {"pool": "SP", "amount": 1},
        "effects": [
            {"type": "apply_status", "status": {"key": "ac_up", "turns": 2, "data": {"ac_delta": 2}}},
        ],
    },
    # ---------------------------
    # Magic (MP)
    # ---------------------------
    {
        "id": "firebolt",
        "name": "Firebolt",
        "description": "A burst of flame.",
        "element": "Fire",
        "kind": "attack",
        "target": "enemy",
        "to_hit_bonus": 1,
        "cost": {"pool": "MP", "amount": 2},
        "effects": [{"type": "damage", "roll": {"min": 5, "max": 12, "adds": {"INT": 0.8}}}],
    },
    {
        "id": "poisonRay",
        "name": "Poison Ray",
        "description": "A putrid green ray that rots its target.",
        "element": "Poison",
        "kind": "attack",
        "target": "enemy",
        "to_hit_bonus": 1,
        "cost": {"pool": "MP", "amount": 3},
        "effects": [{"type": "damage", "roll": {"min": 4, "max": 8, "adds": {"INT": 0.8}}}],
        "on_hit": [
            {
                "type": "apply_status",
                "chance": 0.5,
                "status": {"key": "poison", "turns": 3, "data": {"damage": 2}},
            },
        ],
    },
    {
        "id": "iceShard",
        "name": "Ice Shard",
        "description": "Chilling magic that can slow.",
        "element": "Ice",
        "kind": "attack",
        "target": "enemy",
        "cost": {"pool": "MP", "amount": 2},
        "effects": [{"type": "damage", "roll": {"min": 3, "max": 8, "adds": {"INT": 0.6}}}],
        "on_hit": [
            {
                "type": "apply_status",
                "chance": 0.5,
                "status": {"key": "slowed", "turns": 2, "data": {"to_hit_delta": -2}},
            },
        ],
    },
    {
        "id": "ignite",
        "name": "Ignite",
        "description": "Set the target ablaze for a few turns.",
        "element": "Fire",
        "kind": "debuff",
        "target": "enemy",
        "cost": {"pool": "MP", "amount": 1},
        "effects": [
            {"type": "apply_status", "status": {"key": "burning", "turns": 3, "data": {"damage": 3}}},
        ],
    },
    {
        "id": "frostbind",
        "name": "Frostbind",
        "description": "Encase the target in ice; they lose their next turn.",
        "element": "Ice",
        "kind": "debuff",
        "target": "enemy",
        "cost": {"pool": "MP", "amount": 3},
        "effects": [
            {"type": "apply_status", "chance": 0.6, "status": {"key": "frozen", "turns": 1}},
        ],
    },
    # ---------------------------
    # Healing / buffs (MP), no hit roll
    # ---------------------------
    {
        "id": "heal",
        "name": "Heal",
        "description": "Restore some HP (cannot miss).",
        "element": "Holy",
        "kind": "heal",
        "target": "self",
        "cost": {"pool": "MP", "amount": 1},
        "effects": [{"type": "heal", "roll": {"min": 6, "max": 12, "adds": {"INT": 0.6}}}],
    },
    {
        "id": "regen",
        "name": "Regen",
        "description": "Heal over time for a few turns (cannot miss).",
        "element": "Holy",
        "kind": "buff",
        "target": "self",
        "cost": {"pool": "MP", "amount": 2},
        "effects": [
            {
                "type": "apply_status",
                "status": {
                    "key": "regen",
                    "turns": 3,
                    "data": {"heal": {"min": 2, "max": 4, "adds": {"INT": 0.25}}},
                },
            },
        ],
    },
    {
        "id": "flameBrand",
        "name": "Flame Brand",
        "description": "Wreathe your weapon in fire; strikes deal Fire damage.",
        "element": "Fire",
        "kind": "utility",
        "target": "self",
        "cost": {"pool": "MP", "amount": 1},
        "effects": [
            {"type": "apply_status", "status": {"key": "enchant", "turns": 3, "data": {"element": "Fire"}}},
        ],
    },
]


def _build_effect(data: Mapping[str, Any], move_id: str) -> Effect:
    if not isinstance(data, Mapping):
        raise ValueError(f"{move_id}: effect must be a mapping")
    try:
        effect_type = EffectType(data.get("type"))
    except ValueError:
        raise ValueError(f"{move_id}: unknown effect type {data.get('type')!r}") from None

    if effect_type == EffectType.DAMAGE:
        return DamageEffect(roll=RollSpec.from_dict(data.get("roll")))
    if effect_type == EffectType.HEAL:
        return HealEffect(roll=RollSpec.from_dict(data.get("roll")))

    status = data.get("status") or {}
    if not isinstance(status, Mapping):
        raise ValueError(f"{move_id}: apply_status needs a status mapping")
    payload = dict(status.get("data") or {})
    if isinstance(payload.get("heal"), Mapping):
        payload["heal"] = RollSpec.from_dict(payload["heal"])
    turns = status.get("turns", 1)
    chance = data.get("chance")
    return ApplyStatusEffect(
        key=parse_status_key(status.get("key")),
        turns=None if turns in (None, "infinite") else int(turns),
        persistent=bool(status.get("persistent", False)),
        data=tuple(sorted(payload.items())),
        chance=float(chance) if chance is not None else None,
    )


def build_move(data: Mapping[str, Any]) -> Move:
    """
    Validated move construction

    Raises:
        ValueError: missing id, unknown kind/target/element/pool/effect type
    """
    move_id = str(data.get("id") or "").strip()
    if not move_id:
        raise ValueError("Move id is required")
    cost = data.get("cost") or {}
    try:
        kind = MoveKind(data.get("kind"))
        target = MoveTarget(data.get("target"))
        pool = CostPool(cost.get("pool", CostPool.SP.value))
    except ValueError as exc:
        raise ValueError(f"{move_id}: {exc}") from None
    return Move(
        id=move_id,
        name=str(data.get("name") or move_id),
        description=str(data.get("description") or ""),
        element=parse_element(data.get("element"), default=Element.PHYSICAL),
        kind=kind,
        target=target,
        cost=Cost(pool=pool, amount=int(cost.get("amount") or 0)),
        effects=tuple(_build_effect(effect, move_id) for effect in data.get("effects") or ()),
        on_hit=tuple(_build_effect(effect, move_id) for effect in data.get("on_hit") or ()),
        to_hit_bonus=int(data.get("to_hit_bonus") or 0),
    )


MOVES: Mapping[str, Move] = MappingProxyType(
    {definition["id"]: build_move(definition) for definition in _MOVE_DEFINITIONS}
)


# ============================================
# Loadout defaults
# ============================================

DEFAULT_ATTACKS_BY_CLASS: Mapping[str, tuple] = MappingProxyType(
    {
        "Warrior": ("strike", "heavy", "quick", "guard", "bleedStrike", "kidneyshot"),
        "Cleric": ("strike", "guard", "heal", "firebolt"),
        "Wizard": ("strike", "firebolt", "iceShard", "regen", "ignite"),
        "Shambling Fool": ("strike", "quick", "guard", "heavy", "kidneyshot"),
    }
)

DEFAULT_ABILITIES_BY_CLASS: Mapping[str, tuple] = MappingProxyType(
    {
        "Warrior": (),
        "Cleric": (),
        "Wizard": ("flameBrand", "frostbind"),
        "Shambling Fool": (),
    }
)

# Pool a new character picks its four basics from
BASIC_MOVE_POOL_BY_CLASS: Mapping[str, tuple] = MappingProxyType(
    {
        "Warrior": ("strike", "heavy", "quick", "guard", "bleedStrike", "wound", "fortify", "kidneyshot"),
        "Cleric": ("strike", "quick", "guard", "heal", "regen", "fortify", "wound", "firebolt"),
        "Wizard": ("strike", "quick", "firebolt", "iceShard", "ignite", "regen", "flameBrand", "frostbind"),
        "Shambling Fool": ("strike", "heavy", "quick", "guard", "wound", "kidneyshot"),
    }
)


def get_move_by_id(move_id: Optional[str]) -> Optional[Move]:
    if not move_id:
        return None
    return MOVES.get(move_id)


def list_moves_by_ids(ids: Optional[Iterable[str]]) -> List[Move]:
    """Resolve ids to moves, skipping unknown ones"""
    return [move for move in (get_move_by_id(move_id) for move_id in ids or ()) if move]


def get_basic_move_pool(class_name: str) -> List[str]:
    return list(BASIC_MOVE_POOL_BY_CLASS.get(class_name, ()))

