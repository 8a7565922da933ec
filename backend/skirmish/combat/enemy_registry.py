"""Enemy template registry and encounter generator."""
import copy
import logging
import random
import re
from typing import Any, Dict, List, Optional, Tuple

from .elements import parse_element
from .models.combatant import AIMemory, Combatant, CombatantType
from .moves import get_move_by_id
from .rules import MAX_LOADOUT

logger = logging.getLogger(__name__)


ENEMY_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "Goblin": {
        "hp": 14, "ac": 12, "to_hit": 3, "damage": (1, 6), "sp": 4,
        "attacks": ["strike", "quick"],
        "tags": ["humanoid", "forest"],
    },
    "Bandit": {
        "hp": 16, "ac": 13, "to_hit": 4, "damage": (2, 6), "sp": 6,
        "attacks": ["strike", "heavy", "wound", "guard"],
        "tags": ["humanoid", "road"],
    },
    "Skeleton": {
        "hp": 18, "ac": 13, "to_hit": 4, "damage": (1, 8), "sp": 5,
        "attacks": ["strike", "heavy", "fortify"],
        "resist": {"Holy": 1.5, "Poison": 0},
        "tags": ["undead", "crypt"],
    },
    "Bat": {
        "hp": 12, "ac": 12, "to_hit": 3, "damage": (1, 6), "sp": 4,
        "attacks": ["quick", "fangs"],
        "tags": ["beast", "cave"],
    },
    "Cult Acolyte": {
        "hp": 15, "ac": 12, "to_hit": 4, "damage": (2, 8), "mp": 8, "sp": 2,
        "affinity": "Poison",
        "attacks": ["strike", "poisonRay", "heal"],
        "abilities": ["regen", "ignite"],
        "tags": ["humanoid", "crypt"],
    },
    "Viper": {
        "hp": 13, "ac": 13, "to_hit": 4, "damage": (1, 7), "sp": 5,
        "affinity": "Poison",
        "attacks": ["fangs", "quick"],
        "resist": {"Poison": 0},
        "tags": ["beast", "swamp"],
    },
    "Zombie": {
        "hp": 20, "ac": 11, "to_hit": 3, "damage": (2, 8), "sp": 6,
        "affinity": "Poison",
        "attacks": ["strike", "heavy", "bleedStrike"],
        "resist": {"Holy": 1.5, "Fire": 1.5},
        "tags": ["undead", "swamp"],
    },
}

# (trait, hp, ac, to_hit, damage max bump)
TRAITS: List[Tuple[str, int, int, int, int]] = [
    ("cowardly", -2, 0, -1, 0),
    ("fanatical", 2, 0, 1, 0),
    ("cunning", 0, 1, 0, 0),
    ("wounded", -4, 0, 0, 0),
    ("brutal", 0, 0, 0, 2),
]

MIN_ENEMY_HP = 6
MIN_ENEMY_AC = 10

_BASE_TEMPLATES: Dict[str, Dict[str, Any]] = copy.deepcopy(ENEMY_TEMPLATES)
_DYNAMIC_TEMPLATES: Dict[str, Dict[str, Any]] = {}


def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", str(value).strip().lower()).strip("_")


def _ensure_int(value: Any, field: str, errors: List[str]) -> Optional[int]:
    if isinstance(value, bool):
        errors.append(f"{field} must be an integer")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        errors.append(f"{field} must be an integer")
        return None


def _validate_moves(ids: Any, field: str, errors: List[str]):
    if ids is None:
        return
    if not isinstance(ids, (list, tuple)):
        errors.append(f"{field} must be a list of move ids")
        return
    for move_id in ids:
        if get_move_by_id(move_id) is None:
            errors.append(f"{field}: unknown move '{move_id}'")


def _validate_template_payload(template: Dict[str, Any]) -> List[str]:
    errors: List[str] = []

    enemy_type = template.get("enemy_type")
    if not isinstance(enemy_type, str) or not enemy_type.strip():
        errors.append("enemy_type is required and must be a string")

    hp = _ensure_int(template.get("hp"), "hp", errors)
    if hp is not None and hp < 1:
        errors.append("hp must be >= 1")

    ac = _ensure_int(template.get("ac"), "ac", errors)
    if ac is not None and ac < 1:
        errors.append("ac must be >= 1")

    to_hit = _ensure_int(template.get("to_hit"), "to_hit", errors)
    if to_hit is not None and (to_hit < -10 or to_hit > 30):
        errors.append("to_hit out of range (-10..30)")

    damage = template.get("damage")
    if not isinstance(damage, (list, tuple)) or len(damage) != 2:
        errors.append("damage must be a [min, max] pair")
    else:
        lo = _ensure_int(damage[0], "damage min", errors)
        hi = _ensure_int(damage[1], "damage max", errors)
        if lo is not None and hi is not None and (lo < 0 or hi < lo):
            errors.append("damage must satisfy 0 <= min <= max")

    for pool in ("mp", "sp"):
        if template.get(pool) is not None:
            value = _ensure_int(template.get(pool), pool, errors)
            if value is not None and value < 0:
                errors.append(f"{pool} must be >= 0")

    _validate_moves(template.get("attacks"), "attacks", errors)
    _validate_moves(template.get("abilities"), "abilities", errors)

    affinity = template.get("affinity")
    if affinity is not None:
        try:
            parse_element(affinity)
        except ValueError as exc:
            errors.append(str(exc))

    return errors


def _normalize_template(enemy_type: str, template: Dict[str, Any]) -> Dict[str, Any]:
    working = dict(template)
    working["enemy_type"] = enemy_type
    errors = _validate_template_payload(working)
    if errors:
        raise ValueError("; ".join(errors))

    return {
        "enemy_type": enemy_type,
        "hp": int(working["hp"]),
        "ac": int(working["ac"]),
        "to_hit": int(working["to_hit"]),
        "damage": (int(working["damage"][0]), int(working["damage"][1])),
        "mp": int(working.get("mp") or 0),
        "sp": int(working.get("sp") or 0),
        "affinity": working.get("affinity", "Physical"),
        "resist": dict(working.get("resist") or {}),
        "attacks": list(working.get("attacks") or []),
        "abilities": list(working.get("abilities") or []),
        "tags": list(working.get("tags") or []),
    }


def register_template(template: Dict[str, Any]) -> Dict[str, Any]:
    """Register an enemy template defined by the caller."""
    errors = _validate_template_payload(template)
    if errors:
        raise ValueError("; ".join(errors))

    enemy_type = template["enemy_type"]
    normalized = _normalize_template(enemy_type, template)
    _DYNAMIC_TEMPLATES[enemy_type] = normalized
    logger.info("Registered enemy template %s", enemy_type)
    return copy.deepcopy(normalized)


def get_template(enemy_type: str) -> Optional[Dict[str, Any]]:
    """Get a template by enemy type (exact name or slug)."""
    if enemy_type in _DYNAMIC_TEMPLATES:
        return copy.deepcopy(_DYNAMIC_TEMPLATES[enemy_type])

    lookup_key = slugify(enemy_type)
    for key, value in _DYNAMIC_TEMPLATES.items():
        if slugify(key) == lookup_key:
            return copy.deepcopy(value)

    for key, value in _BASE_TEMPLATES.items():
        if key == enemy_type or slugify(key) == lookup_key:
            return _normalize_template(key, value)
    return None


def list_templates(tags: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    """List templates, optionally filtered by tags."""
    merged: Dict[str, Dict[str, Any]] = {}
    for key, value in _BASE_TEMPLATES.items():
        merged[key] = _normalize_template(key, value)
    for key, value in _DYNAMIC_TEMPLATES.items():
        merged[key] = copy.deepcopy(value)

    if tags:
        tag_set = set(tags)
        return [t for t in merged.values() if tag_set.issubset(set(t.get("tags", [])))]
    return list(merged.values())


def create_enemy(
    enemy_type: Optional[str] = None,
    difficulty: int = 0,
    rng: Optional[random.Random] = None,
    trait: Optional[str] = None,
) -> Combatant:
    """
    Build an enemy combatant from a template

    Scaling per difficulty level: +3 HP, +1 AC and +1 to-hit every two
    levels. A random trait nudges the block (HP floored at 6, AC at 10).

    Args:
        enemy_type: template name; random when omitted
        difficulty: encounter level, 0 = first
        rng: random source for type / trait picks
        trait: force a trait instead of rolling one

    Raises:
        ValueError: unknown enemy type or trait, negative difficulty
    """
    rng = rng or random.Random()
    if difficulty < 0:
        raise ValueError("difficulty must be >= 0")

    if enemy_type is None:
        enemy_type = rng.choice(sorted(_BASE_TEMPLATES))
    template = get_template(enemy_type)
    if template is None:
        raise ValueError(f"Unknown enemy type: {enemy_type}")

    if trait is None:
        trait_row = rng.choice(TRAITS)
    else:
        matches = [row for row in TRAITS if row[0] == trait]
        if not matches:
            raise ValueError(f"Unknown trait: {trait}")
        trait_row = matches[0]
    trait_name, hp_mod, ac_mod, to_hit_mod, damage_bump = trait_row

    hp = max(MIN_ENEMY_HP, template["hp"] + difficulty * 3 + hp_mod)
    ac = max(MIN_ENEMY_AC, template["ac"] + difficulty // 2 + ac_mod)
    to_hit = template["to_hit"] + difficulty // 2 + to_hit_mod
    lo, hi = template["damage"]

    data = {
        "name": f"{template['enemy_type']} ({trait_name}, Lv {difficulty + 1})",
        "class_name": template["enemy_type"],
        "hp": hp,
        "mp": template["mp"],
        "sp": template["sp"],
        "ac": ac,
        "to_hit": to_hit,
        "damage": (lo, hi + damage_bump),
        "attacks": template["attacks"][:MAX_LOADOUT],
        "abilities": template["abilities"],
        "affinity": template["affinity"],
        "resist": template["resist"],
        "trait": trait_name,
    }
    enemy = Combatant.from_dict(data, combatant_type=CombatantType.ENEMY)
    enemy.ai = AIMemory()
    logger.debug("Generated enemy %s hp=%s ac=%s", enemy.name, enemy.hp, enemy.ac)
    return enemy
