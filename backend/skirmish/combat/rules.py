"""
Combat rules

Constants, class templates and the player builder.
"""
import random
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .models.combatant import Combatant, CombatantType
from .moves import DEFAULT_ABILITIES_BY_CLASS, DEFAULT_ATTACKS_BY_CLASS, get_basic_move_pool


# ============================================
# Constants
# ============================================

CRITICAL_HIT_ROLL = 20
CRITICAL_MISS_ROLL = 1

# Flee DC = FLEE_DC_BASE + floor(opponent AC / FLEE_AC_DIVISOR)
FLEE_DC_BASE = 12
FLEE_AC_DIVISOR = 5

# Potion heal, uniform over the range
POTION_ITEM = "potion"
POTION_HEAL = (4, 10)

DEFEND_PCT = 0.5
DEFEND_TURNS = 1
WOUNDED_PCT = 0.25
DEFAULT_AC_UP = 2
DEFAULT_SLOWED_DELTA = -2

MAX_LOADOUT = 4

# Enemy policy
TAUNT_CHANCE = 0.10
HEAL_HP_THRESHOLD = 0.5
BUFF_WINDOW = (0, 2)
CATEGORY_WEIGHTS: Mapping[str, int] = MappingProxyType({"attack": 8, "debuff": 3, "utility": 1})
ATTACK_COST_WEIGHT = 0.5

PLAYER_ACTIONS = ("attack", "move", "defend", "item", "flee")


# ============================================
# Class templates
# ============================================

CLASS_TEMPLATES: Mapping[str, Dict[str, Any]] = MappingProxyType(
    {
        "Warrior": {
            "stats": {"STR": 3, "INT": 0, "CHA": 1, "CON": 2, "DEX": 1},
            "hp": 26,
            "ac": 14,
            "to_hit": 5,
            "damage": (3, 10),
            "mp": 0,
            "sp": 10,
        },
        "Cleric": {
            "stats": {"STR": 1, "INT": 1, "CHA": 2, "CON": 1, "DEX": 0},
            "hp": 22,
            "ac": 13,
            "to_hit": 4,
            "damage": (2, 8),
            "mp": 8,
            "sp": 4,
        },
        "Wizard": {
            "stats": {"STR": 0, "INT": 3, "CHA": 1, "CON": 0, "DEX": 1},
            "hp": 18,
            "ac": 12,
            "to_hit": 5,
            "damage": (2, 10),
            "mp": 10,
            "sp": 3,
        },
        "Shambling Fool": {
            "stats": {"STR": 0, "INT": 0, "CHA": 4, "CON": 1, "DEX": 2},
            "hp": 20,
            "ac": 11,
            "to_hit": 3,
            "damage": (1, 6),
            "mp": 2,
            "sp": 8,
        },
    }
)

NAME_PREFIXES = ("Bel", "Ash", "Mor", "Ka", "El", "Yor", "Thal", "Ren", "Ruth", "Luk", "Jer", "Tim", "Jo")
NAME_SUFFIXES = ("dor", "rin", "th", "mar", "ion", "vis", "ael", "en", "os", "rak", "ith", "mey", "bor")


def random_name(rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    return rng.choice(NAME_PREFIXES) + rng.choice(NAME_SUFFIXES)


def create_player(
    class_name: str,
    name: Optional[str] = None,
    rng: Optional[random.Random] = None,
    moves: Optional[Sequence[str]] = None,
) -> Combatant:
    """
    Build a fresh player from a class template

    Without `moves` the first four default attacks of the class become the
    loadout. With `moves` the player picks one to four distinct basics
    from the class's basic move pool instead. The inventory starts with
    one potion.

    Raises:
        ValueError: unknown class, or a pick outside the basic pool
    """
    template = CLASS_TEMPLATES.get(class_name)
    if template is None:
        raise ValueError(
            f"Unknown class '{class_name}', expected one of {', '.join(CLASS_TEMPLATES)}"
        )
    if moves is None:
        attacks = list(DEFAULT_ATTACKS_BY_CLASS.get(class_name, ()))[:MAX_LOADOUT]
    else:
        attacks = validate_basic_picks(class_name, moves)
    data = {
        "name": (name or "").strip() or random_name(rng),
        "class_name": class_name,
        "hp": template["hp"],
        "mp": template["mp"],
        "sp": template["sp"],
        "ac": template["ac"],
        "to_hit": template["to_hit"],
        "damage": template["damage"],
        "stats": template["stats"],
        "attacks": attacks,
        "abilities": list(DEFAULT_ABILITIES_BY_CLASS.get(class_name, ())),
        "inventory": [POTION_ITEM],
    }
    return Combatant.from_dict(data, combatant_type=CombatantType.PLAYER)


def validate_basic_picks(class_name: str, moves: Sequence[str]) -> List[str]:
    """
    Check a player's basic move picks against the class pool

    Raises:
        ValueError: empty or oversized pick, duplicates, moves outside the pool
    """
    picks = [str(move_id).strip() for move_id in moves if str(move_id).strip()]
    if not picks or len(picks) > MAX_LOADOUT:
        raise ValueError(f"Pick between 1 and {MAX_LOADOUT} basic moves")
    if len(set(picks)) != len(picks):
        raise ValueError("Basic moves must be distinct")
    pool = get_basic_move_pool(class_name)
    outside = [move_id for move_id in picks if move_id not in pool]
    if outside:
        raise ValueError(
            f"{class_name} can't pick {', '.join(outside)}; choose from {', '.join(pool)}"
        )
    return picks


def flee_difficulty(opponent_ac: int) -> int:
    """DC for a flee check against an opponent"""
    return FLEE_DC_BASE + opponent_ac // FLEE_AC_DIVISOR

