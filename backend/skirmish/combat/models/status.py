"""
Status effect keys
"""
from enum import Enum


class StatusKey(str, Enum):
    """Closed set of status keys (one instance per key per combatant)"""

    DEFENDING = "defending"
    WOUNDED = "wounded"
    POISON = "poison"
    BLEEDING = "bleeding"
    BURNING = "burning"
    REGEN = "regen"
    STUNNED = "stunned"
    FROZEN = "frozen"
    SLOWED = "slowed"
    AC_UP = "ac_up"
    ENCHANT = "enchant"


_ALIASES = {
    "acup": StatusKey.AC_UP,
    "poisoned": StatusKey.POISON,
    "bleed": StatusKey.BLEEDING,
    "burn": StatusKey.BURNING,
    "stun": StatusKey.STUNNED,
}


def parse_status_key(value) -> StatusKey:
    """
    Parse a status key, accepting a few legacy spellings

    Raises:
        ValueError: unknown status key
    """
    if isinstance(value, StatusKey):
        return value
    text = str(value or "").strip()
    try:
        return StatusKey(text)
    except ValueError:
        pass
    alias = _ALIASES.get(text.lower().replace("_", ""))
    if alias is None:
        raise ValueError(f"Unknown status key: {value}")
    return alias
