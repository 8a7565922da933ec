"""
Elemental multiplier matrix

attacker element x defender affinity -> damage multiplier
"""
import logging
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Optional

if TYPE_CHECKING:
    from .models.combatant import Combatant

logger = logging.getLogger(__name__)


class Element(str, Enum):
    """Damage element / combatant affinity"""

    PHYSICAL = "Physical"
    FIRE = "Fire"
    ICE = "Ice"
    LIGHTNING = "Lightning"
    HOLY = "Holy"
    POISON = "Poison"


DEFAULT_MULTIPLIER = 1.0

# Row = attacking element, key = defender affinity.
# Unlisted affinities fall back to the row default.
ELEMENT_MATRIX: Mapping[Element, Mapping[str, float]] = MappingProxyType(
    {
        Element.PHYSICAL: MappingProxyType({"default": 1.0}),
        Element.FIRE: MappingProxyType(
            {Element.ICE.value: 1.5, Element.FIRE.value: 0.5, "default": 1.0}
        ),
        Element.ICE: MappingProxyType(
            {
                Element.LIGHTNING.value: 1.5,
                Element.ICE.value: 0.5,
                Element.FIRE.value: 0.5,
                "default": 1.0,
            }
        ),
        Element.LIGHTNING: MappingProxyType(
            {Element.ICE.value: 1.5, Element.LIGHTNING.value: 0.5, "default": 1.0}
        ),
        Element.HOLY: MappingProxyType(
            {Element.POISON.value: 1.5, Element.HOLY.value: 0.5, "default": 1.0}
        ),
        Element.POISON: MappingProxyType(
            {Element.HOLY.value: 0.5, Element.POISON.value: 0.5, "default": 1.0}
        ),
    }
)


def parse_element(value, default: Optional[Element] = None) -> Element:
    """
    Parse an element name (case-insensitive)

    Raises:
        ValueError: unknown element and no default given
    """
    if isinstance(value, Element):
        return value
    if value is None or value == "":
        if default is None:
            raise ValueError("Element is required")
        return default
    text = str(value).strip()
    for element in Element:
        if element.value.lower() == text.lower() or element.name.lower() == text.lower():
            return element
    raise ValueError(f"Unknown element: {value}")


def get_element_multiplier(
    attacker: Optional["Combatant"], target: "Combatant", element: Optional[Element]
) -> float:
    """
    Resolve the damage multiplier for a strike

    Resolution order:
    1. explicit per-target resist override
    2. matrix row entry for the target's affinity
    3. row default (1.0 when the element has no row)

    Negative values are treated as data defects and clamped to 0.
    """
    element = element or Element.PHYSICAL

    override = target.resist.get(element)
    if override is not None:
        return max(0.0, float(override))

    row = ELEMENT_MATRIX.get(element)
    if row is None:
        return DEFAULT_MULTIPLIER

    affinity = target.affinity.value if target.affinity else None
    if affinity is not None and affinity in row:
        return max(0.0, row[affinity])

    return max(0.0, row.get("default", DEFAULT_MULTIPLIER))
