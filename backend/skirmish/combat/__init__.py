"""Combat system package."""

from .combat_engine import CombatController, CombatEngine

__all__ = ["CombatController", "CombatEngine"]
