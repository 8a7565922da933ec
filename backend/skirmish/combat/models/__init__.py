"""Data models for the combat system."""

from .status import StatusKey, parse_status_key
from .action import (
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
from .combatant import AIMemory, Combatant, CombatantType, StatusEffectInstance
from .combat_session import (
    ActionResult,
    CombatLogEntry,
    CombatSession,
    CombatState,
    LogKind,
    Side,
    Winner,
)
from .combat_result import CombatResult

__all__ = [
    "StatusKey",
    "parse_status_key",
    "ApplyStatusEffect",
    "Cost",
    "CostPool",
    "DamageEffect",
    "Effect",
    "EffectType",
    "HealEffect",
    "Move",
    "MoveKind",
    "MoveTarget",
    "RollSpec",
    "AIMemory",
    "Combatant",
    "CombatantType",
    "StatusEffectInstance",
    "ActionResult",
    "CombatLogEntry",
    "CombatSession",
    "CombatState",
    "LogKind",
    "Side",
    "Winner",
    "CombatResult",
]
