"""
API request / response models
"""
from .combat import (
    CombatActionRequest,
    CombatActionResponse,
    CombatStartRequest,
    CombatStartResponse,
    MoveInfo,
)

__all__ = [
    "CombatActionRequest",
    "CombatActionResponse",
    "CombatStartRequest",
    "CombatStartResponse",
    "MoveInfo",
]
