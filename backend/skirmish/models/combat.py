"""
Combat API models.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MoveInfo(BaseModel):
    """Catalog move as shown to clients"""
    id: str
    name: str
    description: str = ""
    element: str
    kind: str
    target: str
    to_hit_bonus: int = 0
    cost: Dict[str, Any] = Field(default_factory=dict)


class CombatStartRequest(BaseModel):
    """
    Start combat request.

    Either pass full combatant dicts (`player` + `enemy`) or build them
    from templates (`player_class` + optional `enemy_type`). `moves` picks
    the player's basics from the class pool.
    """
    player: Optional[Dict[str, Any]] = None
    enemy: Optional[Dict[str, Any]] = None
    player_class: Optional[str] = None
    player_name: Optional[str] = None
    enemy_type: Optional[str] = None
    difficulty: int = Field(default=0, ge=0)
    moves: Optional[List[str]] = None
    seed: Optional[int] = None


class CombatStartResponse(BaseModel):
    """Start combat response."""
    combat_id: str
    state: Dict[str, Any]


class CombatActionRequest(BaseModel):
    """Player action request."""
    action: str
    arg: Optional[str] = None


class CombatActionResponse(BaseModel):
    """Half-turn result."""
    ok: bool
    error: Optional[str] = None
    log: List[Dict[str, Any]] = Field(default_factory=list)
    state: Dict[str, Any] = Field(default_factory=dict)
    ended: bool = False
    winner: Optional[str] = None
