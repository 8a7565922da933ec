"""
Combat result data model
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .combat_session import Winner


@dataclass
class CombatResult:
    """
    Final outcome of an ended session

    Returned to whoever started the fight (UI, story layer).
    """

    # ===== Basics =====
    combat_id: str
    winner: Winner
    summary: str

    # ===== Player state =====
    player_hp_remaining: int = 0
    player_max_hp: int = 0
    items_used: List[str] = field(default_factory=list)

    # ===== Full log =====
    full_log: List[Dict[str, Any]] = field(default_factory=list)

    # ===== Statistics =====
    total_rounds: int = 0
    total_damage_dealt: int = 0
    total_damage_taken: int = 0

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "combat_id": self.combat_id,
            "winner": self.winner.value,
            "summary": self.summary,
            "player_state": {
                "hp_remaining": self.player_hp_remaining,
                "max_hp": self.player_max_hp,
                "items_used": self.items_used,
            },
            "statistics": {
                "total_rounds": self.total_rounds,
                "damage_dealt": self.total_damage_dealt,
                "damage_taken": self.total_damage_taken,
            },
        }
        if self.full_log:
            result["full_log"] = self.full_log
        return result

    def to_display_text(self) -> str:
        lines = [self.summary]
        lines.append(f"HP: {self.player_hp_remaining}/{self.player_max_hp}")
        if self.items_used:
            lines.append("Items used: " + ", ".join(self.items_used))
        return "\n".join(lines)
