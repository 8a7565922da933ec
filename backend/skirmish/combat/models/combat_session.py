"""
Combat session data model
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .combatant import Combatant


class Side(str, Enum):
    """Whose half-turn it is"""

    PLAYER = "player"
    ENEMY = "enemy"

    @property
    def other(self) -> "Side":
        return Side.ENEMY if self == Side.PLAYER else Side.PLAYER


class CombatState(str, Enum):
    """Controller state machine"""

    PLAYER_TURN = "player-turn"
    ENEMY_TURN = "enemy-turn"
    ENDED = "ended"


class Winner(str, Enum):
    """Terminal outcome"""

    PLAYER = "player"
    ENEMY = "enemy"
    FLED = "fled"


class LogKind(str, Enum):
    """Structured log entry tags"""

    PLAYER_ATTACK = "player_attack"
    ENEMY_ATTACK = "enemy_attack"
    PLAYER_MOVE = "player_move"
    ENEMY_MOVE = "enemy_move"
    PLAYER_MOVE_FAIL = "player_move_fail"
    ENEMY_MOVE_FAIL = "enemy_move_fail"
    MOVE_EFFECT = "move_effect"
    STATUS_TICK = "status_tick"
    STATUS_END = "status_end"
    STATUS_BLOCKED = "status_blocked"
    PLAYER_DEFEND = "player_defend"
    PLAYER_ITEM = "player_item"
    PLAYER_ITEM_FAIL = "player_item_fail"
    PLAYER_FLEE = "player_flee"
    ENEMY_TAUNT = "enemy_taunt"
    COMBAT_END = "combat_end"


@dataclass
class CombatLogEntry:
    """Structured combat event"""

    seq: int
    round: int
    kind: LogKind
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "seq": self.seq, "round": self.round, **self.payload}


@dataclass
class CombatSession:
    """
    One encounter between exactly two combatants

    `log` holds the current half-turn only; `history` keeps every entry
    of the fight.
    """

    combat_id: str
    player: Combatant
    enemy: Combatant
    turn: Side = Side.PLAYER
    ended: bool = False
    winner: Optional[Winner] = None
    round: int = 1

    log: List[CombatLogEntry] = field(default_factory=list)
    history: List[CombatLogEntry] = field(default_factory=list)
    event_seq: int = 0

    damage_dealt: int = 0
    damage_taken: int = 0
    items_used: List[str] = field(default_factory=list)

    @property
    def state(self) -> CombatState:
        if self.ended:
            return CombatState.ENDED
        if self.turn == Side.PLAYER:
            return CombatState.PLAYER_TURN
        return CombatState.ENEMY_TURN

    def combatant(self, side: Side) -> Combatant:
        return self.player if side == Side.PLAYER else self.enemy

    def opponent(self, side: Side) -> Combatant:
        return self.enemy if side == Side.PLAYER else self.player

    def begin_half_turn(self):
        """Reset the per-action log"""
        self.log = []

    def add_event(self, log_kind: LogKind, **payload: Any) -> CombatLogEntry:
        """Append a structured entry to the half-turn log and the history"""
        self.event_seq += 1
        entry = CombatLogEntry(seq=self.event_seq, round=self.round, kind=log_kind, payload=payload)
        self.log.append(entry)
        self.history.append(entry)
        return entry


@dataclass
class ActionResult:
    """
    Result of one half-turn call (act_player / act_enemy)
    """

    ok: bool
    log: List[Dict[str, Any]] = field(default_factory=list)
    state: Dict[str, Any] = field(default_factory=dict)
    ended: bool = False
    winner: Optional[str] = None
    error: Optional[str] = None

    def entries(self, kind: Optional[LogKind] = None) -> List[Dict[str, Any]]:
        """Log entries, optionally filtered by kind"""
        if kind is None:
            return list(self.log)
        return [entry for entry in self.log if entry.get("type") == kind.value]

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "ok": self.ok,
            "log": self.log,
            "state": self.state,
            "ended": self.ended,
            "winner": self.winner,
        }
        if self.error:
            result["error"] = self.error
        return result
