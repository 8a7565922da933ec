"""
Move and effect data models
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..elements import Element
from .status import StatusKey


class CostPool(str, Enum):
    """Resource pool a move draws from"""

    MP = "MP"
    SP = "SP"


class MoveKind(str, Enum):
    """Move category (drives the enemy policy)"""

    ATTACK = "attack"
    BUFF = "buff"
    DEBUFF = "debuff"
    HEAL = "heal"
    UTILITY = "utility"


class MoveTarget(str, Enum):
    """Who a move lands on"""

    SELF = "self"
    ENEMY = "enemy"


class EffectType(str, Enum):
    """Effect variant tag"""

    DAMAGE = "damage"
    HEAL = "heal"
    APPLY_STATUS = "apply_status"


def _number(value: Any, default: float = 0) -> float:
    """Permissive numeric read: missing or non-numeric -> default"""
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class RollSpec:
    """
    Random roll with optional stat scaling

    total = randint(min, max) + sum(floor(stat * coefficient) for each add)

    `stat` + `scale` is the older single-pair format and is added on top of
    `adds` when present.
    """

    min: int = 0
    max: int = 0
    adds: Tuple[Tuple[str, float], ...] = ()
    stat: Optional[str] = None
    scale: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "RollSpec":
        data = data or {}
        adds = data.get("adds") or {}
        if not isinstance(adds, Mapping):
            raise ValueError(f"Roll adds must be a mapping, got {type(adds).__name__}")
        lo = int(_number(data.get("min")))
        hi = int(_number(data.get("max")))
        stat = data.get("stat")
        return cls(
            min=lo,
            max=max(lo, hi),
            adds=tuple((str(k).upper(), _number(v)) for k, v in adds.items()),
            stat=str(stat).upper() if stat else None,
            scale=_number(data.get("scale")),
        )

    @property
    def mean(self) -> float:
        return (self.min + self.max) / 2

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"min": self.min, "max": self.max}
        if self.adds:
            result["adds"] = dict(self.adds)
        if self.stat:
            result["stat"] = self.stat
            result["scale"] = self.scale
        return result


@dataclass(frozen=True)
class Cost:
    """Move resource cost"""

    pool: CostPool = CostPool.SP
    amount: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"pool": self.pool.value, "amount": self.amount}


@dataclass(frozen=True)
class DamageEffect:
    roll: RollSpec
    type: EffectType = field(default=EffectType.DAMAGE, init=False)


@dataclass(frozen=True)
class HealEffect:
    roll: RollSpec
    type: EffectType = field(default=EffectType.HEAL, init=False)


@dataclass(frozen=True)
class ApplyStatusEffect:
    """
    Install a status instance on the move target

    turns=None means infinite. `chance` is the trigger probability (None
    means always).
    """

    key: StatusKey
    turns: Optional[int] = 1
    persistent: bool = False
    data: Tuple[Tuple[str, Any], ...] = ()
    chance: Optional[float] = None
    type: EffectType = field(default=EffectType.APPLY_STATUS, init=False)

    @property
    def payload(self) -> Dict[str, Any]:
        return dict(self.data)


Effect = Union[DamageEffect, HealEffect, ApplyStatusEffect]


@dataclass(frozen=True)
class Move:
    """
    Catalog move (immutable)
    """

    id: str
    name: str
    description: str
    element: Element
    kind: MoveKind
    target: MoveTarget
    cost: Cost
    effects: Tuple[Effect, ...] = ()
    on_hit: Tuple[Effect, ...] = ()
    to_hit_bonus: int = 0

    @property
    def all_effects(self) -> Tuple[Effect, ...]:
        return self.effects + self.on_hit

    def has_damage(self) -> bool:
        return any(isinstance(effect, DamageEffect) for effect in self.all_effects)

    def needs_to_hit_roll(self) -> bool:
        """Only enemy-targeted moves carrying damage roll to hit"""
        return self.target == MoveTarget.ENEMY and self.has_damage()

    def status_keys(self) -> Tuple[StatusKey, ...]:
        return tuple(
            effect.key for effect in self.all_effects if isinstance(effect, ApplyStatusEffect)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict (for the API / UI)"""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "element": self.element.value,
            "kind": self.kind.value,
            "target": self.target.value,
            "to_hit_bonus": self.to_hit_bonus,
            "cost": self.cost.to_dict(),
        }
