"""
Combatant data model
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..elements import Element, parse_element
from .action import CostPool, RollSpec
from .status import StatusKey, parse_status_key

logger = logging.getLogger(__name__)

STAT_KEYS: Tuple[str, ...] = ("STR", "INT", "CHA", "CON", "DEX")
STAT_MIN = -3
STAT_MAX = 20


class CombatantType(str, Enum):
    """Combatant side"""

    PLAYER = "player"
    ENEMY = "enemy"


@dataclass
class StatusEffectInstance:
    """
    Status instance held in a combatant's status map

    turns=None means infinite. Behavior fields are read by the matching
    StatusBehavior; unset fields fall back to that behavior's defaults.
    """

    turns: Optional[int] = 1
    persistent: bool = False
    pct: Optional[float] = None
    flat: int = 0
    ac_delta: Optional[int] = None
    to_hit_delta: Optional[int] = None
    damage: int = 0
    heal: Optional[RollSpec] = None
    element: Optional[Element] = None
    source: str = ""

    @classmethod
    def from_payload(
        cls,
        turns: Optional[int] = 1,
        persistent: bool = False,
        data: Optional[Mapping[str, Any]] = None,
        source: str = "",
    ) -> "StatusEffectInstance":
        """Build an instance from an effect payload (camelCase keys accepted)"""
        data = dict(data or {})
        pct = data.get("pct")
        if pct is None and data.get("dmgMult") is not None:
            pct = 1 - float(data["dmgMult"])
        ac_delta = data.get("ac_delta", data.get("acDelta"))
        to_hit_delta = data.get("to_hit_delta", data.get("toHitDelta"))
        heal = data.get("heal")
        element = data.get("element")
        return cls(
            turns=turns,
            persistent=bool(persistent),
            pct=float(pct) if pct is not None else None,
            flat=int(data.get("flat") or 0),
            ac_delta=int(ac_delta) if ac_delta is not None else None,
            to_hit_delta=int(to_hit_delta) if to_hit_delta is not None else None,
            damage=int(data.get("damage") or 0),
            heal=heal if isinstance(heal, RollSpec) else (RollSpec.from_dict(heal) if heal else None),
            element=parse_element(element) if element else None,
            source=source,
        )

    @property
    def is_infinite(self) -> bool:
        return self.turns is None

    def tick(self) -> bool:
        """
        Decrement remaining turns

        Returns:
            bool: expired (persistent/infinite instances never expire)
        """
        if self.persistent or self.is_infinite:
            return False
        self.turns -= 1
        return self.turns <= 0

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"turns": self.turns, "persistent": self.persistent}
        if self.pct is not None:
            result["pct"] = self.pct
        if self.flat:
            result["flat"] = self.flat
        if self.ac_delta is not None:
            result["ac_delta"] = self.ac_delta
        if self.to_hit_delta is not None:
            result["to_hit_delta"] = self.to_hit_delta
        if self.damage:
            result["damage"] = self.damage
        if self.heal is not None:
            result["heal"] = self.heal.to_dict()
        if self.element is not None:
            result["element"] = self.element.value
        return result


@dataclass
class AIMemory:
    """Enemy policy memory"""

    turns_taken: int = 0
    last_buff_turn: int = 0


@dataclass
class Combatant:
    """
    Combat unit (player or enemy)

    The controller mutates this object in place; callers keep their
    reference and see the results after the fight.
    """

    # ===== Identity =====
    name: str
    class_name: str
    combatant_type: CombatantType

    # ===== Pools =====
    hp: int
    max_hp: int
    mp: int = 0
    max_mp: int = 0
    sp: int = 0
    max_sp: int = 0

    # ===== Combat stats =====
    ac: int = 10
    to_hit: int = 0
    damage: Tuple[int, int] = (1, 4)

    # ===== Attributes =====
    stats: Dict[str, int] = field(default_factory=lambda: {key: 0 for key in STAT_KEYS})

    # ===== Loadout =====
    attacks: List[str] = field(default_factory=list)
    abilities: List[str] = field(default_factory=list)
    inventory: List[str] = field(default_factory=list)

    # ===== Status / elements =====
    status: Dict[StatusKey, StatusEffectInstance] = field(default_factory=dict)
    affinity: Element = Element.PHYSICAL
    resist: Dict[Element, float] = field(default_factory=dict)

    # ===== Enemy only =====
    ai: Optional[AIMemory] = None
    trait: Optional[str] = None

    # ===== Convenience =====

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    @property
    def hp_fraction(self) -> float:
        if self.max_hp <= 0:
            return 0.0
        return self.hp / self.max_hp

    def stat(self, key: Optional[str]) -> int:
        if not key:
            return 0
        return int(self.stats.get(key.upper(), 0))

    def pool(self, pool: CostPool) -> int:
        return self.mp if pool == CostPool.MP else self.sp

    def spend(self, pool: CostPool, amount: int) -> bool:
        """
        Deduct a move cost

        Returns:
            bool: False (and nothing deducted) when the pool is short
        """
        if amount <= 0:
            return True
        if self.pool(pool) < amount:
            return False
        if pool == CostPool.MP:
            self.mp -= amount
        else:
            self.sp -= amount
        self.clamp_resources()
        return True

    def take_damage(self, amount: int) -> int:
        """
        Take damage

        Returns:
            int: damage actually removed (never negative)
        """
        amount = max(0, int(amount))
        actual = min(amount, self.hp)
        self.hp -= actual
        self.clamp_resources()
        return actual

    def heal(self, amount: int) -> int:
        """
        Restore HP up to the maximum

        Returns:
            int: HP actually restored
        """
        before = self.hp
        self.hp = min(self.max_hp, self.hp + max(0, int(amount)))
        self.clamp_resources()
        return self.hp - before

    def clamp_resources(self):
        """Enforce 0 <= current <= maximum on all three pools"""
        self.max_hp = max(0, self.max_hp)
        self.max_mp = max(0, self.max_mp)
        self.max_sp = max(0, self.max_sp)
        self.hp = min(max(0, self.hp), self.max_hp)
        self.mp = min(max(0, self.mp), self.max_mp)
        self.sp = min(max(0, self.sp), self.max_sp)

    def has_status(self, key: StatusKey) -> bool:
        return key in self.status

    def add_status(self, key: StatusKey, instance: StatusEffectInstance):
        """Install or overwrite a status instance"""
        self.status[key] = instance

    def remove_status(self, key: StatusKey) -> Optional[StatusEffectInstance]:
        return self.status.pop(key, None)

    def loadout(self) -> List[str]:
        """Attacks then abilities, without duplicates"""
        seen = []
        for move_id in [*self.attacks, *self.abilities]:
            if move_id not in seen:
                seen.append(move_id)
        return seen

    def to_dict(self) -> Dict[str, Any]:
        """Public projection (used by the state snapshot)"""
        return {
            "name": self.name,
            "class": self.class_name,
            "type": self.combatant_type.value,
            "HP": self.hp,
            "maxHP": self.max_hp,
            "MP": self.mp,
            "maxMP": self.max_mp,
            "SP": self.sp,
            "maxSP": self.max_sp,
            "AC": self.ac,
            "to_hit": self.to_hit,
            "damage": list(self.damage),
            "stats": dict(self.stats),
            "attacks": list(self.attacks),
            "abilities": list(self.abilities),
            "inventory": list(self.inventory),
            "status": {key.value: inst.to_dict() for key, inst in self.status.items()},
            "affinity": self.affinity.value,
            "resist": {element.value: value for element, value in self.resist.items()},
            "trait": self.trait,
        }

    # ===== Builder =====

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], combatant_type: Optional[CombatantType] = None
    ) -> "Combatant":
        """
        Validated construction from a plain dict

        Accepts both the engine's field names and the browser save format's
        uppercase keys (HP, maxHP, AC, ...). Missing pools default to 0,
        missing maxima default to the current value.

        Raises:
            ValueError: malformed input (bad types, stats out of range,
                unknown moves / elements / status keys)
        """
        from ..moves import get_move_by_id

        if not isinstance(data, Mapping):
            raise ValueError("Combatant data must be a mapping")

        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("Combatant name is required")

        if combatant_type is None:
            combatant_type = CombatantType(str(data.get("combatant_type") or "player"))

        hp = _read_int(data, ("hp", "HP"), required=True)
        max_hp = _read_int(data, ("max_hp", "maxHP"), default=hp)
        mp = _read_int(data, ("mp", "MP"), default=0)
        max_mp = _read_int(data, ("max_mp", "maxMP"), default=mp)
        sp = _read_int(data, ("sp", "SP"), default=0)
        max_sp = _read_int(data, ("max_sp", "maxSP"), default=sp)
        if max_hp <= 0:
            raise ValueError(f"{name}: max HP must be positive")

        raw_stats = data.get("stats") or {}
        if not isinstance(raw_stats, Mapping):
            raise ValueError(f"{name}: stats must be a mapping")
        stats = {}
        for key in STAT_KEYS:
            value = _read_int(raw_stats, (key,), default=None)
            if value is None:
                value = _read_int(data, (key,), default=0)
            if not STAT_MIN <= value <= STAT_MAX:
                raise ValueError(f"{name}: {key}={value} outside [{STAT_MIN}, {STAT_MAX}]")
            stats[key] = value

        damage = data.get("damage", (1, 4))
        if (
            not isinstance(damage, (list, tuple))
            or len(damage) != 2
            or not all(_is_number(v) for v in damage)
        ):
            raise ValueError(f"{name}: damage must be a [min, max] pair")
        lo, hi = int(damage[0]), int(damage[1])
        if lo < 0 or hi < lo:
            raise ValueError(f"{name}: invalid damage range {damage}")

        attacks = _read_id_list(data, "attacks", name)
        abilities = _read_id_list(data, "abilities", name)
        for move_id in [*attacks, *abilities]:
            if get_move_by_id(move_id) is None:
                raise ValueError(f"{name}: unknown move id '{move_id}'")

        inventory = _read_id_list(data, "inventory", name)

        affinity = parse_element(data.get("affinity"), default=Element.PHYSICAL)
        resist: Dict[Element, float] = {}
        raw_resist = data.get("resist") or {}
        if not isinstance(raw_resist, Mapping):
            raise ValueError(f"{name}: resist must be a mapping")
        for element_name, value in raw_resist.items():
            if not _is_number(value):
                raise ValueError(f"{name}: resist value for {element_name} must be numeric")
            multiplier = float(value)
            if multiplier < 0:
                logger.warning(
                    "%s: negative resist %s=%s clamped to 0", name, element_name, multiplier
                )
                multiplier = 0.0
            resist[parse_element(element_name)] = multiplier

        status: Dict[StatusKey, StatusEffectInstance] = {}
        raw_status = data.get("status") or {}
        if not isinstance(raw_status, Mapping):
            raise ValueError(f"{name}: status must be a mapping")
        for key, value in raw_status.items():
            status_key = parse_status_key(key)
            if isinstance(value, StatusEffectInstance):
                status[status_key] = value
            elif _is_number(value):
                status[status_key] = StatusEffectInstance(turns=int(value))
            elif isinstance(value, Mapping):
                turns = value.get("turns", 1)
                if turns == "infinite":
                    turns = None
                elif turns is not None and not _is_number(turns):
                    raise ValueError(f"{name}: status '{key}' turns must be numeric")
                status[status_key] = StatusEffectInstance.from_payload(
                    turns=int(turns) if turns is not None else None,
                    persistent=bool(value.get("persistent", False)),
                    data=value,
                )
            else:
                raise ValueError(f"{name}: malformed status entry '{key}'")

        ai = None
        raw_ai = data.get("ai")
        if isinstance(raw_ai, AIMemory):
            ai = raw_ai
        elif isinstance(raw_ai, Mapping):
            ai = AIMemory(
                turns_taken=_read_int(raw_ai, ("turns_taken", "turnsTaken"), default=0),
                last_buff_turn=_read_int(raw_ai, ("last_buff_turn", "lastBuffTurn"), default=0),
            )

        combatant = cls(
            name=name,
            class_name=str(data.get("class_name") or data.get("class") or data.get("type") or ""),
            combatant_type=combatant_type,
            hp=hp,
            max_hp=max_hp,
            mp=mp,
            max_mp=max_mp,
            sp=sp,
            max_sp=max_sp,
            ac=_read_int(data, ("ac", "AC"), default=10),
            to_hit=_read_int(data, ("to_hit", "toHit"), default=0),
            damage=(lo, hi),
            stats=stats,
            attacks=attacks,
            abilities=abilities,
            inventory=inventory,
            status=status,
            affinity=affinity,
            resist=resist,
            ai=ai,
            trait=data.get("trait"),
        )
        combatant.clamp_resources()
        return combatant


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _read_int(
    data: Mapping[str, Any], keys: Tuple[str, ...], default: Optional[int] = 0, required: bool = False
) -> Optional[int]:
    for key in keys:
        if key in data and data[key] is not None:
            value = data[key]
            if not _is_number(value):
                raise ValueError(f"Field '{key}' must be numeric, got {value!r}")
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(f"Field '{key}' must be a whole number, got {value!r}")
            return int(value)
    if required:
        raise ValueError(f"Missing required field: {'/'.join(keys)}")
    return default


def _read_id_list(data: Mapping[str, Any], key: str, name: str) -> List[str]:
    value = data.get(key) or []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{name}: {key} must be a list")
    return [str(item) for item in value]
