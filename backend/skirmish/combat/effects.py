"""
Status effect registry

One StatusBehavior per status key. The controller looks behaviors up by
key and calls whichever hooks they override; the base class hooks are
identities.
"""
import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, List, Mapping, Optional

from .models.combatant import Combatant, StatusEffectInstance
from .models.combat_session import LogKind
from .models.status import StatusKey
from .rules import DEFAULT_AC_UP, DEFAULT_SLOWED_DELTA, DEFEND_PCT, WOUNDED_PCT

if TYPE_CHECKING:
    from .combat_engine import CombatController

logger = logging.getLogger(__name__)

LogFn = Callable[..., object]


class StatusBehavior:
    """
    Hooks a status instance may contribute to the turn pipeline

    Subclasses override only what they need.
    """

    key: StatusKey
    blocks_action: bool = False
    consume_on_hit: bool = False

    def on_tick(
        self,
        entity: Combatant,
        controller: "CombatController",
        who: str,
        instance: StatusEffectInstance,
        log: LogFn,
    ) -> None:
        """Called once per owner's turn-start tick"""

    def modify_outgoing_damage(self, amount: float, instance: StatusEffectInstance) -> float:
        return amount

    def modify_incoming_damage(self, amount: float, instance: StatusEffectInstance) -> float:
        return amount

    def modify_ac(self, base_ac: int, instance: StatusEffectInstance) -> int:
        return base_ac

    def modify_to_hit(self, base_delta: int, instance: StatusEffectInstance) -> int:
        return base_delta


class DamageOverTime(StatusBehavior):
    """poison / bleeding / burning: lose `damage` HP each tick"""

    def __init__(self, key: StatusKey):
        self.key = key

    def on_tick(self, entity, controller, who, instance, log):
        dealt = entity.take_damage(max(0, instance.damage))
        log(LogKind.STATUS_TICK, who=who, key=self.key.value, kind="damage", amount=dealt)


class Regen(StatusBehavior):
    key = StatusKey.REGEN

    def on_tick(self, entity, controller, who, instance, log):
        amount = controller.roll_scaled(instance.heal, entity)
        healed = entity.heal(amount)
        log(LogKind.STATUS_TICK, who=who, key=self.key.value, kind="heal", amount=healed)


class ControlLock(StatusBehavior):
    """stunned / frozen: the bearer loses its action"""

    blocks_action = True

    def __init__(self, key: StatusKey):
        self.key = key

    def on_tick(self, entity, controller, who, instance, log):
        log(LogKind.STATUS_TICK, who=who, key=self.key.value, kind="info", amount=0)


class Defending(StatusBehavior):
    key = StatusKey.DEFENDING
    consume_on_hit = True

    def modify_incoming_damage(self, amount, instance):
        pct = DEFEND_PCT if instance.pct is None else instance.pct
        return amount * (1 - pct)


class Wounded(StatusBehavior):
    key = StatusKey.WOUNDED

    def modify_outgoing_damage(self, amount, instance):
        pct = WOUNDED_PCT if instance.pct is None else instance.pct
        return amount * (1 - pct) - instance.flat


class AcUp(StatusBehavior):
    key = StatusKey.AC_UP

    def modify_ac(self, base_ac, instance):
        delta = DEFAULT_AC_UP if instance.ac_delta is None else instance.ac_delta
        return base_ac + delta


class Slowed(StatusBehavior):
    key = StatusKey.SLOWED

    def modify_to_hit(self, base_delta, instance):
        delta = DEFAULT_SLOWED_DELTA if instance.to_hit_delta is None else instance.to_hit_delta
        return base_delta + delta


class Enchant(StatusBehavior):
    """Carries an element override read by the strike resolver"""

    key = StatusKey.ENCHANT


STATUS_REGISTRY: Mapping[StatusKey, StatusBehavior] = MappingProxyType(
    {
        StatusKey.POISON: DamageOverTime(StatusKey.POISON),
        StatusKey.BLEEDING: DamageOverTime(StatusKey.BLEEDING),
        StatusKey.BURNING: DamageOverTime(StatusKey.BURNING),
        StatusKey.REGEN: Regen(),
        StatusKey.STUNNED: ControlLock(StatusKey.STUNNED),
        StatusKey.FROZEN: ControlLock(StatusKey.FROZEN),
        StatusKey.DEFENDING: Defending(),
        StatusKey.WOUNDED: Wounded(),
        StatusKey.AC_UP: AcUp(),
        StatusKey.SLOWED: Slowed(),
        StatusKey.ENCHANT: Enchant(),
    }
)


def get_status_behavior(key: StatusKey) -> Optional[StatusBehavior]:
    return STATUS_REGISTRY.get(key)


def blocking_statuses(combatant: Combatant) -> List[StatusKey]:
    """Status keys on the combatant that prevent it from acting"""
    blocked = []
    for key in combatant.status:
        behavior = get_status_behavior(key)
        if behavior is not None and behavior.blocks_action:
            blocked.append(key)
    return blocked
