"""
Combat engine

CombatController runs one player-vs-enemy encounter as a turn state
machine; CombatEngine keeps the live controllers keyed by combat id.
"""
import logging
import math
import random
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from .ai_opponent import OpponentAI
from .dice import DiceRoller
from .effects import blocking_statuses, get_status_behavior
from .elements import Element, get_element_multiplier
from .enemy_registry import create_enemy
from .models.action import (
    ApplyStatusEffect,
    DamageEffect,
    Effect,
    HealEffect,
    Move,
    MoveTarget,
    RollSpec,
)
from .models.combatant import AIMemory, Combatant, CombatantType, StatusEffectInstance
from .models.combat_result import CombatResult
from .models.combat_session import (
    ActionResult,
    CombatSession,
    LogKind,
    Side,
    Winner,
)
from .models.status import StatusKey
from .moves import get_move_by_id, list_moves_by_ids
from .rules import (
    CRITICAL_HIT_ROLL,
    CRITICAL_MISS_ROLL,
    DEFEND_PCT,
    DEFEND_TURNS,
    MAX_LOADOUT,
    PLAYER_ACTIONS,
    POTION_HEAL,
    POTION_ITEM,
    create_player,
    flee_difficulty,
)

logger = logging.getLogger(__name__)

CombatantInput = Union[Combatant, Mapping[str, Any]]


@dataclass
class ToHitRoll:
    """Outcome of one d20 to-hit check"""

    roll: int
    total: int
    ac: int
    hit: bool
    crit: bool
    fumble: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roll": self.roll,
            "total": self.total,
            "ac": self.ac,
            "hit": self.hit,
            "crit": self.crit,
            "fumble": self.fumble,
        }


class CombatController:
    """
    One encounter between a player and an enemy

    The controller holds the caller's Combatant objects and mutates them
    in place. Each public act_* call runs a whole half-turn and returns an
    ActionResult; failures come back as log entries or ok=False, never as
    exceptions.
    """

    def __init__(
        self,
        player: Combatant,
        enemy: Combatant,
        rng: Optional[random.Random] = None,
        combat_id: Optional[str] = None,
    ):
        self.dice = DiceRoller(rng)
        self.ai = OpponentAI(self.dice)
        self.session = CombatSession(
            combat_id=combat_id or f"combat_{uuid.uuid4().hex[:8]}",
            player=player,
            enemy=enemy,
        )
        self._normalize()
        logger.info(
            "Combat %s started: %s vs %s", self.session.combat_id, player.name, enemy.name
        )

    # ============================================
    # Public interface
    # ============================================

    @property
    def combat_id(self) -> str:
        return self.session.combat_id

    @property
    def player(self) -> Combatant:
        return self.session.player

    @property
    def enemy(self) -> Combatant:
        return self.session.enemy

    @property
    def ended(self) -> bool:
        return self.session.ended

    @property
    def winner(self) -> Optional[Winner]:
        return self.session.winner

    def act_player(self, action_key: str, arg: Optional[str] = None) -> ActionResult:
        """
        Run the player's half-turn

        Args:
            action_key: "attack" | "move" | "defend" | "item" | "flee"
            arg: move id for "move", item id for "item"

        Flow:
        1. reject when ended / out of turn / unknown action
        2. tick the player's statuses (DoT can end the fight here)
        3. a blocking status skips the action
        4. dispatch the action
        5. pass the turn unless the fight ended
        """
        if self.session.ended:
            return self._reject("Combat has ended")
        if self.session.turn != Side.PLAYER:
            return self._reject("Not the player's turn")
        if action_key not in PLAYER_ACTIONS:
            return self._reject(f"Unknown action: {action_key}")

        self.session.begin_half_turn()
        if not self._start_turn(Side.PLAYER):
            return self._result()

        if action_key == "attack":
            self._basic_attack(Side.PLAYER)
        elif action_key == "move":
            self._use_move(Side.PLAYER, arg)
        elif action_key == "defend":
            self._defend()
        elif action_key == "item":
            self._use_item(arg)
        else:
            self._flee()

        if not self.session.ended:
            self._pass_turn(Side.PLAYER)
        return self._result()

    def act_enemy(self) -> ActionResult:
        """
        Run the enemy's half-turn

        Same tick / block steps as the player, then the enemy policy picks
        one action.
        """
        if self.session.ended:
            return self._reject("Combat has ended")
        if self.session.turn != Side.ENEMY:
            return self._reject("Not the enemy's turn")

        self.session.begin_half_turn()
        if not self._start_turn(Side.ENEMY):
            return self._result()

        decision = self.ai.decide_action(self.enemy)
        logger.debug("Enemy decision: %s", decision)
        if decision.action == "taunt":
            self.session.add_event(
                LogKind.ENEMY_TAUNT, text=f"{self.enemy.name} jeers at you instead of attacking."
            )
        elif decision.action == "move":
            self._use_move(Side.ENEMY, decision.move_id)
        else:
            self._basic_attack(Side.ENEMY)

        if not self.session.ended:
            self._pass_turn(Side.ENEMY)
        return self._result()

    def get_public_state(self) -> Dict[str, Any]:
        """Read-only snapshot for UIs"""
        session = self.session
        player_turn = not session.ended and session.turn == Side.PLAYER
        actions: List[str] = []
        if player_turn:
            actions = [
                action
                for action in PLAYER_ACTIONS
                if action != "item" or POTION_ITEM in self.player.inventory
            ]
        player_moves = []
        for move in list_moves_by_ids(self.player.loadout()):
            entry = move.to_dict()
            entry["affordable"] = self.player.pool(move.cost.pool) >= move.cost.amount
            player_moves.append(entry)

        return {
            "combat_id": session.combat_id,
            "state": session.state.value,
            "turn": session.turn.value,
            "round": session.round,
            "active": not session.ended,
            "ended": session.ended,
            "winner": session.winner.value if session.winner else None,
            "player": self.player.to_dict(),
            "enemy": self.enemy.to_dict(),
            "available_actions": actions,
            "player_moves": player_moves,
        }

    def get_combat_result(self) -> CombatResult:
        """
        Summarize an ended fight

        Raises:
            ValueError: the fight is still running
        """
        session = self.session
        if not session.ended or session.winner is None:
            raise ValueError("Combat is not ended")

        if session.winner == Winner.PLAYER:
            summary = f"{self.player.name} defeated {self.enemy.name} in {session.round} rounds."
        elif session.winner == Winner.ENEMY:
            summary = f"{self.player.name} was defeated by {self.enemy.name}."
        else:
            summary = f"{self.player.name} escaped from {self.enemy.name}."

        return CombatResult(
            combat_id=session.combat_id,
            winner=session.winner,
            summary=summary,
            player_hp_remaining=self.player.hp,
            player_max_hp=self.player.max_hp,
            items_used=list(session.items_used),
            full_log=[entry.to_dict() for entry in session.history],
            total_rounds=session.round,
            total_damage_dealt=session.damage_dealt,
            total_damage_taken=session.damage_taken,
        )

    def roll_scaled(self, spec: Optional[RollSpec], source: Optional[Combatant]) -> int:
        """Stat-scaled roll (used by effects and regen ticks)"""
        return self.dice.roll_scaled(spec, source)

    def effective_ac(self, combatant: Combatant) -> int:
        ac = combatant.ac
        for key, instance in combatant.status.items():
            behavior = get_status_behavior(key)
            if behavior is not None:
                ac = behavior.modify_ac(ac, instance)
        return ac

    def status_to_hit_delta(self, combatant: Combatant) -> int:
        delta = 0
        for key, instance in combatant.status.items():
            behavior = get_status_behavior(key)
            if behavior is not None:
                delta = behavior.modify_to_hit(delta, instance)
        return delta

    # ============================================
    # Turn flow
    # ============================================

    def _normalize(self):
        player, enemy = self.player, self.enemy
        for combatant in (player, enemy):
            if combatant.status is None:
                combatant.status = {}
            combatant.clamp_resources()
        enemy.attacks = list(enemy.attacks[:MAX_LOADOUT])
        if enemy.ai is None:
            enemy.ai = AIMemory()
        if not player.inventory:
            player.inventory.append(POTION_ITEM)

    def _start_turn(self, side: Side) -> bool:
        """
        Turn-start tick for one side

        Returns:
            bool: whether the side may act this turn
        """
        actor = self.session.combatant(side)
        # Blocking is decided on the statuses held when the turn begins,
        # so a one-turn stun still costs the turn it expires on.
        blocked = blocking_statuses(actor)

        self._tick_statuses(actor, side)
        if not actor.is_alive:
            self._end(self._winner_against(side))
            return False

        if blocked:
            self.session.add_event(
                LogKind.STATUS_BLOCKED,
                who=side.value,
                key=blocked[0].value,
                text=f"{actor.name} can't act!",
            )
            self._pass_turn(side)
            return False
        return True

    def _tick_statuses(self, actor: Combatant, side: Side):
        who = side.value
        for key, instance in list(actor.status.items()):
            behavior = get_status_behavior(key)
            if behavior is not None:
                behavior.on_tick(actor, self, who, instance, self.session.add_event)
            if instance.tick():
                actor.remove_status(key)
                self.session.add_event(LogKind.STATUS_END, who=who, key=key.value)
        actor.clamp_resources()

    def _pass_turn(self, side: Side):
        self.session.turn = side.other
        if side == Side.ENEMY:
            self.session.round += 1

    def _end(self, winner: Winner):
        session = self.session
        if session.ended:
            return
        session.ended = True
        session.winner = winner
        session.add_event(LogKind.COMBAT_END, winner=winner.value)
        logger.info(
            "Combat %s ended after %s rounds: winner=%s",
            session.combat_id,
            session.round,
            winner.value,
        )

    @staticmethod
    def _winner_against(side: Side) -> Winner:
        """Winner when `side` is defeated"""
        return Winner.ENEMY if side == Side.PLAYER else Winner.PLAYER

    def _side_of(self, combatant: Combatant) -> Side:
        return Side.PLAYER if combatant is self.player else Side.ENEMY

    def _reject(self, error: str) -> ActionResult:
        logger.debug("Rejected call on %s: %s", self.session.combat_id, error)
        return ActionResult(
            ok=False,
            error=error,
            log=[],
            state=self.get_public_state(),
            ended=self.session.ended,
            winner=self.session.winner.value if self.session.winner else None,
        )

    def _result(self) -> ActionResult:
        return ActionResult(
            ok=True,
            log=[entry.to_dict() for entry in self.session.log],
            state=self.get_public_state(),
            ended=self.session.ended,
            winner=self.session.winner.value if self.session.winner else None,
        )

    # ============================================
    # Resolution
    # ============================================

    def _resolve_to_hit(self, attacker: Combatant, defender: Combatant, bonus: int = 0) -> ToHitRoll:
        """
        d20 to-hit check

        Natural 1 always misses, natural 20 always hits; otherwise
        roll + to_hit + bonus + status delta must reach the defender's
        effective AC.
        """
        roll = self.dice.d20()
        total = roll + attacker.to_hit + bonus + self.status_to_hit_delta(attacker)
        ac = self.effective_ac(defender)
        crit = roll == CRITICAL_HIT_ROLL
        fumble = roll == CRITICAL_MISS_ROLL
        hit = crit or (not fumble and total >= ac)
        return ToHitRoll(roll=roll, total=total, ac=ac, hit=hit, crit=crit, fumble=fumble)

    def _strike_element(self, attacker: Combatant, move: Optional[Move] = None) -> Element:
        enchant = attacker.status.get(StatusKey.ENCHANT)
        if enchant is not None and enchant.element is not None:
            return enchant.element
        if move is not None:
            return move.element
        return Element.PHYSICAL

    def _apply_damage_pipeline(
        self, attacker: Combatant, defender: Combatant, amount: int, element: Element
    ) -> int:
        """
        outgoing mods -> incoming mods -> element multiplier -> HP

        Every step floors at 0. Consume-on-hit statuses on the defender are
        removed once the hit lands, whatever the final amount.

        Returns:
            int: HP actually removed
        """
        value = max(0, int(amount))
        for key, instance in list(attacker.status.items()):
            behavior = get_status_behavior(key)
            if behavior is not None:
                value = max(0, math.floor(behavior.modify_outgoing_damage(value, instance)))
        for key, instance in list(defender.status.items()):
            behavior = get_status_behavior(key)
            if behavior is not None:
                value = max(0, math.floor(behavior.modify_incoming_damage(value, instance)))

        multiplier = get_element_multiplier(attacker, defender, element)
        final = max(0, math.floor(value * multiplier))
        dealt = defender.take_damage(final)

        for key in list(defender.status):
            behavior = get_status_behavior(key)
            if behavior is not None and behavior.consume_on_hit:
                defender.remove_status(key)
                logger.debug("%s lost %s on hit", defender.name, key.value)

        if defender is self.enemy:
            self.session.damage_dealt += dealt
        else:
            self.session.damage_taken += dealt
        logger.debug(
            "%s -> %s: base=%s modified=%s x%s (%s) = %s",
            attacker.name,
            defender.name,
            amount,
            value,
            multiplier,
            element.value,
            dealt,
        )
        return dealt

    def _check_defeat(self, combatant: Combatant) -> bool:
        if combatant.is_alive:
            return False
        self._end(self._winner_against(self._side_of(combatant)))
        return True

    def _basic_attack(self, side: Side):
        attacker = self.session.combatant(side)
        defender = self.session.opponent(side)

        to_hit = self._resolve_to_hit(attacker, defender)
        dmg = 0
        if to_hit.hit:
            base = self.dice.roll_range(attacker.damage)
            if to_hit.crit:
                base += self.dice.roll_range(attacker.damage)
            dmg = self._apply_damage_pipeline(
                attacker, defender, base, self._strike_element(attacker)
            )

        kind = LogKind.PLAYER_ATTACK if side == Side.PLAYER else LogKind.ENEMY_ATTACK
        self.session.add_event(kind, **to_hit.to_dict(), dmg=dmg, target_hp=defender.hp)
        self._check_defeat(defender)

    def _use_move(self, side: Side, move_id: Optional[str]):
        """
        Resolve a catalog move

        Unknown ids, moves outside the caster's loadout and short pools
        fail with a log entry (the turn is still spent). A to-hit roll
        gates every effect when the move aims damage at the opponent.
        """
        caster = self.session.combatant(side)
        opponent = self.session.opponent(side)
        fail_kind = LogKind.PLAYER_MOVE_FAIL if side == Side.PLAYER else LogKind.ENEMY_MOVE_FAIL

        move = get_move_by_id(move_id)
        if move is None:
            self.session.add_event(
                fail_kind, id=move_id, reason="unknown_move", text=f"Unknown move: {move_id}"
            )
            return

        if move.id not in caster.loadout():
            self.session.add_event(
                fail_kind,
                id=move.id,
                reason="not_in_loadout",
                text=f"{caster.name} doesn't know {move.name}.",
            )
            return

        if not caster.spend(move.cost.pool, move.cost.amount):
            self.session.add_event(
                fail_kind,
                id=move.id,
                reason="insufficient_cost",
                pool=move.cost.pool.value,
                cost=move.cost.amount,
                have=caster.pool(move.cost.pool),
                text=f"Not enough {move.cost.pool.value} for {move.name}.",
            )
            return

        target = caster if move.target == MoveTarget.SELF else opponent
        to_hit = None
        if move.needs_to_hit_roll():
            to_hit = self._resolve_to_hit(caster, opponent, move.to_hit_bonus)

        entry: Dict[str, Any] = {
            "id": move.id,
            "name": move.name,
            "kind": move.kind.value,
            "element": move.element.value,
            "mp_left": caster.mp,
            "sp_left": caster.sp,
        }
        if to_hit is not None:
            entry.update(to_hit.to_dict())
        move_kind = LogKind.PLAYER_MOVE if side == Side.PLAYER else LogKind.ENEMY_MOVE
        self.session.add_event(move_kind, **entry)

        if to_hit is not None and not to_hit.hit:
            return

        crit = bool(to_hit and to_hit.crit)
        for effect in move.all_effects:
            self._apply_effect(side, caster, target, move, effect, crit)
            if self.session.ended:
                return

    def _apply_effect(
        self,
        side: Side,
        caster: Combatant,
        target: Combatant,
        move: Move,
        effect: Effect,
        crit: bool = False,
    ):
        target_label = "self" if target is caster else "enemy"
        base = {"by": side.value, "target": target_label, "name": move.name}

        if isinstance(effect, DamageEffect):
            amount = self.roll_scaled(effect.roll, caster)
            if crit:
                amount *= 2
            dealt = self._apply_damage_pipeline(
                caster, target, amount, self._strike_element(caster, move)
            )
            self.session.add_event(LogKind.MOVE_EFFECT, effect="damage", amount=dealt, **base)
            self._check_defeat(target)

        elif isinstance(effect, HealEffect):
            healed = target.heal(self.roll_scaled(effect.roll, caster))
            self.session.add_event(LogKind.MOVE_EFFECT, effect="heal", amount=healed, **base)

        elif isinstance(effect, ApplyStatusEffect):
            if not self.dice.chance(effect.chance):
                self.session.add_event(
                    LogKind.MOVE_EFFECT,
                    effect="status",
                    key=effect.key.value,
                    turns=effect.turns,
                    applied=False,
                    **base,
                )
                return
            instance = StatusEffectInstance.from_payload(
                turns=effect.turns,
                persistent=effect.persistent,
                data=effect.payload,
                source=move.id,
            )
            target.add_status(effect.key, instance)
            self.session.add_event(
                LogKind.MOVE_EFFECT,
                effect="status",
                key=effect.key.value,
                turns=effect.turns,
                applied=True,
                **base,
            )

    # ============================================
    # Player-only actions
    # ============================================

    def _defend(self):
        self.player.add_status(
            StatusKey.DEFENDING,
            StatusEffectInstance(turns=DEFEND_TURNS, pct=DEFEND_PCT, source="defend"),
        )
        self.session.add_event(
            LogKind.PLAYER_DEFEND,
            turns=DEFEND_TURNS,
            pct=DEFEND_PCT,
            text=f"{self.player.name} braces for the next hit.",
        )

    def _use_item(self, item: Optional[str]):
        item = item or POTION_ITEM
        if item != POTION_ITEM or item not in self.player.inventory:
            text = "No potion left!" if item == POTION_ITEM else f"You can't use {item} here."
            self.session.add_event(LogKind.PLAYER_ITEM_FAIL, item=item, text=text)
            return

        self.player.inventory.remove(item)
        healed = self.player.heal(self.dice.randint(*POTION_HEAL))
        self.session.items_used.append(item)
        self.session.add_event(LogKind.PLAYER_ITEM, item=item, heal=healed, hp=self.player.hp)

    def _flee(self):
        roll = self.dice.d20()
        cha = self.player.stat("CHA")
        total = roll + cha
        dc = flee_difficulty(self.enemy.ac)
        success = total >= dc
        self.session.add_event(
            LogKind.PLAYER_FLEE, roll=roll, cha=cha, total=total, dc=dc, success=success
        )
        if success:
            self._end(Winner.FLED)


class CombatEngine:
    """
    Session registry

    Holds one CombatController per running or finished fight. Oldest
    sessions are dropped once `max_sessions` is exceeded.
    """

    def __init__(self, max_sessions: int = 0, rng_seed: Optional[int] = None):
        self.sessions: "OrderedDict[str, CombatController]" = OrderedDict()
        self.max_sessions = max_sessions
        self.rng_seed = rng_seed
        # sessions seeded so far; never shrinks on eviction
        self._started = 0

    # ============================================
    # Public interface
    # ============================================

    def start_combat(
        self,
        player: CombatantInput,
        enemy: CombatantInput,
        rng: Optional[random.Random] = None,
    ) -> CombatController:
        """
        Start a fight between two combatants

        Args:
            player: Combatant or plain dict (validated by Combatant.from_dict)
            enemy: Combatant or plain dict

        Raises:
            ValueError: malformed combatant data
        """
        if not isinstance(player, Combatant):
            player = Combatant.from_dict(player, combatant_type=CombatantType.PLAYER)
        if not isinstance(enemy, Combatant):
            enemy = Combatant.from_dict(enemy, combatant_type=CombatantType.ENEMY)

        controller = CombatController(player, enemy, rng=rng or self._new_rng())
        self.sessions[controller.combat_id] = controller
        self._evict()
        return controller

    def start_encounter(
        self,
        player_class: str,
        enemy_type: Optional[str] = None,
        difficulty: int = 0,
        player_name: Optional[str] = None,
        rng: Optional[random.Random] = None,
        moves: Optional[List[str]] = None,
    ) -> CombatController:
        """
        Build both sides from templates and start the fight

        Args:
            moves: basic move picks from the class pool (class defaults
                when omitted)

        Raises:
            ValueError: unknown class, enemy type or move pick
        """
        rng = rng or self._new_rng()
        player = create_player(player_class, player_name, rng=rng, moves=moves)
        enemy = create_enemy(enemy_type, difficulty=difficulty, rng=rng)
        return self.start_combat(player, enemy, rng=rng)

    def get(self, combat_id: str) -> CombatController:
        """
        Raises:
            KeyError: unknown combat id
        """
        controller = self.sessions.get(combat_id)
        if controller is None:
            raise KeyError(combat_id)
        return controller

    def act_player(self, combat_id: str, action: str, arg: Optional[str] = None) -> ActionResult:
        return self.get(combat_id).act_player(action, arg)

    def act_enemy(self, combat_id: str) -> ActionResult:
        return self.get(combat_id).act_enemy()

    def get_public_state(self, combat_id: str) -> Dict[str, Any]:
        return self.get(combat_id).get_public_state()

    def get_combat_result(self, combat_id: str) -> CombatResult:
        return self.get(combat_id).get_combat_result()

    # ============================================
    # Internals
    # ============================================

    def _new_rng(self) -> random.Random:
        if self.rng_seed is None:
            return random.Random()
        seed = self.rng_seed + self._started
        self._started += 1
        return random.Random(seed)

    def _evict(self):
        if self.max_sessions <= 0:
            return
        while len(self.sessions) > self.max_sessions:
            combat_id, _ = self.sessions.popitem(last=False)
            logger.info("Evicted combat session %s", combat_id)
