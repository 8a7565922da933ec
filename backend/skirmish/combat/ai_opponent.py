"""
Enemy AI

Picks one action per enemy turn from the enemy's affordable loadout.
"""
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, TypeVar

from .dice import DiceRoller
from .models.action import HealEffect, Move, MoveKind, MoveTarget
from .models.combatant import AIMemory, Combatant
from .moves import get_move_by_id
from .rules import (
    ATTACK_COST_WEIGHT,
    BUFF_WINDOW,
    CATEGORY_WEIGHTS,
    HEAL_HP_THRESHOLD,
    MAX_LOADOUT,
    TAUNT_CHANCE,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class AIDecision:
    """What the enemy does this turn"""

    action: str  # "taunt" | "move" | "attack"
    move_id: Optional[str] = None
    reason: str = ""


def weighted_choice(rng: Any, pairs: Sequence[Tuple[T, float]]) -> Optional[T]:
    """
    Pick an item with probability proportional to its weight

    Items with a non-positive weight are never picked while any positive
    weight exists; when none does, the pick is uniform over all items.

    Args:
        rng: object exposing random() and randint(a, b)
        pairs: (item, weight) list

    Returns:
        The chosen item, or None for an empty list
    """
    if not pairs:
        return None
    positive = [(item, weight) for item, weight in pairs if weight > 0]
    if not positive:
        return pairs[rng.randint(0, len(pairs) - 1)][0]

    total = sum(weight for _, weight in positive)
    threshold = rng.random() * total
    cumulative = 0.0
    for item, weight in positive:
        cumulative += weight
        if threshold < cumulative:
            return item
    return positive[-1][0]


class OpponentAI:
    """
    Enemy policy

    Priority:
    1. small taunt chance (no action)
    2. heal when below half HP
    3. self buff, likely early and every few turns after
    4. weighted category pick among attack / debuff / utility
    5. basic weapon attack
    """

    def __init__(self, dice: Optional[DiceRoller] = None):
        self.dice = dice or DiceRoller()

    def decide_action(self, enemy: Combatant) -> AIDecision:
        """
        Decide the enemy's action for this turn

        Advances the enemy's AI memory (turn counter, last buff turn).
        """
        if enemy.ai is None:
            enemy.ai = AIMemory()
        memory = enemy.ai
        memory.turns_taken += 1
        turn = memory.turns_taken

        # 1. Taunt
        if self.dice.random() < TAUNT_CHANCE:
            return AIDecision(action="taunt", reason="taunt")

        usable = self.affordable_moves(enemy)

        # 2. Heal
        heals = [m for m in usable if m.kind == MoveKind.HEAL and m.target == MoveTarget.SELF]
        if heals and enemy.hp_fraction < HEAL_HP_THRESHOLD:
            move = weighted_choice(self.dice, [(m, self._heal_weight(m)) for m in heals])
            return AIDecision(action="move", move_id=move.id, reason="heal")

        # 3. Buff
        buffs = [
            m
            for m in usable
            if m.kind == MoveKind.BUFF
            and m.target == MoveTarget.SELF
            and not self._already_active(enemy, m)
        ]
        if buffs:
            window = self.dice.randint(*BUFF_WINDOW)
            since_buff = turn - memory.last_buff_turn
            if turn == 1 or since_buff >= window:
                move = buffs[self.dice.randint(0, len(buffs) - 1)]
                memory.last_buff_turn = turn
                return AIDecision(action="move", move_id=move.id, reason="buff")

        # 4. Category pick
        by_category = {
            "attack": [m for m in usable if m.kind == MoveKind.ATTACK],
            "debuff": [m for m in usable if m.kind == MoveKind.DEBUFF],
            "utility": [m for m in usable if m.kind == MoveKind.UTILITY],
        }
        categories = [
            (name, CATEGORY_WEIGHTS[name]) for name, moves in by_category.items() if moves
        ]
        category = weighted_choice(self.dice, categories)
        if category is not None:
            options = by_category[category]
            if category == "attack":
                weighted = [(m, 1 + ATTACK_COST_WEIGHT * m.cost.amount) for m in options]
            else:
                weighted = [(m, 1.0) for m in options]
            move = weighted_choice(self.dice, weighted)
            return AIDecision(action="move", move_id=move.id, reason=category)

        # 5. Fallback
        return AIDecision(action="attack", reason="fallback")

    def affordable_moves(self, enemy: Combatant) -> List[Move]:
        """
        Loadout moves the enemy can pay for right now

        The four-slot cap applies to attacks; abilities are always
        available.
        """
        moves = []
        seen = set()
        for move_id in [*enemy.attacks[:MAX_LOADOUT], *enemy.abilities]:
            if move_id in seen:
                continue
            seen.add(move_id)
            move = get_move_by_id(move_id)
            if move is None:
                logger.debug("%s has unknown move %s in loadout", enemy.name, move_id)
                continue
            if enemy.pool(move.cost.pool) >= move.cost.amount:
                moves.append(move)
        return moves

    @staticmethod
    def _heal_weight(move: Move) -> float:
        return sum(effect.roll.mean for effect in move.effects if isinstance(effect, HealEffect))

    @staticmethod
    def _already_active(enemy: Combatant, move: Move) -> bool:
        keys = move.status_keys()
        return bool(keys) and all(enemy.has_status(key) for key in keys)
