"""
Combat API routes.
"""
import logging
import random
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from skirmish.combat import CombatEngine
from skirmish.combat.models import ActionResult
from skirmish.combat.moves import MOVES
from skirmish.dependencies import get_combat_engine
from skirmish.models.combat import (
    CombatActionRequest,
    CombatActionResponse,
    CombatStartRequest,
    CombatStartResponse,
    MoveInfo,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/combat", tags=["Combat"])


def _to_response(result: ActionResult) -> CombatActionResponse:
    return CombatActionResponse(**result.to_dict())


@router.get("/moves", response_model=List[MoveInfo])
async def list_moves():
    """Move catalog"""
    return [MoveInfo(**move.to_dict()) for move in MOVES.values()]


@router.post("/start", response_model=CombatStartResponse)
async def start_combat(
    payload: CombatStartRequest,
    engine: CombatEngine = Depends(get_combat_engine),
):
    """Start a fight from combatant dicts or from templates"""
    rng = random.Random(payload.seed) if payload.seed is not None else None
    try:
        if payload.player is not None and payload.enemy is not None:
            controller = engine.start_combat(payload.player, payload.enemy, rng=rng)
        elif payload.player_class:
            controller = engine.start_encounter(
                payload.player_class,
                enemy_type=payload.enemy_type,
                difficulty=payload.difficulty,
                player_name=payload.player_name,
                rng=rng,
                moves=payload.moves,
            )
        else:
            raise HTTPException(
                status_code=400,
                detail="provide either player + enemy or player_class",
            )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return CombatStartResponse(
        combat_id=controller.combat_id,
        state=controller.get_public_state(),
    )


@router.get("/{combat_id}")
async def get_combat_state(
    combat_id: str,
    engine: CombatEngine = Depends(get_combat_engine),
):
    try:
        return engine.get_public_state(combat_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="combat not found") from exc


@router.post("/{combat_id}/player", response_model=CombatActionResponse)
async def player_action(
    combat_id: str,
    payload: CombatActionRequest,
    engine: CombatEngine = Depends(get_combat_engine),
):
    try:
        result = engine.act_player(combat_id, payload.action, payload.arg)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="combat not found") from exc
    return _to_response(result)


@router.post("/{combat_id}/enemy", response_model=CombatActionResponse)
async def enemy_action(
    combat_id: str,
    engine: CombatEngine = Depends(get_combat_engine),
):
    try:
        result = engine.act_enemy(combat_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="combat not found") from exc
    return _to_response(result)


@router.get("/{combat_id}/result")
async def get_combat_result(
    combat_id: str,
    engine: CombatEngine = Depends(get_combat_engine),
):
    try:
        result = engine.get_combat_result(combat_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="combat not found") from exc
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return result.to_dict()
