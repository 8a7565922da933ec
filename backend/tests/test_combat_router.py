import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from skirmish.combat import CombatEngine
from skirmish.combat.moves import MOVES
from skirmish.models.combat import CombatActionRequest, CombatStartRequest
from skirmish.routers.combat import (
    enemy_action,
    get_combat_result,
    get_combat_state,
    list_moves,
    player_action,
    start_combat,
)


def _player_dict():
    return {"name": "Hero", "hp": 20, "ac": 12, "to_hit": 4, "damage": [2, 6], "stats": {"CHA": 20}}


def _enemy_dict():
    return {"name": "Rat", "hp": 6, "ac": 5, "to_hit": 0, "damage": [1, 2]}


@pytest.mark.asyncio
async def test_list_moves_returns_catalog():
    moves = await list_moves()
    assert {move.id for move in moves} == set(MOVES)


@pytest.mark.asyncio
async def test_start_combat_from_templates():
    engine = CombatEngine()
    response = await start_combat(
        CombatStartRequest(player_class="Warrior", player_name="Brand", enemy_type="Goblin", seed=3),
        engine=engine,
    )

    assert response.combat_id in engine.sessions
    assert response.state["turn"] == "player"
    assert response.state["player"]["name"] == "Brand"


@pytest.mark.asyncio
async def test_start_combat_requires_combatants():
    with pytest.raises(HTTPException) as exc:
        await start_combat(CombatStartRequest(), engine=CombatEngine())
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_start_combat_maps_value_error_to_400():
    with pytest.raises(HTTPException) as exc:
        await start_combat(CombatStartRequest(player_class="Bard"), engine=CombatEngine())
    assert exc.value.status_code == 400
    assert "Bard" in exc.value.detail

    with pytest.raises(HTTPException) as exc:
        await start_combat(
            CombatStartRequest(player={"name": "Hero"}, enemy=_enemy_dict()),
            engine=CombatEngine(),
        )
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_unknown_combat_is_404():
    engine = CombatEngine()

    for call in (
        get_combat_state("missing", engine=engine),
        player_action("missing", CombatActionRequest(action="attack"), engine=engine),
        enemy_action("missing", engine=engine),
        get_combat_result("missing", engine=engine),
    ):
        with pytest.raises(HTTPException) as exc:
            await call
        assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_result_before_end_is_409():
    engine = CombatEngine()
    started = await start_combat(
        CombatStartRequest(player=_player_dict(), enemy=_enemy_dict(), seed=1), engine=engine
    )

    with pytest.raises(HTTPException) as exc:
        await get_combat_result(started.combat_id, engine=engine)
    assert exc.value.status_code == 409


@pytest.mark.asyncio
async def test_action_flow_and_result():
    engine = CombatEngine()
    started = await start_combat(
        CombatStartRequest(player=_player_dict(), enemy=_enemy_dict(), seed=1), engine=engine
    )

    rejected = await enemy_action(started.combat_id, engine=engine)
    assert rejected.ok is False
    assert rejected.error

    # CHA 20 always clears the flee check
    fled = await player_action(started.combat_id, CombatActionRequest(action="flee"), engine=engine)
    assert fled.ok is True
    assert fled.ended is True
    assert fled.winner == "fled"

    result = await get_combat_result(started.combat_id, engine=engine)
    assert result["winner"] == "fled"
    assert result["player_state"]["hp_remaining"] == 20


def test_app_health_and_start():
    from skirmish.config import settings
    from skirmish.main import app

    client = TestClient(app)

    assert client.get("/health").json() == {"status": "healthy"}

    response = client.post(
        f"{settings.api_prefix}/combat/start",
        json={"player_class": "Cleric", "enemy_type": "Bat", "seed": 5},
    )
    assert response.status_code == 200
    combat_id = response.json()["combat_id"]

    state = client.get(f"{settings.api_prefix}/combat/{combat_id}")
    assert state.status_code == 200
    assert state.json()["enemy"]["class"] == "Bat"


@pytest.mark.asyncio
async def test_start_combat_with_basic_picks():
    engine = CombatEngine()
    response = await start_combat(
        CombatStartRequest(player_class="Wizard", moves=["iceShard", "frostbind"], seed=2),
        engine=engine,
    )
    assert response.state["player"]["attacks"] == ["iceShard", "frostbind"]

    with pytest.raises(HTTPException) as exc:
        await start_combat(
            CombatStartRequest(player_class="Wizard", moves=["heavy"]), engine=engine
        )
    assert exc.value.status_code == 400
