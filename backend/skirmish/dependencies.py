"""
FastAPI dependencies.
"""
from functools import lru_cache

from skirmish.combat import CombatEngine
from skirmish.config import settings


@lru_cache()
def get_combat_engine() -> CombatEngine:
    return CombatEngine(max_sessions=settings.max_sessions, rng_seed=settings.rng_seed)
