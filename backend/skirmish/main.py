"""
FastAPI application entry
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skirmish.config import settings
from skirmish.routers import combat_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Skirmish Combat API",
    description="Turn-based two-combatant combat engine",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(combat_router, prefix=settings.api_prefix, tags=["Combat"])


@app.on_event("startup")
async def startup_event():
    logger.info("Skirmish API started, docs at /docs (prefix %s)", settings.api_prefix)


@app.get("/")
async def root():
    return {
        "message": "Skirmish Combat API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
