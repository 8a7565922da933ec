"""
Configuration module
"""
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# Load environment variables
load_dotenv()


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


class Settings(BaseModel):
    """Application settings"""

    # Logging
    log_level: str = os.getenv("SKIRMISH_LOG_LEVEL", "INFO")

    # Combat
    rng_seed: Optional[int] = _optional_int(os.getenv("SKIRMISH_RNG_SEED"))
    max_sessions: int = int(os.getenv("SKIRMISH_MAX_SESSIONS", "256"))

    # API
    api_prefix: str = os.getenv("SKIRMISH_API_PREFIX", "/api")
    cors_origins: List[str] = [
        origin.strip()
        for origin in os.getenv("SKIRMISH_CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]

    model_config = ConfigDict(case_sensitive=False)


# Global settings instance
settings = Settings()
