"""Runtime configuration for the Star Harvest server."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="STARHARVEST_", env_file=".env", extra="ignore")

    app_name: str = "starharvest"
    log_level: str = "INFO"

    db_path: Path = Path("./game.db")
    world_seed: Optional[int] = Field(
        default=None,
        description="Seed for world generation. Unset means a fresh random system each start.",
    )

    tick_dt: float = Field(default=0.1, gt=0, description="Real seconds between simulation frames.")
    autosave_dt: float = Field(default=20.0, gt=0, description="Seconds between lastVisit checkpoints.")

    host: str = "127.0.0.1"
    port: int = 8000


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


settings = Settings()
