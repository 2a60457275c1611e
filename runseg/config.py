"""Package configuration from environment variables."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    runseg_env: str = "development"
    runseg_log_level: str = "info"

    # Segmentation defaults
    runseg_random_seed: int = 0
    runseg_color_strategy: str = "root_map"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Install the root handler used by applications embedding the pipeline."""
    name = (level or settings.runseg_log_level).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
