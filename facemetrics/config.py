import logging
import os
from typing import Optional

MM_PER_UNIT = float(os.getenv("FACEMETRICS_MM_PER_UNIT", "320"))
LOG_LEVEL = os.getenv("FACEMETRICS_LOG_LEVEL", "INFO")
IDEALS_PATH: Optional[str] = os.getenv("FACEMETRICS_IDEALS_PATH") or None


def setup_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
