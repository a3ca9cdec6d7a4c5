from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_DIR = Path("logs")


def setup_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    log_dir = log_dir or LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / "poimap.log"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(logfile, encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )
