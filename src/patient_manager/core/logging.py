"""
Logging setup shared by the API server and the terminal dashboard
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from .config import LoggingConfig


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """Configure the root logger from LoggingConfig"""
    if config is None:
        config = LoggingConfig()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if config.log_file:
        handlers.append(RotatingFileHandler(
            config.log_file,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count
        ))

    logging.basicConfig(
        level=getattr(logging, config.level.upper(), logging.INFO),
        format=config.format,
        handlers=handlers,
        force=True
    )

    # Quiet chatty libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
