"""Logging configuration for the application."""

import logging
from typing import Dict
from rich.logging import RichHandler
from .config import settings


def setup_logging() -> None:
    """Set up application logging with rich formatting."""

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=None,
                show_path=False,
                markup=True,
                rich_tracebacks=True,
            )
        ],
        force=True,
    )

    # Quieten HTTP and SDK chatter
    logger_levels: Dict[str, str] = {
        "httpx": "WARNING",
        "httpcore": "WARNING",
        "google_genai": "WARNING",
    }

    for logger_name, level in logger_levels.items():
        logging.getLogger(logger_name).setLevel(getattr(logging, level))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the given name."""
    return logging.getLogger(name)
