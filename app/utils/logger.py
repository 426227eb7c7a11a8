import logging
from typing import Optional

from app.core.config import settings


_configured = False


def _configure_logger() -> None:
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(handler)
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    _configure_logger()
    return logging.getLogger(name if name else __name__)


def format_fields(fields: dict) -> str:
    """Render structured fields as ``key=value`` pairs for the message text"""
    return " ".join(f"{key}={value}" for key, value in fields.items())
