"""
Centralized logging configuration.

Usage:
    from storefront.core.logging import get_logger
    logger = get_logger("storefront.cart")
"""
import logging
import sys
from functools import lru_cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level_name: str = "INFO") -> None:
    """Configure the root logger once; later calls only adjust the level."""
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # gRPC / google-auth are noisy at INFO
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


@lru_cache(maxsize=None)
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def sanitize_id(value, max_length: int = 24) -> str:
    """
    Make a user supplied identifier safe to log: control characters are escaped
    (no forged log lines) and long values are truncated.
    """
    if not value:
        return "N/A"
    safe = (
        str(value)
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )
    return safe if len(safe) <= max_length else safe[:max_length] + "..."
