"""
Logging setup for the storefront engines and API.

Every module asks for a child of the ``storefront`` logger; the level comes
from the LOG_LEVEL environment variable.
"""
import logging
import os
import sys

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logger = logging.getLogger("storefront")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)
    console_handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logger.addHandler(console_handler)

# Keep storefront records out of the root logger (uvicorn installs its own handlers)
logger.propagate = False


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a storefront logger.

    Args:
        name: Dotted suffix such as "cart.engine" (becomes "storefront.cart.engine")

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"storefront.{name}")
    return logger
