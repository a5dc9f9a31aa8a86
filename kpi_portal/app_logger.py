"""
Logging setup for the portal.
"""
import logging

from kpi_portal.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging():
    level = getattr(logging, LOG_LEVEL, logging.INFO)
    logger = logging.getLogger("kpi_portal")
    logger.setLevel(level)

    # Avoid duplicate console handlers on reload
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.setLevel(level)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = None) -> logging.Logger:
    """Child of the portal logger; module names are accepted as-is."""
    base = logging.getLogger("kpi_portal")
    if not name or name == "kpi_portal":
        return base
    if name.startswith("kpi_portal."):
        name = name[len("kpi_portal."):]
    return base.getChild(name)
