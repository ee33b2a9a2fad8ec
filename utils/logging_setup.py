import logging
import sys

ROOT_LOGGER_NAME = "catalog_helper"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def _configure_root_logger():
    global _configured
    if _configured:
        return
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    if root.level == logging.NOTSET:
        root.setLevel(logging.WARNING)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger in the application namespace.

    The first call installs a stderr handler on the namespace root, at
    WARNING unless a level was set before. Only `set_level` changes it.

    Args:
        name: Short name of the module, e.g. "catalog.parser".

    Returns:
        logging.Logger: The "catalog_helper.<name>" logger.
    """
    _configure_root_logger()
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def set_level(level: str):
    """Change the level of every application logger."""
    _configure_root_logger()
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level.upper())
