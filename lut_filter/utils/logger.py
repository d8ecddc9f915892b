import logging
import sys
from lut_filter.config import settings

PACKAGE_LOGGER = "lut_filter"

LOG_LEVEL_MAP = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}

log_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

# Console Handler
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(log_formatter)


def _resolve_level(level):
    if isinstance(level, int):
        return level
    return LOG_LEVEL_MAP.get(str(level).upper(), logging.INFO)


def _package_logger():
    root = logging.getLogger(PACKAGE_LOGGER)
    if console_handler not in root.handlers:
        root.addHandler(console_handler)
        root.setLevel(_resolve_level(getattr(settings, 'LOGGING_LEVEL', 'INFO')))
        root.propagate = False
    return root


def get_logger(name):
    """
    Gets a logger for a module of the filter engine.

    All lut_filter loggers share the one console handler on the package
    logger, so ``set_log_level`` changes them together. Names outside the
    package get their own handler.
    """
    root = _package_logger()
    if name == PACKAGE_LOGGER:
        return root

    logger = logging.getLogger(name)
    if not name.startswith(PACKAGE_LOGGER + "."):
        if not logger.handlers:
            logger.addHandler(console_handler)
        logger.setLevel(root.level)
        logger.propagate = False
    return logger


def set_log_level(level):
    """Set the level of every lut_filter logger ("DEBUG", "INFO", ... or a logging constant)."""
    _package_logger().setLevel(_resolve_level(level))
