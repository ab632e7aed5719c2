"""Logging setup and utilities."""

import logging

from .ansi import LEVEL_CODES, sgr, should_colorize
from .debug import is_debug, set_debug

__all__ = [
    "LogObjects",
    "get_logger",
    "init_logger",
]


class LogObjects:
    """Reusable objects for loggers."""

    handlers: list[logging.Handler] = []
    loggers: dict[str, logging.Logger] = {}


class ScreenLogFormatter(logging.Formatter):
    """Formatter for the stderr handler, coloring warnings and errors.

    Whether to color is decided once, when the formatter is created.
    """

    def __init__(self) -> None:
        super().__init__()
        log_format = r"%(name)25s - %(message)s // %(filename)s:%(lineno)d" if is_debug() else r"%(message)s"
        colored = should_colorize()
        self._formatters: dict[int, logging.Formatter] = {}
        for level in (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL):
            start, end = sgr(*LEVEL_CODES.get(level, ())) if colored else ("", "")
            self._formatters[level] = logging.Formatter(start + log_format + end)

    def format(self, record: logging.LogRecord) -> str:
        return self._formatters.get(record.levelno, self._formatters[logging.INFO]).format(record)


def init_logger(filename: str | None = None, force_debug: bool = False) -> None:
    """Initialize the logging system.

    Can be called more than once: handlers from a previous call are
    detached from every known logger and replaced.

    Args:
        filename: Optional filename to log to
        force_debug: If True, force debug level
    """
    if force_debug:
        set_debug(True)

    for logger in LogObjects.loggers.values():
        for handler in LogObjects.handlers:
            logger.removeHandler(handler)
    for handler in LogObjects.handlers:
        handler.close()
    LogObjects.handlers = []

    if filename:
        file_handler = logging.FileHandler(filename)
        file_handler.setFormatter(logging.Formatter(fmt=r"%(asctime)s [%(levelname)s] %(name)s :: %(message)s :: %(filename)s:%(lineno)d"))
        LogObjects.handlers.append(file_handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(ScreenLogFormatter())
    LogObjects.handlers.append(stream_handler)

    # loggers created at import time get the new handlers too
    for logger in LogObjects.loggers.values():
        _configure(logger, None)


def _configure(logger: logging.Logger, level: int | None) -> None:
    if level is None:
        logger.setLevel(logging.DEBUG if is_debug() else logging.WARNING)
    else:
        logger.setLevel(level)
    logger.propagate = False
    for handler in LogObjects.handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)


def get_logger(name: str = "shelltab", level: int | None = None) -> logging.Logger:
    """Return a named logger.

    Args:
        name (str): logger's name
        level (int): logger's level (auto if not set)

    Returns:
        The logger instance
    """
    logger = logging.getLogger(name)
    _configure(logger, level)
    LogObjects.loggers[name] = logger
    logger.debug('Logger "%s" initialized', name)
    return logger
