"""Setup and configuration for the structured logging system."""

import logging
import sys
from pathlib import Path
from typing import Optional, Any

from .structured_logger import get_logger, landscape_context
from .handlers import ConsoleHandler, FileHandler

LIBRARY_LOGGER = 'landgrid'


def _reset_handlers(logger: logging.Logger):
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()


def setup_logging(config: Any,
                  landscape_id: Optional[str] = None,
                  log_file: Optional[str] = None,
                  console: bool = True,
                  log_level: Optional[str] = None):
    """Configure structured logging for the ``landgrid`` logger tree.

    Args:
        config: Config instance (anything with dot-notation ``get``)
        landscape_id: Landscape ID set on the logging context
        log_file: Log file path; falls back to ``logging.file`` in config,
            no file output when neither is set
        console: Whether to enable console logging
        log_level: Minimum level, defaults to ``logging.level`` in config
    """
    log_level = log_level or config.get('logging.level', 'INFO')
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    root_logger = logging.getLogger(LIBRARY_LOGGER)
    root_logger.setLevel(level)
    _reset_handlers(root_logger)

    if console:
        use_json = config.get('logging.format', 'human') == 'json'
        console_handler = ConsoleHandler(use_colors=sys.stderr.isatty() and not use_json)
        if use_json:
            from .formatters import JsonFormatter
            console_handler.setFormatter(JsonFormatter())
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

    if log_file is None:
        log_file = config.get('logging.file')
    if log_file is not None:
        file_handler = FileHandler(
            filename=str(Path(log_file)),
            max_bytes=config.get('logging.max_bytes', 10 * 1024 * 1024),
            backup_count=config.get('logging.backup_count', 3),
            use_json=True
        )
        root_logger.addHandler(file_handler)

    if landscape_id:
        landscape_context.set(landscape_id)

    get_logger(__name__).info(
        "Structured logging initialized",
        extra={
            'context': {
                'log_level': logging.getLevelName(level),
                'handlers': {
                    'console': console,
                    'file': str(log_file) if log_file else None,
                }
            }
        }
    )


def setup_simple_logging(log_level: str = 'INFO'):
    """Console-only logging for scripts and debugging."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger(LIBRARY_LOGGER)
    root_logger.setLevel(level)
    _reset_handlers(root_logger)

    console_handler = ConsoleHandler(show_context=True)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)
