"""Structured logging infrastructure for landscape setup."""

from .structured_logger import (
    StructuredLogger, get_logger, landscape_context, node_context, stage_context
)
from .context import LoggingContext
from .decorators import log_operation, log_stage
from .setup import setup_logging, setup_simple_logging

__all__ = [
    'StructuredLogger',
    'get_logger',
    'LoggingContext',
    'landscape_context',
    'node_context',
    'stage_context',
    'log_operation',
    'log_stage',
    'setup_logging',
    'setup_simple_logging'
]
