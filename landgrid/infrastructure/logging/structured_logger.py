"""Structured logging with context propagation for landscape setup."""

import logging
import sys
import traceback
from typing import Dict, Any, Optional
from contextvars import ContextVar
from datetime import datetime, timezone
import time

# Context variables correlating log records with the landscape being built
landscape_context: ContextVar[Optional[str]] = ContextVar('landscape_id', default=None)
stage_context: ContextVar[Optional[str]] = ContextVar('stage', default=None)
node_context: ContextVar[Optional[str]] = ContextVar('node_id', default=None)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


class StructuredLogger(logging.Logger):
    """Logger that attaches context, performance data and tracebacks to records.

    Records carry three extra attributes consumed by the formatters:
    ``context`` (landscape_id, stage, node_id plus caller fields),
    ``performance`` and ``traceback``.
    """

    def __init__(self, name: str):
        super().__init__(name)
        self._context_fields: Dict[str, Any] = {}
        self._start_times: Dict[str, float] = {}

    def _log(self, level, msg, args, exc_info=None, extra=None, stack_info=False, **kwargs):
        context = {
            'landscape_id': landscape_context.get(),
            'stage': stage_context.get(),
            'node_id': node_context.get(),
            'logger_name': self.name,
            'timestamp': _utc_timestamp(),
            **self._context_fields
        }
        context = {k: v for k, v in context.items() if v is not None}

        if extra and isinstance(extra, dict):
            extra = dict(extra)
            performance = extra.pop('performance', None)
            context.update(extra.pop('context', None) or {})
            traceback_str = extra.pop('traceback', None)
        else:
            extra = {}
            performance = None
            traceback_str = None

        if not traceback_str and exc_info:
            if isinstance(exc_info, BaseException):
                exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
            elif not isinstance(exc_info, tuple):
                exc_info = sys.exc_info()
            if exc_info[0] is not None:
                traceback_str = ''.join(traceback.format_exception(*exc_info))

        extra.update({
            'context': context,
            'performance': performance,
            'traceback': traceback_str
        })

        super()._log(level, msg, args, exc_info=False, extra=extra,
                     stack_info=stack_info, **kwargs)

    def add_context(self, **fields):
        """Add persistent context fields to all future log messages."""
        self._context_fields.update(fields)

    def remove_context(self, *keys):
        for key in keys:
            self._context_fields.pop(key, None)

    def clear_context(self):
        self._context_fields.clear()

    def start_operation(self, operation: str):
        """Start timing an operation."""
        self._start_times[operation] = time.time()
        self.debug(f"Started operation: {operation}")

    def end_operation(self, operation: str, **metrics):
        """End timing an operation and log performance."""
        if operation not in self._start_times:
            self.warning(f"No start time for operation: {operation}")
            return

        duration = time.time() - self._start_times.pop(operation)
        self.log_performance(operation, duration, **metrics)

    def log_performance(self, operation: str, duration: float, **metrics):
        """Log performance metrics for an operation.

        Args:
            operation: Operation name
            duration: Duration in seconds
            **metrics: Additional metrics (cells_processed, polygons, ...)

        Example:
            logger.log_performance('create_index', 0.42,
                                   cells_processed=250000,
                                   polygons=118)
        """
        performance_data = {
            'operation': operation,
            'duration_seconds': round(duration, 3),
            'timestamp': _utc_timestamp(),
            **metrics
        }

        if 'cells_processed' in metrics and duration > 0:
            performance_data['cells_per_second'] = round(
                metrics['cells_processed'] / duration, 2
            )

        self.info(
            f"Performance: {operation} completed in {duration:.3f}s",
            extra={'performance': performance_data}
        )

    def log_error_with_context(self, error: Exception, operation: Optional[str] = None, **context):
        """Log an error with full context and traceback."""
        error_context = {
            'error_type': type(error).__name__,
            'error_module': type(error).__module__,
            **context
        }

        if operation:
            error_context['operation'] = operation

        self.error(
            f"{type(error).__name__}: {str(error)}",
            exc_info=error,
            extra={'context': error_context}
        )


# Global logger cache
_logger_cache: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """Get or create a structured logger instance.

    Example:
        from landgrid.infrastructure.logging import get_logger
        logger = get_logger(__name__)
    """
    if name in _logger_cache:
        return _logger_cache[name]

    original_class = logging.getLoggerClass()
    logging.setLoggerClass(StructuredLogger)

    try:
        logger = logging.getLogger(name)
        _logger_cache[name] = logger
        return logger
    finally:
        logging.setLoggerClass(original_class)
