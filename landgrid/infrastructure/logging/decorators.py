"""Decorators for automatic logging and error capture."""

import functools
import time
import inspect
from typing import Callable, Any, Optional, TypeVar

from .structured_logger import get_logger, stage_context, node_context

F = TypeVar('F', bound=Callable[..., Any])


def _describe_arguments(func: Callable, args, kwargs) -> dict:
    bound_args = inspect.signature(func).bind(*args, **kwargs)
    bound_args.apply_defaults()

    arg_info = {}
    for arg_name, arg_value in bound_args.arguments.items():
        if arg_name == 'self':
            continue
        if isinstance(arg_value, (str, int, float, bool)) or arg_value is None:
            arg_info[arg_name] = arg_value
        else:
            arg_info[arg_name] = f"<{type(arg_value).__name__}>"
    return arg_info


def log_operation(operation_name: Optional[str] = None,
                  log_args: bool = False,
                  log_performance: bool = True):
    """Decorator to log operation execution and capture errors.

    Args:
        operation_name: Custom operation name (defaults to function name)
        log_args: Whether to log scalar function arguments
        log_performance: Whether to log performance metrics

    Example:
        @log_operation("load_esri_ascii", log_args=True)
        def load_from_file(self, path):
            ...
    """
    def decorator(func: F) -> F:
        name = operation_name or func.__name__
        logger = get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            start_time = time.time()
            context = {'operation': name}
            if log_args:
                context['arguments'] = _describe_arguments(func, args, kwargs)

            try:
                logger.debug(f"Starting {name}", extra={'context': context})
                result = func(*args, **kwargs)

                if log_performance:
                    logger.log_performance(name, time.time() - start_time, status='success')
                else:
                    logger.debug(f"Completed {name}", extra={'context': context})
                return result

            except Exception as e:
                duration = time.time() - start_time
                logger.error(
                    f"Failed {name}: {str(e)}",
                    exc_info=True,
                    extra={
                        'context': context,
                        'performance': {
                            'duration': duration,
                            'status': 'failed',
                            'error_type': type(e).__name__
                        }
                    }
                )
                raise

        return wrapper  # type: ignore
    return decorator


def log_stage(stage_name: str):
    """Decorator for setup stages on objects that may carry a ``logging_context``.

    Example:
        @log_stage("stand_indexing")
        def load_stand_grid(self, path):
            ...
    """
    def decorator(func: F) -> F:
        logger = get_logger(func.__module__)

        @functools.wraps(func)
        def wrapper(self, *args, **kwargs) -> Any:
            logging_context = getattr(self, 'logging_context', None)
            if logging_context is not None:
                with logging_context.stage(stage_name):
                    return func(self, *args, **kwargs)

            start_time = time.time()
            stage_token = stage_context.set(stage_name)
            current_node = node_context.get()
            node_token = node_context.set(
                f"{current_node}/{stage_name}" if current_node else f"stage/{stage_name}"
            )

            try:
                logger.info(f"Stage started: {stage_name}")
                result = func(self, *args, **kwargs)
                logger.log_performance(f"stage_{stage_name}", time.time() - start_time,
                                       status='completed')
                return result

            except Exception:
                logger.error(
                    f"Stage failed: {stage_name}",
                    exc_info=True,
                    extra={
                        'performance': {
                            'duration': time.time() - start_time,
                            'status': 'failed'
                        }
                    }
                )
                raise
            finally:
                node_context.reset(node_token)
                stage_context.reset(stage_token)

        return wrapper  # type: ignore
    return decorator
