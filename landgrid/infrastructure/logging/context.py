"""Logging context management for landscape setup correlation."""

from contextlib import contextmanager
from typing import Optional, Dict, Any, List
import uuid
import time

from .structured_logger import (
    landscape_context, node_context, stage_context, get_logger, _utc_timestamp
)


class LoggingContext:
    """Manages logging context while a landscape is assembled.

    Provides hierarchical context for a landscape, its setup stages
    (grid setup, DEM load, stand indexing) and operations inside them.
    Context is propagated to all log messages within scope.
    """

    def __init__(self, landscape_id: Optional[str] = None):
        self.landscape_id = landscape_id or str(uuid.uuid4())
        self.node_stack: List[str] = []
        self.stage_stack: List[str] = []
        self.timings: Dict[str, Dict[str, Any]] = {}
        self.logger = get_logger(self.__class__.__name__)

    @contextmanager
    def landscape(self, name: str, **metadata):
        """Context for building one landscape.

        Example:
            with ctx.landscape('test_site'):
                grids.setup(world)
        """
        node_id = f"landscape_{name}"
        start_time = time.time()

        landscape_token = landscape_context.set(self.landscape_id)
        node_context.set(node_id)
        self.node_stack.append(node_id)

        self.logger.info(
            f"Landscape setup started: {name}",
            extra={'context': {'landscape_name': name, **metadata}}
        )

        try:
            yield self
        finally:
            duration = time.time() - start_time
            self.logger.log_performance(f"landscape_{name}", duration, status='completed')

            self.node_stack.pop()
            node_context.set(self.node_stack[-1] if self.node_stack else None)
            landscape_context.reset(landscape_token)

    @contextmanager
    def stage(self, name: str, **metadata):
        """Context for a setup stage.

        Example:
            with ctx.stage('dem_loading', path=str(path)):
                dem.load_from_file(path, grids.height_grid)
        """
        stage_context.set(name)
        self.stage_stack.append(name)

        parent = self.node_stack[-1] if self.node_stack else "unknown"
        node_id = f"{parent}/{name}"
        node_context.set(node_id)
        self.node_stack.append(node_id)

        start_time = time.time()
        self.logger.info(
            f"Stage started: {name}",
            extra={'context': {'stage_name': name, **metadata}}
        )

        status = 'failed'
        try:
            yield self
            status = 'completed'
        except Exception as e:
            self.logger.log_error_with_context(e, operation=f"stage_{name}")
            raise
        finally:
            duration = time.time() - start_time
            self.timings[node_id] = {
                'duration': duration,
                'status': status,
                'timestamp': _utc_timestamp()
            }
            self.logger.log_performance(f"stage_{name}", duration, status=status)

            self.stage_stack.pop()
            self.node_stack.pop()
            stage_context.set(self.stage_stack[-1] if self.stage_stack else None)
            node_context.set(self.node_stack[-1] if self.node_stack else None)

    @contextmanager
    def operation(self, name: str, **metadata):
        """Context for specific operations within stages."""
        parent = self.node_stack[-1] if self.node_stack else "unknown"
        node_id = f"{parent}/{name}"
        node_context.set(node_id)
        self.node_stack.append(node_id)

        start_time = time.time()
        self.logger.debug(f"Operation started: {name}", extra={'context': metadata})

        status = 'failed'
        try:
            yield self
            status = 'success'
        except Exception as e:
            self.logger.log_error_with_context(e, operation=name, **metadata)
            raise
        finally:
            duration = time.time() - start_time
            self.timings[node_id] = {
                'duration': duration,
                'status': status,
                'timestamp': _utc_timestamp()
            }
            self.logger.log_performance(name, duration, status=status, **metadata)

            self.node_stack.pop()
            node_context.set(self.node_stack[-1] if self.node_stack else None)

    def get_timings(self) -> Dict[str, Dict[str, Any]]:
        """Get timing information keyed by node ID."""
        return self.timings.copy()

    @property
    def current_node(self) -> Optional[str]:
        return self.node_stack[-1] if self.node_stack else None

    @property
    def current_stage(self) -> Optional[str]:
        return self.stage_stack[-1] if self.stage_stack else None

