"""Tests for logging decorators."""

import pytest

from landgrid.infrastructure.logging import (
    LoggingContext, log_operation, log_stage, node_context, stage_context
)


class Loader:
    @log_operation("load", log_args=True)
    def load(self, path, cell_size=10.0, grid=None):
        return path

    @log_operation()
    def fail(self):
        raise ValueError("cannot parse")


class Builder:
    def __init__(self, logging_context=None):
        self.logging_context = logging_context
        self.seen = None

    @log_stage("grid_setup")
    def setup(self):
        self.seen = (stage_context.get(), node_context.get())
        return 'done'

    @log_stage("dem_loading")
    def fail(self):
        raise RuntimeError("hole in DEM")


class TestLogOperation:
    """Test operation logging."""

    def test_result_passed_through(self, recorder):
        assert Loader().load('dem.asc') == 'dem.asc'

    def test_arguments_logged(self, recorder):
        """Test that scalars are logged by value and objects by type."""
        Loader().load('dem.asc', grid=object())

        start = next(record for record in recorder.records
                     if record.getMessage() == "Starting load")
        arguments = start.context['arguments']
        assert arguments == {'path': 'dem.asc', 'cell_size': 10.0, 'grid': '<object>'}

    def test_performance_logged(self, recorder):
        Loader().load('dem.asc')

        assert recorder.records[-1].performance['operation'] == 'load'
        assert recorder.records[-1].performance['status'] == 'success'

    def test_failure_reraised(self, recorder):
        with pytest.raises(ValueError):
            Loader().fail()

        record = recorder.records[-1]
        assert record.getMessage() == "Failed fail: cannot parse"
        assert record.performance['error_type'] == 'ValueError'
        assert 'cannot parse' in record.traceback


class TestLogStage:
    """Test stage logging with and without a logging context."""

    def test_without_context(self, recorder):
        """Test that stage and node context are set for the call and restored."""
        builder = Builder()

        assert builder.setup() == 'done'

        assert builder.seen == ('grid_setup', 'stage/grid_setup')
        assert stage_context.get() is None
        assert node_context.get() is None

    def test_with_context(self):
        """Test that objects carrying a logging context use its stage scope."""
        ctx = LoggingContext('ls-2')
        builder = Builder(ctx)

        with ctx.landscape('site'):
            builder.setup()

        assert builder.seen == ('grid_setup', 'landscape_site/grid_setup')
        assert 'landscape_site/grid_setup' in ctx.get_timings()

    def test_failure_without_context(self, recorder):
        with pytest.raises(RuntimeError):
            Builder().fail()

        assert "Stage failed: dem_loading" in recorder.messages()
        assert stage_context.get() is None
