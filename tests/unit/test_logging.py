"""Unit tests for structured logging."""

import json
import logging
from unittest.mock import MagicMock, patch

import pytest
import structlog

from mesher.core.config import LoggingConfig
from mesher.utils.logging import (
    QUIET_LIBRARIES,
    _renderer,
    setup_logging,
    get_logger,
    log_performance,
    log_mesher_result,
    StructuredLogger,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Keep handlers installed by setup_logging from leaking across tests."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def logging_config():
    """Create test logging configuration."""
    return LoggingConfig(
        level="INFO",
        format="json",
        colorize=False,
        add_caller_info=True,
    )


@pytest.fixture
def mock_mesher_result():
    """Create mock mesher result."""
    result = MagicMock()
    result.success = True
    result.mesh.id = "mesh_abc"
    result.error = None
    result.metrics = {
        "total_time": 0.05,
        "vertex_count": 8,
        "face_count": 12,
    }
    return result


class TestLoggingSetup:
    """Test logging setup functionality."""

    def test_setup_logging_json(self, logging_config):
        """Test JSON logging setup."""
        logger = setup_logging(logging_config)

        assert logger is not None
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")

    def test_setup_logging_console(self):
        """Test console logging setup."""
        logger = setup_logging(LoggingConfig(format="console"))

        assert logger is not None

    def test_setup_logging_plain(self):
        """Test plain logging setup."""
        logger = setup_logging(LoggingConfig(format="plain"))

        assert logger is not None

    def test_setup_logging_with_file(self, tmp_path):
        """Test that file output is always JSON."""
        log_file = tmp_path / "logs" / "mesher.log"

        logger = setup_logging(LoggingConfig(format="plain"), log_file=log_file)
        logger.info("mesh_generated", mesh_id="mesh_abc")
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["event"] == "mesh_generated"
        assert record["mesh_id"] == "mesh_abc"
        assert record["level"] == "info"

    def test_log_file_from_config(self, tmp_path):
        """Test log file taken from configuration."""
        log_file = tmp_path / "mesher.log"

        setup_logging(LoggingConfig(log_file=log_file))

        assert log_file.parent.exists()
        assert any(
            isinstance(handler, logging.FileHandler)
            for handler in logging.getLogger().handlers
        )

    def test_get_logger(self):
        """Test getting logger instance."""
        logger = get_logger("mesher.test")

        assert logger is not None
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")


class TestLogHelpers:
    """Test logging helper functions."""

    def test_log_performance(self):
        """Test performance logging."""
        logger = get_logger("test")

        with patch.object(logger, "info") as mock_info:
            log_performance(logger, "optimize", 1.5, vertices_after=8)

            mock_info.assert_called_once_with(
                "performance",
                operation="optimize",
                duration_ms=1500.0,
                vertices_after=8,
            )

    def test_log_mesher_result_success(self, mock_mesher_result):
        """Test logging successful mesher call."""
        logger = get_logger("test")

        with patch.object(logger, "info") as mock_info:
            log_mesher_result(logger, "generate_from_text", mock_mesher_result)

            mock_info.assert_called_once()
            call_args = mock_info.call_args
            assert call_args[0][0] == "mesher_success"
            assert call_args[1]["operation"] == "generate_from_text"
            assert call_args[1]["mesh_id"] == "mesh_abc"
            assert call_args[1]["vertex_count"] == 8

    def test_log_mesher_result_failure(self, mock_mesher_result):
        """Test logging failed mesher call."""
        mock_mesher_result.success = False
        mock_mesher_result.mesh = None
        mock_mesher_result.error = "Test error"

        logger = get_logger("test")

        with patch.object(logger, "error") as mock_error:
            log_mesher_result(logger, "generate_from_images", mock_mesher_result)

            mock_error.assert_called_once()
            call_args = mock_error.call_args
            assert call_args[0][0] == "mesher_failed"
            assert call_args[1]["error"] == "Test error"
            assert call_args[1]["total_time"] == 0.05


class TestStructuredLogger:
    """Test StructuredLogger context manager."""

    def test_structured_logger_success(self):
        """Test successful operation logging."""
        logger = get_logger("test")

        with patch.object(logger, "info") as mock_info:
            with StructuredLogger(logger, "generate_from_text", foo="bar") as ctx:
                ctx.update_context(mesh_id="mesh_abc")

            assert mock_info.call_count == 2

            start_call = mock_info.call_args_list[0]
            assert start_call[0][0] == "generate_from_text_started"
            assert start_call[1]["foo"] == "bar"

            complete_call = mock_info.call_args_list[1]
            assert complete_call[0][0] == "generate_from_text_completed"
            assert "duration_ms" in complete_call[1]
            assert complete_call[1]["mesh_id"] == "mesh_abc"

    def test_structured_logger_failure(self):
        """Test failed operation logging."""
        logger = get_logger("test")

        with patch.object(logger, "info") as mock_info:
            with patch.object(logger, "error") as mock_error:
                with pytest.raises(ValueError):
                    with StructuredLogger(logger, "test_op"):
                        raise ValueError("Test error")

                assert mock_info.call_count == 1
                assert mock_info.call_args[0][0] == "test_op_started"

                assert mock_error.call_count == 1
                error_call = mock_error.call_args
                assert error_call[0][0] == "test_op_failed"
                assert error_call[1]["error"] == "Test error"
                assert error_call[1]["error_type"] == "ValueError"
                assert "duration_ms" in error_call[1]

    def test_structured_logger_update_context(self):
        """Test context updates."""
        logger = get_logger("test")

        with StructuredLogger(logger, "test_op", initial="value") as ctx:
            assert ctx.context["initial"] == "value"

            ctx.update_context(added="new_value", initial="updated")

            assert ctx.context["initial"] == "updated"
            assert ctx.context["added"] == "new_value"


class TestLogLevels:
    """Test different log levels."""

    def test_debug_level(self):
        """Test DEBUG level logging."""
        setup_logging(LoggingConfig(level="DEBUG"))

        assert logging.getLogger().level == logging.DEBUG

    def test_error_level(self):
        """Test ERROR level logging."""
        setup_logging(LoggingConfig(level="ERROR"))

        assert logging.getLogger().level == logging.ERROR

    def test_library_logging_suppressed(self):
        """Test that library logging is suppressed."""
        setup_logging(LoggingConfig(level="DEBUG"))

        assert logging.getLogger("trimesh").level == logging.WARNING
        assert logging.getLogger("numpy").level == logging.WARNING
        assert logging.getLogger("scipy").level == logging.WARNING
        assert all(logging.getLogger(name).level == logging.WARNING for name in QUIET_LIBRARIES)


class TestRenderers:
    """Test renderer selection per log format."""

    def test_json_format(self):
        """Test JSON renderer with exception formatting."""
        renderer = _renderer(LoggingConfig(format="json"))

        assert renderer[0] is structlog.processors.format_exc_info
        assert isinstance(renderer[-1], structlog.processors.JSONRenderer)

    def test_console_format_formats_exceptions_itself(self):
        """Test console renderer without a separate exception processor."""
        renderer = _renderer(LoggingConfig(format="console", colorize=False))

        assert len(renderer) == 1
        assert isinstance(renderer[0], structlog.dev.ConsoleRenderer)

    def test_plain_format(self):
        """Test key-value renderer."""
        renderer = _renderer(LoggingConfig(format="plain"))

        assert isinstance(renderer[-1], structlog.processors.KeyValueRenderer)

    def test_file_output_always_json(self):
        """Test file renderer ignores the console format."""
        renderer = _renderer(LoggingConfig(format="console"), to_file=True)

        assert isinstance(renderer[-1], structlog.processors.JSONRenderer)
