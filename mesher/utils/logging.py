"""Structured logging configuration using structlog."""

import logging
import sys
import time
from pathlib import Path
from typing import Any, Optional

import structlog
from structlog.processors import CallsiteParameter

from mesher.core.config import LoggingConfig

# Loggers of the numeric libraries mesher drives; kept at WARNING
QUIET_LIBRARIES = ("trimesh", "numpy", "scipy")


def _renderer(config: LoggingConfig, to_file: bool = False) -> list:
    """Final processors for a handler; log files are always JSON."""
    if to_file or config.format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    if config.format == "console":
        # ConsoleRenderer formats exceptions itself
        return [structlog.dev.ConsoleRenderer(colors=config.colorize and sys.stdout.isatty())]
    return [
        structlog.processors.format_exc_info,
        structlog.processors.KeyValueRenderer(
            key_order=["timestamp", "level", "logger", "event"],
            drop_missing=True,
        ),
    ]


def _handler(
    handler: logging.Handler,
    shared_processors: list,
    renderer: list,
) -> logging.Handler:
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderer],
        )
    )
    return handler


def setup_logging(
    config: Optional[LoggingConfig] = None,
    log_file: Optional[Path] = None,
) -> structlog.stdlib.BoundLogger:
    """Route structlog events through the root stdlib logger.

    Args:
        config: Logging configuration
        log_file: Optional log file path, overrides ``config.log_file``

    Returns:
        Logger bound to the ``mesher`` namespace
    """
    if config is None:
        config = LoggingConfig()
    log_file = log_file or config.log_file

    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt=config.timestamp_format),
    ]
    if config.add_caller_info:
        shared_processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    CallsiteParameter.FILENAME,
                    CallsiteParameter.LINENO,
                    CallsiteParameter.FUNC_NAME,
                ],
            ),
        )

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(
        _handler(logging.StreamHandler(sys.stdout), shared_processors, _renderer(config))
    )
    root_logger.setLevel(getattr(logging, config.level))

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(
            _handler(
                logging.FileHandler(log_file),
                shared_processors,
                _renderer(config, to_file=True),
            )
        )

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.get_logger("mesher")


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return structlog.get_logger(name)


def log_performance(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    duration: float,
    **kwargs: Any,
) -> None:
    """Log performance metrics.

    Args:
        logger: Logger instance
        operation: Operation name
        duration: Duration in seconds
        **kwargs: Additional metrics
    """
    logger.info(
        "performance",
        operation=operation,
        duration_ms=round(duration * 1000, 2),
        **kwargs,
    )


def log_mesher_result(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    result: Any,  # MesherResult
) -> None:
    """Log the outcome of an orchestrated mesher call.

    Args:
        logger: Logger instance
        operation: Operation name, e.g. ``generate_from_text``
        result: MesherResult object
    """
    if result.success:
        logger.info(
            "mesher_success",
            operation=operation,
            mesh_id=result.mesh.id,
            **result.metrics,
        )
    else:
        logger.error(
            "mesher_failed",
            operation=operation,
            error=result.error,
            **result.metrics,
        )


class StructuredLogger:
    """Context manager for structured logging of operations."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        operation: str,
        **context: Any,
    ):
        """Initialize structured logger context.

        Args:
            logger: Logger instance
            operation: Operation name
            **context: Additional context
        """
        self.logger = logger
        self.operation = operation
        self.context = context
        self._start_time: Optional[float] = None

    def __enter__(self) -> "StructuredLogger":
        self._start_time = time.perf_counter()
        self.logger.info(f"{self.operation}_started", **self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        duration = time.perf_counter() - self._start_time

        if exc_type is None:
            self.logger.info(
                f"{self.operation}_completed",
                duration_ms=round(duration * 1000, 2),
                **self.context,
            )
        else:
            self.logger.error(
                f"{self.operation}_failed",
                duration_ms=round(duration * 1000, 2),
                error=str(exc_val),
                error_type=exc_type.__name__,
                **self.context,
            )

    def update_context(self, **kwargs: Any) -> None:
        """Update logging context."""
        self.context.update(kwargs)
