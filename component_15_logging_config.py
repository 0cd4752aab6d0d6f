"""
component_15_logging_config.py

Logging for the GOAP planner.

Every component logs through get_logger(__name__), which returns a
StructuredLogger. Keyword context passed as extra={...} (or bound once with
bind()) ends up on the record as `extra_info` and is rendered by
GOAPLogFormatter as a trailing "key=value" list. Search timings go to the
separate "goap.performance" logger so they can be silenced on their own.

Nothing is configured on import; applications call setup_logging() once.

Usage:
    from component_15_logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Plan found", extra={"plan_length": 3, "expansions": 4})
"""

import logging
import logging.handlers
import sys
import time
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Literal, MutableMapping, Optional, Tuple, Type, Union

from common.constants import PERFORMANCE_LOGGER_NAME

CONSOLE_LOG_LEVEL: int = logging.INFO
FILE_LOG_LEVEL: int = logging.DEBUG

LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024
LOG_FILE_BACKUPS: int = 5
ERROR_FILE_MAX_BYTES: int = 5 * 1024 * 1024
ERROR_FILE_BACKUPS: int = 3


class GOAPLogFormatter(logging.Formatter):
    """
    "<time> <LEVEL> <logger>: <message> (key=value, ...)"

    The context suffix comes from record.extra_info. With colorize=True the
    whole line is wrapped in an ANSI color chosen by level.
    """

    LEVEL_COLORS: Dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET: str = "\033[0m"

    def __init__(self, colorize: bool = False, show_context: bool = True) -> None:
        super().__init__(
            fmt="%(asctime)s.%(msecs)03d %(levelname)-8s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        self.colorize = colorize
        self.show_context = show_context

    def formatMessage(self, record: logging.LogRecord) -> str:
        text = super().formatMessage(record)
        context = getattr(record, "extra_info", None)
        if self.show_context and context:
            pairs = ", ".join(f"{key}={value}" for key, value in context.items())
            text = f"{text} ({pairs})"
        return text

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if self.colorize and record.levelno in self.LEVEL_COLORS:
            text = f"{self.LEVEL_COLORS[record.levelno]}{text}{self.RESET}"
        return text


class StructuredLogger(logging.LoggerAdapter):
    """
    Adapter that moves keyword context into record.extra_info.

    Context bound on the adapter is merged with per-call context; per-call
    keys win.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        context = {**(self.extra or {}), **(kwargs.pop("extra", None) or {})}
        if context:
            kwargs["extra"] = {"extra_info": context}
        return msg, kwargs

    def bind(self, **context: Any) -> "StructuredLogger":
        """Return a logger that adds context to every record."""
        return StructuredLogger(self.logger, {**(self.extra or {}), **context})

    def log_exception(self, exc: BaseException, message: str = "", **context: Any) -> None:
        """Log exc at ERROR with its traceback attached to the record."""
        summary = f"{type(exc).__name__}: {exc}"
        self.error(
            f"{message}: {summary}" if message else summary,
            exc_info=(type(exc), exc, exc.__traceback__),
            extra=context,
        )


class PerformanceLogger:
    """
    Times the enclosed block.

    The duration is logged to "goap.performance" (INFO, or WARNING when it
    exceeds slow_ms). A failure inside the block is logged on `logger` and
    re-raised.

    Usage:
        with PerformanceLogger(logger.logger, "GOAP search", actions=5) as perf:
            planner.find_path(start, goal)
        perf.duration_ms
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation_name: str,
        slow_ms: Optional[float] = None,
        **context: Any,
    ) -> None:
        self.logger = logger
        self.operation_name = operation_name
        self.slow_ms = slow_ms
        self.context = context
        self.duration_ms: Optional[float] = None
        self._started: Optional[float] = None

    def __enter__(self) -> "PerformanceLogger":
        self._started = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Literal[False]:
        if self._started is None:
            raise RuntimeError("PerformanceLogger used without entering it")
        self.duration_ms = (time.perf_counter() - self._started) * 1000
        timing = {**self.context, "duration_ms": round(self.duration_ms, 3)}

        if exc_val is not None:
            self.logger.error(
                f"{self.operation_name} failed after {self.duration_ms:.2f}ms",
                extra={"extra_info": {**timing, "error": repr(exc_val)}},
            )
            return False

        slow = self.slow_ms is not None and self.duration_ms > self.slow_ms
        logging.getLogger(PERFORMANCE_LOGGER_NAME).log(
            logging.WARNING if slow else logging.INFO,
            f"{self.operation_name}{' (slow)' if slow else ''}: {self.duration_ms:.2f}ms",
            extra={"extra_info": timing},
        )
        return False


def _rotating_file_handler(
    path: Path, level: int, max_bytes: int, backups: int
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(GOAPLogFormatter())
    return handler


def setup_logging(
    console_level: int = CONSOLE_LOG_LEVEL,
    file_level: int = FILE_LOG_LEVEL,
    log_file: Optional[Union[str, Path]] = None,
    enable_performance_logging: bool = True,
) -> None:
    """
    Replace the root logger's handlers with the planner's.

    Args:
        console_level: Threshold for stdout
        file_level: Threshold for log_file
        log_file: If given, a rotating log at this path plus an ERROR-only
            "<stem>_errors<suffix>" file beside it
        enable_performance_logging: False silences "goap.performance"
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    # Handlers do the filtering
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(GOAPLogFormatter(colorize=sys.stdout.isatty()))
    root.addHandler(console)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        root.addHandler(
            _rotating_file_handler(log_path, file_level, LOG_FILE_MAX_BYTES, LOG_FILE_BACKUPS)
        )
        root.addHandler(
            _rotating_file_handler(
                log_path.with_name(f"{log_path.stem}_errors{log_path.suffix}"),
                logging.ERROR,
                ERROR_FILE_MAX_BYTES,
                ERROR_FILE_BACKUPS,
            )
        )

    logging.getLogger(PERFORMANCE_LOGGER_NAME).disabled = not enable_performance_logging

    get_logger(__name__).debug(
        "Logging configured",
        extra={
            "console": logging.getLevelName(console_level),
            "file": str(log_file) if log_file is not None else "-",
            "performance": enable_performance_logging,
        },
    )


def get_logger(name: str, **context: Any) -> StructuredLogger:
    """
    Structured logger for a component, optionally with bound context.

    Example:
        logger = get_logger(__name__)
        logger.info("Search started", extra={"actions": 5})
    """
    return StructuredLogger(logging.getLogger(name), context)
