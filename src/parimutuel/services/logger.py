"""
Logger Service Module
Centralized logging configuration with rotation, colored console and JSON output
"""

import json
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import colorlog

_RESERVED_RECORD_KEYS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    ]
)


class LoggerService:
    """
    Centralized logging service with support for:
    - Colored console output
    - Rotating ledger and error log files
    - JSON structured logging
    """

    def __init__(self, config: dict[str, Any] | None = None):
        self.config = self._default_config()
        self.config.update({k: v for k, v in (config or {}).items() if v is not None})
        self.handlers: list[logging.Handler] = []

        self.log_dir = Path(self.config["log_dir"])
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            if not os.access(self.log_dir, os.W_OK):
                raise PermissionError(f"Log directory not writable: {self.log_dir}")
        except OSError:
            # Fall back to a local directory rather than failing startup
            self.log_dir = Path("./logs")
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self._setup_root_logger()

    def _default_config(self) -> dict[str, Any]:
        return {
            "log_dir": "./logs",
            "log_level": "INFO",
            "console_level": "INFO",
            "file_level": "DEBUG",
            "max_bytes": 5 * 1024 * 1024,
            "backup_count": 3,
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "date_format": "%Y-%m-%d %H:%M:%S",
            "colored_output": True,
            "json_logs": False,
            "file_output": True,
        }

    def _setup_root_logger(self):
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)  # Filter at handler level
        root_logger.handlers = []

        self._add(root_logger, self._create_console_handler())
        if self.config.get("file_output"):
            self._add(root_logger, self._create_file_handler("ledger.log"))
            self._add(root_logger, self._create_file_handler("errors.log", level=logging.ERROR))

    def _add(self, target: logging.Logger, handler: logging.Handler):
        target.addHandler(handler)
        self.handlers.append(handler)

    def _create_console_handler(self) -> logging.Handler:
        console_handler = logging.StreamHandler(sys.stdout)
        console_level = self.config.get("console_level") or self.config.get("log_level", "INFO")
        console_handler.setLevel(getattr(logging, str(console_level).upper(), logging.INFO))

        if self.config.get("colored_output"):
            formatter = colorlog.ColoredFormatter(
                "%(log_color)s" + self.config["format"],
                datefmt=self.config.get("date_format"),
                log_colors={
                    "DEBUG": "cyan",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "red,bg_white",
                },
            )
        else:
            formatter = logging.Formatter(
                self.config.get("format"), datefmt=self.config.get("date_format")
            )

        console_handler.setFormatter(formatter)
        return console_handler

    def _create_file_handler(self, filename: str, level: int | None = None) -> logging.Handler:
        file_path = self.log_dir / filename

        try:
            handler: logging.Handler = RotatingFileHandler(
                file_path,
                maxBytes=self.config.get("max_bytes"),
                backupCount=self.config.get("backup_count"),
            )
        except OSError:
            # Read-only filesystems (CI, sandboxes) still get output
            handler = logging.StreamHandler(sys.stderr)

        handler.setLevel(level or getattr(logging, self.config.get("file_level", "DEBUG")))

        if self.config.get("json_logs"):
            handler.setFormatter(JsonFormatter())
        else:
            handler.setFormatter(
                logging.Formatter(self.config.get("format"), datefmt=self.config.get("date_format"))
            )
        return handler

    def cleanup(self):
        """Detach and close every handler this service installed"""
        root_logger = logging.getLogger()
        for handler in self.handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self.handlers.clear()


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Fields passed via `extra=`
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class PerformanceLogger:
    """Context manager that logs how long an operation took"""

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = (datetime.now() - self.start_time).total_seconds()

        if exc_type:
            self.logger.warning(
                f"Operation '{self.operation}' failed after {duration:.3f}s: {exc_val}"
            )
        else:
            self.logger.info(f"Operation '{self.operation}' completed in {duration:.3f}s")


_logger_service: LoggerService | None = None


def setup_logging(config: dict | None = None) -> logging.Logger:
    """
    Configure logging once and return the root logger

    Args:
        config: Optional overrides for the LoggerService configuration
    """
    global _logger_service

    if _logger_service is not None:
        return logging.getLogger()

    from parimutuel.config import config as app_config

    log_config = {
        "log_dir": str(app_config.FILES.get("log_dir", "./logs")),
        "log_level": app_config.LOGGING.get("level", "INFO"),
        "console_level": app_config.LOGGING.get("level", "INFO"),
        "max_bytes": app_config.LOGGING.get("max_bytes"),
        "backup_count": app_config.LOGGING.get("backup_count"),
        "format": app_config.LOGGING.get("format"),
        "date_format": app_config.LOGGING.get("date_format"),
        "json_logs": app_config.LOGGING.get("json_logs", False),
    }
    if config:
        log_config.update(config)

    _logger_service = LoggerService(log_config)
    return logging.getLogger()


def get_logger(name: str) -> logging.Logger:
    """Get a named logger, configuring logging on first use"""
    if _logger_service is None:
        setup_logging()
    return logging.getLogger(name)


def cleanup_logging():
    """Remove installed handlers so logging can be configured again"""
    global _logger_service

    if _logger_service:
        _logger_service.cleanup()
        _logger_service = None
