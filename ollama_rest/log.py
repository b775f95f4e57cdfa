"""
Log sink setup for the ``ollama_rest`` logger.

The client only emits records when ``enable_logging`` is set. Host
applications that already configure logging can ignore this module.
"""
import logging
import sys
from pathlib import Path

LOGGER_NAME = "ollama_rest"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "info", log_path: str = "") -> logging.Logger:
    """Configure the package logger with console and optional file handlers."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(level)

    # Clear existing handlers
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    # Console handler (always)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    # File handler (if configured)
    if log_path:
        try:
            path = Path(log_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)
            package_logger.info("Logging to file: %s", path)
        except OSError as e:
            package_logger.error("Failed to set up file logging: %s", e)

    package_logger.info("Logger initialized")
    return package_logger


def ensure_logging(log_level: str = "info", log_path: str = "") -> logging.Logger:
    """Set up the package logger unless a handler is already attached."""
    package_logger = logging.getLogger(LOGGER_NAME)
    if package_logger.handlers:
        return package_logger
    return setup_logging(log_level, log_path)
