"""
Centralized logging configuration for the conversion proxy.

This module provides:
- Consistent logging setup across all modules
- Environment-based configuration (development/production)
- Small formatting helpers for log messages
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Dict, Optional, Union


# ===== LOGGING CONFIGURATION =====

class LogLevel:
    """Standard log levels with string representations."""

    @staticmethod
    def from_string(level_str: str) -> int:
        """Convert string log level to integer."""
        level_map = {
            'DEBUG': logging.DEBUG,
            'INFO': logging.INFO,
            'WARNING': logging.WARNING,
            'WARN': logging.WARNING,
            'ERROR': logging.ERROR,
            'CRITICAL': logging.CRITICAL,
            'FATAL': logging.CRITICAL,
        }
        return level_map.get(level_str.upper(), logging.INFO)


class LogConfig:
    """Centralized logging configuration."""

    DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Development format (more verbose)
    DEV_FORMAT = '%(asctime)s [%(levelname)8s] %(name)s:%(lineno)d - %(message)s'

    JSON_FORMAT = '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'

    @staticmethod
    def get_log_level() -> int:
        """Get log level from environment or default to INFO (WARNING in tests)."""
        level_str = os.getenv('LOG_LEVEL', os.getenv('LOGLEVEL'))
        if level_str:
            return LogLevel.from_string(level_str)

        # In tests, default to WARNING to reduce noise unless explicitly set
        if LogConfig._is_test_environment():
            return logging.WARNING

        return logging.INFO

    @staticmethod
    def _is_test_environment() -> bool:
        if 'pytest' in sys.modules:
            return True
        return 'PYTEST_CURRENT_TEST' in os.environ

    @staticmethod
    def get_log_format() -> str:
        """Get log format based on environment."""
        format_type = os.getenv('LOG_FORMAT', 'standard').lower()

        if format_type in ('dev', 'development'):
            return LogConfig.DEV_FORMAT
        elif format_type == 'json':
            return LogConfig.JSON_FORMAT
        else:
            return LogConfig.DEFAULT_FORMAT

    @staticmethod
    def should_log_to_file() -> bool:
        return os.getenv('LOG_TO_FILE', 'false').lower() in ('true', '1', 'yes')

    @staticmethod
    def get_log_file_path() -> Optional[Path]:
        log_file = os.getenv('LOG_FILE')
        if log_file:
            return Path(log_file)
        return None


# ===== LOGGER FACTORY =====

class LoggerFactory:
    """Factory for creating pre-configured loggers."""

    _loggers: Dict[str, logging.Logger] = {}
    _configured = False

    @classmethod
    def configure_logging(cls, level: Optional[int] = None,
                          format_str: Optional[str] = None,
                          log_to_file: bool = False,
                          log_file: Optional[Union[str, Path]] = None) -> None:
        """Configure the root logger with consistent settings."""

        if cls._configured:
            return

        log_level = level or LogConfig.get_log_level()
        log_format = format_str or LogConfig.get_log_format()
        should_log_to_file = log_to_file or LogConfig.should_log_to_file()
        log_file_path = Path(log_file) if log_file else LogConfig.get_log_file_path()

        formatter = logging.Formatter(log_format)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        # Remove existing handlers to avoid duplicates
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if should_log_to_file and log_file_path:
            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_file_path,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get or create a logger with the given name."""
        if name not in cls._loggers:
            cls.configure_logging()
            cls._loggers[name] = logging.getLogger(name)

        return cls._loggers[name]


# ===== UTILITY FUNCTIONS =====

def get_logger(name: str = "convert_proxy") -> logging.Logger:
    """Convenience function to get a logger."""
    return LoggerFactory.get_logger(name)


def format_file_size(size: int) -> str:
    """Render a byte count the way the download list shows it (e.g. ``1.5 KB``)."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"
