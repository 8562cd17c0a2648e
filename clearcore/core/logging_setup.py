"""
Logging Setup for the ClearCore Client

Provides centralized logging configuration with colored console output,
log rotation, and per-subsystem log files.

Author: ClearCore Client Development
Created: October 2026
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds colors to log levels for console output"""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[1;31m' # Bold Red
    }
    RESET = '\033[0m'

    def format(self, record):
        # Color a copy so file handlers sharing the record stay plain
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
            )
        return super().format(record)


class SubsystemLogFilter(logging.Filter):
    """Tags each record with the client subsystem it came from"""

    def filter(self, record):
        if not hasattr(record, 'subsystem'):
            # clearcore.<subsystem>.<module>
            name_parts = record.name.split('.')
            if len(name_parts) >= 2 and name_parts[0] == 'clearcore':
                record.subsystem = name_parts[1]
            else:
                record.subsystem = 'system'

        return True


class ModuleFilter(logging.Filter):
    """Filter to only allow logs from a specific module"""

    def __init__(self, module_name: str):
        super().__init__()
        self.module_name = module_name

    def filter(self, record):
        return record.name.startswith(self.module_name)


def setup_logging(log_level: str = "INFO",
                  log_dir: Optional[Path] = None,
                  enable_console: bool = True,
                  enable_file: bool = True,
                  max_file_size: int = 10 * 1024 * 1024,  # 10MB
                  backup_count: int = 5) -> logging.Logger:
    """
    Setup centralized logging for the client

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (None for default)
        enable_console: Enable console logging
        enable_file: Enable file logging
        max_file_size: Maximum log file size before rotation
        backup_count: Number of backup log files to keep

    Returns:
        Configured root logger
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    if log_dir is None:
        log_dir = Path.home() / "clearcore_logs"
    log_dir = Path(log_dir)

    # Clear any existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(numeric_level)

    detailed_formatter = logging.Formatter(
        fmt='%(asctime)s | %(levelname)-8s | %(subsystem)-13s | %(name)-32s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_formatter = ColoredFormatter(
        fmt='%(asctime)s | %(levelname)-8s | %(subsystem)-13s | %(message)s',
        datefmt='%H:%M:%S'
    )

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(console_formatter)
        console_handler.addFilter(SubsystemLogFilter())
        root_logger.addHandler(console_handler)

    if enable_file:
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "clearcore.log",
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(detailed_formatter)
        file_handler.addFilter(SubsystemLogFilter())
        root_logger.addHandler(file_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "clearcore_errors.log",
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(detailed_formatter)
        error_handler.addFilter(SubsystemLogFilter())
        root_logger.addHandler(error_handler)

        _configure_module_loggers(log_dir, detailed_formatter, numeric_level)

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("ClearCore Client Logging Initialized")
    logger.info(f"Log Level: {log_level}")
    logger.info(f"Log Directory: {log_dir}")
    logger.info(f"Console Logging: {enable_console}")
    logger.info(f"File Logging: {enable_file}")
    logger.info("=" * 60)

    return root_logger


def _configure_module_loggers(log_dir: Path, formatter: logging.Formatter, level: int):
    """Configure dedicated log files for the chatty subsystems"""

    module_configs = [
        ('clearcore.communication', 'communication.log'),
        ('clearcore.motion', 'motion_control.log'),
    ]

    for module_name, log_filename in module_configs:
        module_logger = logging.getLogger(module_name)

        # Drop handlers from an earlier setup_logging call
        for handler in module_logger.handlers[:]:
            module_logger.removeHandler(handler)
            handler.close()

        module_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / log_filename,
            maxBytes=5 * 1024 * 1024,  # 5MB per module
            backupCount=3,
            encoding='utf-8'
        )
        module_handler.setLevel(level)
        module_handler.setFormatter(formatter)
        module_handler.addFilter(SubsystemLogFilter())
        module_handler.addFilter(ModuleFilter(module_name))
        module_logger.addHandler(module_handler)

