"""
Logging Configuration for the Employee Records API
"""

import logging
import logging.handlers
import os
from typing import Any, Dict, Optional


class ColorLogFormatter(logging.Formatter):
    """Console formatter with colour-coded levels."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        original_levelname = record.levelname
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = original_levelname


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    enable_file_rotation: bool = True
):
    """Setup logging for the application."""

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {log_level}')

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_formatter = ColorLogFormatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if log_file:
        if enable_file_rotation:
            # Rotating file handler (10MB max, keep 5 backups)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10*1024*1024,
                backupCount=5
            )
        else:
            file_handler = logging.FileHandler(log_file)

        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    for logger_name in ['app.auth.service', 'app.employees.service', 'app.security']:
        logging.getLogger(logger_name).setLevel(numeric_level)

    # SQL echo is controlled by DATABASE_ECHO, keep the engine quiet otherwise
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    return root_logger


def log_security_event(
    event: str,
    username: Optional[str] = None,
    success: bool = True,
    details: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None
):
    """Log authentication events with a standardized format."""

    if logger is None:
        logger = logging.getLogger('app.security')

    message_parts = [f"SECURITY - {event.upper().replace('_', ' ')}"]

    if username:
        message_parts.append(f"user: {username}")

    if details:
        for key, value in details.items():
            message_parts.append(f"{key}: {value}")

    message = " | ".join(message_parts)

    if success:
        logger.info(message)
    else:
        logger.warning(message)
