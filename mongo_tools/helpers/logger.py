# Logging configuration
import logging
import os
from logging.handlers import TimedRotatingFileHandler
from colorlog import ColoredFormatter
from dotenv import load_dotenv

load_dotenv()

BASE_LOG_DIR = os.getenv("MONGO_TOOLS_LOG_DIR", "logs")
_initialized_loggers = set()


def setup_logger(
    logger_name="mongo_tools",
    log_file=None,
    log_level=logging.INFO,
    color=True,
    backup_count=5,
):
    """
    Set up a logger with console and file handlers

    Args:
        logger_name: Name of the logger
        log_file: Path to log file (optional, auto-generated if not provided)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        color: Enable colored console output
        backup_count: Number of rotated files to keep

    Returns:
        logging.Logger: Configured logger instance
    """
    if logger_name in _initialized_loggers:
        return logging.getLogger(logger_name)

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers = []

    log_format = "%(levelname)s - %(name)s - %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    console_handler = logging.StreamHandler()
    if color:
        formatter = ColoredFormatter(
            "%(log_color)s" + log_format,
            datefmt=date_format,
            log_colors={
                "DEBUG": "blue",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
    else:
        formatter = logging.Formatter(log_format, datefmt=date_format)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler, rotated daily at midnight
    if not log_file:
        os.makedirs(BASE_LOG_DIR, exist_ok=True)
        log_file = os.path.join(BASE_LOG_DIR, f"{logger_name}.log")
    else:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    file_log_format = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d - %(funcName)s()] - %(message)s"
    file_handler = TimedRotatingFileHandler(
        log_file,
        when="midnight",
        interval=1,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(file_log_format, datefmt=date_format))
    logger.addHandler(file_handler)

    _initialized_loggers.add(logger_name)
    return logger


def get_logger(name="mongo_tools", log_file=None, log_level=logging.INFO, color=True):
    """Get or create the logger for a module, usually called with __name__."""
    return setup_logger(
        logger_name=name,
        log_file=log_file,
        log_level=log_level,
        color=color,
    )


def set_level(level):
    """Change the level of every logger created through setup_logger."""
    for logger_name in _initialized_loggers:
        logging.getLogger(logger_name).setLevel(level)
