"""
Centralized logging configuration for the decision economics engine
"""
import logging
import os
import time
from datetime import date
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data', 'logs')

# Overrides the level passed to setup_logger, e.g. DECISION_ECONOMICS_LOG_LEVEL=DEBUG
LEVEL_ENV_VAR = 'DECISION_ECONOMICS_LOG_LEVEL'


def _resolve_level(level: int) -> int:
    override = os.environ.get(LEVEL_ENV_VAR)
    if not override:
        return level
    resolved = logging.getLevelName(override.upper())
    return resolved if isinstance(resolved, int) else level


def setup_logger(name: str, level: int = logging.INFO, log_dir: Optional[str] = None) -> logging.Logger:
    """
    Return the named logger with console (and optional daily file) output.

    Args:
        name: Logger name, normally the calling module's __name__
        level: Console level unless overridden through DECISION_ECONOMICS_LOG_LEVEL
        log_dir: Directory for daily log files; used only if it already exists

    Returns:
        Configured logger instance
    """
    engine_logger = logging.getLogger(name)
    if engine_logger.handlers:
        return engine_logger

    level = _resolve_level(level)
    engine_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    engine_logger.addHandler(console)

    log_dir = log_dir or LOG_DIR
    if os.path.isdir(log_dir):
        logfile = os.path.join(log_dir, f'decision_economics_{date.today():%Y%m%d}.log')
        file_output = logging.FileHandler(logfile)
        file_output.setLevel(logging.DEBUG)
        file_output.setFormatter(formatter)
        engine_logger.addHandler(file_output)
        engine_logger.setLevel(logging.DEBUG)

    return engine_logger


class LogContext:
    """Times a block of engine work and logs its outcome"""

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.DEBUG):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.elapsed = None
        self._started = None

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.log(self.level, f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self._started
        if exc_type is not None:
            self.logger.warning(f"Failed: {self.operation} after {self.elapsed:.3f}s - {exc_val}")
        else:
            self.logger.log(self.level, f"Completed: {self.operation} in {self.elapsed:.3f}s")
        # Never suppress the exception
        return False
