"""
Utilities Module
Logging helpers shared by the engine packages
"""
from utils.logger import setup_logger, LogContext

__all__ = [
    'setup_logger',
    'LogContext'
]
