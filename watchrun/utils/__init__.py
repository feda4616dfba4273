# watchrun/utils/__init__.py

"""
watchrun utilities: configuration, logging, result display
"""
from .config import Config, load_config
from .display import ConsoleDisplay, ResultDisplay
from .logger import setup_logging, session_logger, log_exception

__all__ = [
    'Config', 'load_config',
    'ConsoleDisplay', 'ResultDisplay',
    'setup_logging', 'session_logger', 'log_exception',
]
