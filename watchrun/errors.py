# watchrun/errors.py

"""
Exception hierarchy for watchrun
"""
from pathlib import Path
from typing import Any, Optional, Union


class WatchRunError(Exception):
    """Base class for all watchrun errors"""


class WatchRegistrationError(WatchRunError):
    """A single subscription could not be registered"""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot watch {self.path}: {reason}")


class WatchSetupError(WatchRunError):
    """Watch setup failed as a whole; no session was created"""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Watch setup failed: {cause}")


class ActionExecutionError(WatchRunError):
    """The triggered action raised while running"""

    def __init__(self, spec: Any, cause: Optional[BaseException] = None):
        self.spec = spec
        self.cause = cause
        message = f"Action {spec} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class InvalidActionSpecError(WatchRunError):
    """An action value does not match any recognized shape"""
