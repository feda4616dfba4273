# watchrun/core/commands.py

"""
Registry of named commands that can be used as actions
"""
import logging
from typing import Callable, Dict, List, Optional

from ..errors import InvalidActionSpecError

logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Named commands invoked with an ActionContext
    """

    def __init__(self):
        self._commands: Dict[str, Callable] = {}

    def __contains__(self, name):
        return name in self._commands

    def names(self) -> List[str]:
        return sorted(self._commands)

    def register(self, name: Optional[str] = None):
        """
        Decorator registering a command

        Args:
            name: Command name (defaults to the function name with dashes)
        """
        def decorator(func: Callable) -> Callable:
            command_name = name or func.__name__.replace('_', '-')
            if command_name in self._commands:
                logger.warning(f"Replacing command: {command_name}")
            self._commands[command_name] = func
            return func
        return decorator

    def get(self, name: str) -> Callable:
        try:
            return self._commands[name]
        except KeyError:
            raise InvalidActionSpecError(f"Unknown command: {name}") from None

    def invoke(self, name: str, context) -> None:
        """Run a registered command"""
        self.get(name)(context)


default_registry = CommandRegistry()
register_command = default_registry.register


@register_command()
def echo_event(context):
    """Print the event that triggered the action"""
    print(f"[{context.session_name}] {context.event}")
