# watchrun/prompts.py

"""
Interactive collection of a watch request
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .core.actions import ActionSpec, parse_action_text
from .core.commands import CommandRegistry
from .errors import InvalidActionSpecError

logger = logging.getLogger(__name__)

Ask = Callable[[str], str]

YES = {'y', 'yes'}
NO = {'n', 'no'}


@dataclass
class WatchRequest:
    """Everything Initiator.start needs"""
    action: ActionSpec
    paths: List[str] = field(default_factory=list)
    watch_for_creations: bool = True
    recursive: bool = True


def ask_yes_no(ask: Ask, prompt: str, default: bool) -> bool:
    """Ask until the answer is yes, no or empty (the default)"""
    hint = "[Y/n]" if default else "[y/N]"
    while True:
        answer = ask(f"{prompt} {hint} ").strip().lower()
        if not answer:
            return default
        if answer in YES:
            return True
        if answer in NO:
            return False
        print("Please answer yes or no.")


def ask_paths(ask: Ask) -> List[str]:
    """Ask for paths until an empty answer"""
    paths = []
    while True:
        answer = ask("File or directory to watch (empty to finish): ").strip()
        if not answer:
            return paths
        paths.append(answer)


def ask_action(ask: Ask, commands: Optional[CommandRegistry] = None) -> ActionSpec:
    """Ask for the action until it parses"""
    while True:
        answer = ask("Command to run on change: ")
        try:
            return parse_action_text(answer, commands)
        except InvalidActionSpecError as e:
            print(f"Invalid action: {e}")


def collect_request(ask: Optional[Ask] = None, commands: Optional[CommandRegistry] = None,
                    watch_for_creations: bool = True, recursive: bool = True) -> WatchRequest:
    """
    Prompt for paths, action, creation watching and recursion, in that order

    Args:
        ask: Prompt function (input by default)
        commands: Registry used to recognize command names
        watch_for_creations: Default answer for the creation question
        recursive: Default answer for the recursion question
    """
    ask = ask or input
    paths = ask_paths(ask)
    action = ask_action(ask, commands)
    creations = ask_yes_no(ask, "Trigger on file creation?", watch_for_creations)
    recurse = ask_yes_no(ask, "Watch directories recursively?", recursive)

    request = WatchRequest(
        action=action,
        paths=paths,
        watch_for_creations=creations,
        recursive=recurse,
    )
    logger.debug(f"Collected request: {request}")
    return request
