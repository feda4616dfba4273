# watchrun/cli.py

"""
Command line entry point
"""
import argparse
import asyncio
import importlib
import logging
import sys
from typing import List, Optional

from .core.actions import InteractiveCommand, NativeCallable, ShellCommand, resolve_callable
from .core.commands import default_registry
from .core.initiator import Initiator
from .core.scheduler import LoopScheduler
from .errors import InvalidActionSpecError, WatchSetupError
from .prompts import WatchRequest, collect_request
from .utils.config import Config, load_config
from .utils.display import ConsoleDisplay
from .utils.logger import setup_logging
from .watch.subsystem import WatchdogSubsystem

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="watchrun",
        description="Run an action whenever watched files change.",
    )
    parser.add_argument("paths", nargs="*",
                        help="files or directories to watch (default: current directory)")

    action = parser.add_mutually_exclusive_group()
    action.add_argument("-s", "--shell", metavar="CMD",
                        help="shell command to run; end it with & to run it in the background")
    action.add_argument("-c", "--call", metavar="MODULE:FUNC",
                        help="Python callable to invoke with the action context")
    action.add_argument("-n", "--command", metavar="NAME",
                        help="registered command to invoke")

    parser.add_argument("--load", metavar="MODULE", action="append", default=[],
                        help="import a module that registers commands (repeatable)")
    parser.add_argument("--no-creations", dest="watch_for_creations", action="store_false",
                        default=None, help="ignore created and renamed files")
    parser.add_argument("--no-recursive", dest="recursive", action="store_false",
                        default=None, help="watch directories themselves, not every file below them")
    parser.add_argument("--polling", action="store_true", default=None,
                        help="poll the file system instead of using OS notifications")
    parser.add_argument("--config", metavar="FILE", help="configuration file (YAML or JSON)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-format", choices=["text", "json", "color"])
    parser.add_argument("--log-file", metavar="FILE")
    parser.add_argument("--dump-config", action="store_true",
                        help="print the effective configuration as YAML and exit")
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Command line flags win over the configuration file"""
    if args.watch_for_creations is not None:
        config.watch.watch_for_creations = args.watch_for_creations
    if args.recursive is not None:
        config.watch.recursive = args.recursive
    if args.polling is not None:
        config.watch.use_polling = args.polling
    if args.log_level:
        config.log_level = args.log_level
    if args.log_format:
        config.log_format = args.log_format
    if args.log_file:
        config.log_file = args.log_file
    return config


def request_from_args(args: argparse.Namespace, config: Config) -> Optional[WatchRequest]:
    """Build the request from flags; None when no action flag was given"""
    if args.shell:
        action = ShellCommand(args.shell)
    elif args.call:
        action = NativeCallable(resolve_callable(args.call))
    elif args.command:
        action = InteractiveCommand(args.command)
    else:
        return None

    return WatchRequest(
        action=action,
        paths=list(args.paths),
        watch_for_creations=config.watch.watch_for_creations,
        recursive=config.watch.recursive,
    )


async def run(request: WatchRequest, config: Config) -> int:
    """
    Run one watch session until cancelled

    Returns:
        Process exit status
    """
    loop = asyncio.get_running_loop()
    subsystem = WatchdogSubsystem(
        use_polling=config.watch.use_polling,
        poll_interval=config.watch.poll_interval,
    )
    initiator = Initiator(
        subsystem=subsystem,
        scheduler=LoopScheduler(loop),
        display=ConsoleDisplay(config.output.results_dir),
        commands=default_registry,
    )

    # Started first so registration errors surface per watch
    subsystem.start()
    try:
        session = initiator.start(
            request.paths,
            request.action,
            watch_for_creations=request.watch_for_creations,
            recursive=request.recursive,
        )
    except (WatchSetupError, InvalidActionSpecError) as e:
        subsystem.stop()
        print(f"watchrun: {e}", file=sys.stderr)
        return 1

    print(f"Watching {len(session.watch_set)} paths. Press Ctrl+C to stop.", file=sys.stderr)

    try:
        while session.live:
            await asyncio.sleep(1)
    except asyncio.CancelledError:
        pass
    finally:
        session.cancel()
        subsystem.stop()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = apply_overrides(load_config(args.config), args)
        setup_logging(
            log_level=config.log_level,
            log_file=config.log_file,
            log_format=config.log_format,
        )
    except (OSError, ValueError) as e:
        print(f"watchrun: cannot load configuration: {e}", file=sys.stderr)
        return 2

    if args.dump_config:
        print(config.to_yaml(), end="")
        return 0

    for module in args.load:
        importlib.import_module(module)

    try:
        request = request_from_args(args, config)
        if request is None:
            request = collect_request(
                commands=default_registry,
                watch_for_creations=config.watch.watch_for_creations,
                recursive=config.watch.recursive,
            )
            # Paths on the command line win over an empty answer
            request.paths = request.paths or list(args.paths)
    except InvalidActionSpecError as e:
        print(f"watchrun: {e}", file=sys.stderr)
        return 1
    except (EOFError, KeyboardInterrupt):
        print(file=sys.stderr)
        return 1

    try:
        return asyncio.run(run(request, config))
    except KeyboardInterrupt:
        print("\nStopped.", file=sys.stderr)
        return 0


if __name__ == "__main__":
    sys.exit(main())
