"""Subcommand dispatcher shared by the command line entry points."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from utils.config import Config
from utils.error_tracker import ErrorTracker
from utils.logger import Logger, LoggerType

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class Command:
    """Represents a single CLI command."""

    name: str
    handler: Callable[[argparse.Namespace], None]
    add_arguments: Optional[Callable[[argparse.ArgumentParser], None]] = None
    help: str | None = None


@dataclass
class CommandDispatcher:
    """
    Register subcommands and run the selected one.

    Global options come before the subcommand: ``--config`` loads a YAML
    file over the settings defaults and ``--log-level`` overrides the level
    from that file.
    """

    description: str
    commands: Iterable[Command] = field(default_factory=list)

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(description=self.description)
        parser.add_argument(
            "--config", default=None, help="YAML config overriding the defaults"
        )
        parser.add_argument("--log-level", choices=LOG_LEVELS, default=None)
        subparsers = parser.add_subparsers(dest="command")
        for cmd in self.commands:
            sp = subparsers.add_parser(cmd.name, help=cmd.help)
            if cmd.add_arguments:
                cmd.add_arguments(sp)
            sp.set_defaults(func=cmd.handler)
        return parser

    def run(
        self,
        args: Optional[list[str]] = None,
        *,
        logger: Optional[LoggerType] = None,
        track_exceptions: bool = True,
    ) -> None:
        """Parse ``args``, apply global options and dispatch the command."""
        logger = logger or Logger.get_logger("utils.cli")
        if track_exceptions:
            ErrorTracker.install_excepthook()
            ErrorTracker.install_signal_handlers()

        parser = self._build_parser()
        try:
            ns = parser.parse_args(args)
        except SystemExit as exc:  # argparse exits on bad usage
            logger.error(f"Argument parsing failed: {exc}")
            raise

        if ns.config is not None:
            Config.load(ns.config, force_reload=True)
        if ns.log_level is not None:
            Logger.configure(level=ns.log_level)
            logger.debug(f"Logging at {ns.log_level} to {Logger.log_file()}")

        if not hasattr(ns, "func"):
            parser.print_help()
            return
        ns.func(ns)
