#!/usr/bin/env python3
import argparse
import logging
import os
import sys
from typing import Callable, List, Optional

from rich.console import Console

from pkgmenu import PROG_NAME, __version__
from pkgmenu.actions import ActionRegistry
from pkgmenu.adapters.apt_adapter import AptAdapter
from pkgmenu.config import Config
from pkgmenu.errors import LogSinkError, PrivilegeError, UsageError
from pkgmenu.logger import LoggerManager, render_line
from pkgmenu.models import Operation, Session
from pkgmenu.runner import ProcessRunner
from pkgmenu.spinner import Spinner

EXIT_CHOICE = "0"
FULL_SEQUENCE_CHOICE = "9"

MENU_ITEMS = [
    ("1", "Update package list", Operation.REFRESH_LISTS),
    ("2", "Upgrade installed packages", Operation.UPGRADE),
    ("3", "Dist-upgrade (full-upgrade)", Operation.FULL_UPGRADE),
    ("4", "Search for a package", Operation.SEARCH),
    ("5", "Install a package", Operation.INSTALL),
    ("6", "Remove a package", Operation.REMOVE),
    ("7", "Autoremove unused packages", Operation.AUTOREMOVE),
    ("8", "Autoclean cached package files", Operation.AUTOCLEAN),
]
MENU = {key: operation for key, _, operation in MENU_ITEMS}

EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


class MenuArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting"""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> MenuArgumentParser:
    """Build the command line parser"""
    parser = MenuArgumentParser(
        prog=PROG_NAME,
        description=f'Interactive APT package manager (v{__version__})',
        usage=f'sudo {PROG_NAME} [OPTIONS]',
        epilog='Without options an interactive menu is shown.',
        add_help=False,
        allow_abbrev=False,
    )

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument('-h', '--help', dest='mode', action='store_const', const='help',
                       help='Show this help and exit')
    modes.add_argument('-v', '--version', dest='mode', action='store_const', const='version',
                       help='Show the version and exit')
    modes.add_argument('-a', '--auto', dest='mode', action='store_const', const='auto',
                       help='Run full maintenance: '
                            'update -> upgrade -> dist-upgrade -> autoremove -> autoclean')
    parser.set_defaults(mode='interactive')
    return parser


def parse_args(argv=None):
    """Parse command line arguments

    Only the first argument is considered; anything after it is ignored.

    Raises:
        UsageError: The first argument is not a known option
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    if not argv:
        return argparse.Namespace(mode='interactive')

    first = argv[0]
    try:
        args, unknown = build_parser().parse_known_args([first])
    except UsageError:
        # e.g. "-hv" or "-a=1": a known flag used in an unsupported form
        raise UsageError(f"Unknown option: {first}") from None
    # argparse swallows a bare "--" separator
    if unknown or first == '--':
        raise UsageError(f"Unknown option: {first}")
    return args


def require_root(geteuid: Optional[Callable[[], int]] = None):
    """Refuse to continue without root privileges

    Raises:
        PrivilegeError: The effective user id is not 0
    """
    euid = (geteuid or os.geteuid)()
    if euid != 0:
        raise PrivilegeError("This program must be run as root.")


class Dispatcher:
    """Runs the one-shot maintenance sequence or the interactive menu loop"""

    def __init__(self, session: Session, sink: LoggerManager, registry: ActionRegistry):
        self.session = session
        self.sink = sink
        self.registry = registry

    def run_auto(self) -> int:
        """Run the full maintenance sequence; step failures are reported, not escalated"""
        self.registry.run_sequence()
        return 0

    def show_menu(self):
        """Render the numbered menu"""
        rule = "=" * 44
        self.sink.write(rule, style="bold blue")
        self.sink.write(f"       APT Package Manager - v{__version__}", style="bold blue")
        self.sink.write(rule, style="bold blue")
        self.sink.write("")
        for key, label, _ in MENU_ITEMS:
            self.sink.write(f" {key}) {label}")
        self.sink.write(f" {FULL_SEQUENCE_CHOICE}) Full maintenance (auto)")
        self.sink.write(f" {EXIT_CHOICE}) Exit")
        self.sink.write("")

    def handle_choice(self, choice: str):
        """Dispatch one menu selection other than exit"""
        if choice == FULL_SEQUENCE_CHOICE:
            self.registry.run_sequence()
        elif choice in MENU:
            self.registry.execute(MENU[choice])
        else:
            self.sink.warning(f"Invalid choice: '{choice}'")

    def run_interactive(self) -> int:
        """Menu loop: draw, read a choice, run it, wait for a key; until exit"""
        while True:
            self.sink.clear_screen()
            self.show_menu()
            try:
                choice = self.sink.prompt("Select [0-9]: ").strip()
            except EOFError:
                choice = EXIT_CHOICE
            self.sink.write("")

            if choice == EXIT_CHOICE:
                self.sink.success(f"Exiting. Log saved to {self.session.log_path}")
                return 0

            self.handle_choice(choice)
            self.sink.wait_for_key("Press any key to return to the menu...")


def build_dispatcher(config: Config, session: Session, sink: LoggerManager) -> Dispatcher:
    """Wire the adapter, runner and registry for a session"""
    adapter = AptAdapter(config)
    if not adapter.is_available():
        sink.warning("apt-get was not found on PATH; operations will fail.")
    runner = ProcessRunner(sink, Spinner(sink, interval=config.spinner_interval))
    return Dispatcher(session, sink, ActionRegistry(adapter, runner, sink))


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    console = Console(highlight=False, soft_wrap=True)
    err_console = Console(stderr=True, highlight=False, soft_wrap=True)
    parser = build_parser()

    try:
        args = parse_args(argv)
    except UsageError as e:
        err_console.print(render_line(logging.ERROR, str(e)))
        console.print(parser.format_help(), markup=False, end="")
        return EXIT_USAGE

    if args.mode == 'help':
        console.print(parser.format_help(), markup=False, end="")
        return 0
    if args.mode == 'version':
        console.print(f"{PROG_NAME} version {__version__}", markup=False)
        return 0

    config = Config.from_env()
    try:
        require_root()
    except PrivilegeError as e:
        err_console.print(render_line(logging.ERROR, str(e)))
        return 1

    session = Session.start(config)
    try:
        sink = LoggerManager(session.log_path, color=config.color)
    except LogSinkError as e:
        err_console.print(render_line(logging.ERROR, str(e)))
        return 1

    try:
        sink.debug(f"Session started at {session.started_at:%Y-%m-%d %H:%M:%S}, "
                   f"mode {args.mode}, log {session.log_path}")
        dispatcher = build_dispatcher(config, session, sink)
        if args.mode == 'auto':
            return dispatcher.run_auto()
        return dispatcher.run_interactive()
    except KeyboardInterrupt:
        sink.warning("Interrupted by user.")
        return EXIT_INTERRUPTED
    finally:
        sink.close()


if __name__ == '__main__':
    sys.exit(main())
