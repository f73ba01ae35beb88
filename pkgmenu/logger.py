"""
Logging and transcript system for pkg-menu
Mirrors every message to the terminal and to the session's append-only log file
"""

import logging
import os
import sys
import termios
import threading
import tty
from typing import Optional, TextIO

from rich.console import Console
from rich.text import Text

from pkgmenu.errors import LogSinkError

# Custom levels: OUTPUT for untagged transcript lines, SUCCESS between INFO and WARNING
OUTPUT = 21
SUCCESS = 25
logging.addLevelName(OUTPUT, "OUTPUT")
logging.addLevelName(SUCCESS, "SUCCESS")

LEVEL_TAGS = {
    logging.INFO: ("[ INFO ]", "bold blue"),
    SUCCESS: ("[  OK  ]", "bold green"),
    logging.WARNING: ("[ WARN ]", "bold yellow"),
    logging.ERROR: ("[ ERROR ]", "bold red"),
}


def render_line(levelno: int, message: str, style: Optional[str] = None) -> Text:
    """Build the console form of a message: coloured level tag plus text"""
    text = Text()
    tag = LEVEL_TAGS.get(levelno)
    if tag:
        label, tag_style = tag
        text.append(f" {label}", style=tag_style)
        text.append(" ")
    text.append(message, style=style)
    return text


def read_key(stream: TextIO) -> str:
    """Block until one key is pressed on a terminal, or one line is read otherwise"""
    if not stream.isatty():
        return stream.readline()[:1]

    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        key = os.read(fd, 1)
        # Drop the rest of a multi-byte sequence such as an arrow key
        termios.tcflush(fd, termios.TCIFLUSH)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)
    return key.decode(errors="replace")


class ConsoleHandler(logging.Handler):
    """Logging handler that renders records on a rich console"""

    def __init__(self, manager: "LoggerManager"):
        super().__init__(level=logging.INFO)
        self.manager = manager

    def emit(self, record: logging.LogRecord):
        try:
            line = render_line(record.levelno, record.getMessage(),
                               getattr(record, "style", None))
            with self.manager.terminal_lock:
                self.manager._erase_frame()
                self.manager.console.print(line, highlight=False)
                self.manager.console.file.flush()
        except Exception:
            self.handleError(record)


class LoggerManager:
    """Session output sink: one rich console plus one append-only log file"""

    def __init__(self, log_path: str, console: Optional[Console] = None,
                 stdin: Optional[TextIO] = None, color: bool = True,
                 name: str = "pkgmenu"):
        """Open the log file and attach console and file handlers

        Args:
            log_path: Log file to append to; parent directories are created
            console: Console to render on, defaults to one bound to stdout
            stdin: Stream prompts and key-presses are read from
            color: Whether the default console may emit colour codes
            name: Name of the underlying logging.Logger

        Raises:
            LogSinkError: The log directory or file is not writable
        """
        self.log_path = log_path
        self.console = console or Console(no_color=not color, highlight=False,
                                          soft_wrap=True)
        self.stdin = stdin if stdin is not None else sys.stdin
        self.terminal_lock = threading.RLock()
        self._frame_visible = False

        log_dir = os.path.dirname(log_path)
        try:
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        except OSError as e:
            raise LogSinkError(f"Cannot open log file {log_path}: {e}") from e

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        # Drop handlers left behind by an earlier session in this process
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        self.logger.addHandler(file_handler)
        self.logger.addHandler(ConsoleHandler(self))

    # ==================== Messages ====================

    def write(self, text: str, style: Optional[str] = None):
        """Emit plain transcript text, one record per line"""
        for line in text.split("\n"):
            self.logger.log(OUTPUT, line, extra={"style": style})

    def info(self, message: str):
        self.logger.info(message)

    def success(self, message: str):
        self.logger.log(SUCCESS, message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)

    def debug(self, message: str):
        """Record a message in the log file only"""
        self.logger.debug(message)

    # ==================== Terminal interaction ====================

    def prompt(self, text: str) -> str:
        """Read one line of input after showing text

        The prompt and the reply are echoed by the terminal, so they are
        recorded in the log file only.

        Raises:
            EOFError: stdin is exhausted
        """
        with self.terminal_lock:
            self._erase_frame()
        if self.stdin.isatty():
            answer = self.console.input(text, markup=False)
        else:
            self.console.print(text, end="", markup=False, highlight=False)
            line = self.stdin.readline()
            if not line:
                self.console.print()
                self.debug(text)
                raise EOFError
            answer = line.rstrip("\n")
            # Nothing echoes piped input; show it so the console matches the log
            self.console.print(answer, markup=False, emoji=False, highlight=False)
        self.debug(f"{text}{answer}")
        return answer

    def wait_for_key(self, message: str = "Press any key to continue..."):
        """Block until the user presses a key"""
        self.write("")
        self.console.print(message, end="", markup=False, highlight=False)
        self.debug(message)
        read_key(self.stdin)
        self.console.print()

    def clear_screen(self):
        """Clear the terminal; display only, nothing is logged"""
        if self.console.is_terminal:
            self.console.clear()

    def draw_frame(self, frame: str):
        """Draw a spinner frame at the start of the current line, terminal only"""
        if not self.console.is_terminal:
            return
        with self.terminal_lock:
            self.console.file.write(f"\r{frame}")
            self.console.file.flush()
            self._frame_visible = True

    def clear_frame(self):
        with self.terminal_lock:
            self._erase_frame()

    def _erase_frame(self):
        # Caller holds terminal_lock
        if self._frame_visible:
            self.console.file.write("\r \r")
            self.console.file.flush()
            self._frame_visible = False

    def close(self):
        """Flush and release both handlers; safe to call more than once"""
        for handler in list(self.logger.handlers):
            handler.flush()
            self.logger.removeHandler(handler)
            handler.close()
