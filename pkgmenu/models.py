import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pkgmenu.config import Config

LOG_NAME_FORMAT = "pkg-menu-%Y%m%d-%H%M%S.log"


class Operation(Enum):
    """Maintenance actions exposed by the menu"""
    REFRESH_LISTS = "update"
    UPGRADE = "upgrade"
    FULL_UPGRADE = "dist-upgrade"
    SEARCH = "search"
    INSTALL = "install"
    REMOVE = "remove"
    AUTOREMOVE = "autoremove"
    AUTOCLEAN = "autoclean"

    @property
    def needs_argument(self) -> bool:
        """True for operations that take a package name or search term"""
        return self in (Operation.SEARCH, Operation.INSTALL, Operation.REMOVE)


# Order matters: lists first, orphans and cache last
AUTO_SEQUENCE: Tuple[Operation, ...] = (
    Operation.REFRESH_LISTS,
    Operation.UPGRADE,
    Operation.FULL_UPGRADE,
    Operation.AUTOREMOVE,
    Operation.AUTOCLEAN,
)


@dataclass(frozen=True)
class CommandSpec:
    """External command descriptor: binary plus ordered arguments"""
    binary: str
    args: Tuple[str, ...] = ()
    env: Tuple[Tuple[str, str], ...] = ()  # (name, value) pairs added to the child environment
    skip_blank_lines: bool = False

    @property
    def argv(self) -> List[str]:
        return [self.binary, *self.args]

    def display(self) -> str:
        """Human readable form used in announcements"""
        return " ".join(self.argv)

    @property
    def environment(self) -> Dict[str, str]:
        return dict(self.env)


@dataclass
class RunResult:
    """Outcome of one external command"""
    command: CommandSpec
    returncode: int
    duration: float = 0.0
    error: Optional[str] = None  # set when the command never started

    @property
    def success(self) -> bool:
        return self.returncode == 0 and self.error is None


@dataclass(frozen=True)
class Session:
    """One program run, bound to a single log file"""
    started_at: datetime
    log_path: str
    elevated: bool

    @classmethod
    def start(cls, config: Config, now: Optional[datetime] = None,
              euid: Optional[int] = None) -> "Session":
        """Create the Session for this run

        Args:
            config: Run configuration (provides the log directory)
            now: Start time, defaults to the current local time
            euid: Effective user id, defaults to os.geteuid()

        Returns:
            Session whose log file is named after the start time
        """
        started_at = now or datetime.now()
        if euid is None:
            euid = os.geteuid()
        log_path = os.path.join(config.log_dir, started_at.strftime(LOG_NAME_FORMAT))
        return cls(started_at=started_at, log_path=log_path, elevated=euid == 0)
