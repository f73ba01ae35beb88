"""
Runtime configuration for pkg-menu
Built once at startup and handed to every component that renders output
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_LOG_DIR = "/var/log"
DEFAULT_SPINNER_INTERVAL = 0.1  # seconds between spinner frames


def _read_interval(raw: Optional[str]) -> float:
    """Parse the spinner interval, falling back to the default on bad input"""
    if not raw:
        return DEFAULT_SPINNER_INTERVAL
    try:
        interval = float(raw)
    except ValueError:
        return DEFAULT_SPINNER_INTERVAL
    return interval if interval > 0 else DEFAULT_SPINNER_INTERVAL


@dataclass(frozen=True)
class Config:
    """Immutable settings for one program run"""
    log_dir: str = DEFAULT_LOG_DIR
    spinner_interval: float = DEFAULT_SPINNER_INTERVAL
    color: bool = True
    quiet_flag: str = "-qq"
    frontend: str = "noninteractive"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Build a Config from environment variables

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            Config with PKGMENU_LOG_DIR, PKGMENU_SPINNER_INTERVAL and
            NO_COLOR applied over the defaults
        """
        env = os.environ if environ is None else environ
        return cls(
            log_dir=env.get("PKGMENU_LOG_DIR") or DEFAULT_LOG_DIR,
            spinner_interval=_read_interval(env.get("PKGMENU_SPINNER_INTERVAL")),
            color="NO_COLOR" not in env,
        )
