"""
Exceptions raised by pkg-menu components
"""


class PkgMenuError(Exception):
    """Base class for all pkg-menu errors"""


class PrivilegeError(PkgMenuError):
    """Raised when the process lacks the root privileges it needs"""


class LogSinkError(PkgMenuError):
    """Raised when the session log file cannot be created or opened"""


class UsageError(PkgMenuError):
    """Raised for command line arguments that cannot be interpreted"""


class LaunchError(PkgMenuError):
    """Raised when an external command could not be started at all"""

    def __init__(self, command: str, returncode: int, reason: str):
        super().__init__(f"Cannot run '{command}': {reason}")
        self.command = command
        self.returncode = returncode
        self.reason = reason
