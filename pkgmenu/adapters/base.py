from abc import ABC, abstractmethod
from typing import Optional

from pkgmenu.models import CommandSpec, Operation


class PackageManagerAdapter(ABC):
    """Abstract base class for package manager command builders"""

    name: str = ""

    @abstractmethod
    def build_command(self, operation: Operation, term: Optional[str] = None) -> CommandSpec:
        """
        Build the command that performs an operation

        Args:
            operation: Operation to perform
            term: Package name or search term, required when
                  operation.needs_argument is True

        Returns:
            Command descriptor ready for ProcessRunner
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if this package manager is available on the system

        Returns:
            True if available, False otherwise
        """
        pass
