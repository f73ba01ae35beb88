"""
Operation registry for pkg-menu
Collects any input an operation needs, runs its command and reports the outcome
"""

from typing import Dict, Iterable, List, Optional, Tuple

from pkgmenu.adapters.base import PackageManagerAdapter
from pkgmenu.models import AUTO_SEQUENCE, Operation, RunResult
from pkgmenu.runner import ProcessRunner

# operation -> (announcement, success message); {term} is the user's input
MESSAGES: Dict[Operation, Tuple[str, str]] = {
    Operation.REFRESH_LISTS: ("Updating package lists...", "Package lists updated."),
    Operation.UPGRADE: ("Upgrading packages...", "Packages upgraded."),
    Operation.FULL_UPGRADE: ("Performing dist-upgrade...", "Dist-upgrade completed."),
    Operation.SEARCH: ("Searching for packages matching '{term}'...", "Search finished."),
    Operation.INSTALL: ("Installing '{term}'...", "'{term}' installed."),
    Operation.REMOVE: ("Removing '{term}'...", "'{term}' removed."),
    Operation.AUTOREMOVE: ("Removing unused packages...", "Unused packages removed."),
    Operation.AUTOCLEAN: ("Cleaning cached package files...", "Cache cleaned."),
}

PROMPTS: Dict[Operation, str] = {
    Operation.SEARCH: "Search keyword: ",
    Operation.INSTALL: "Package name to install: ",
    Operation.REMOVE: "Package name to remove: ",
}


class ActionRegistry:
    """Maps each Operation to one run of its external command"""

    def __init__(self, adapter: PackageManagerAdapter, runner: ProcessRunner, sink):
        self.adapter = adapter
        self.runner = runner
        self.sink = sink

    def ask_term(self, operation: Operation) -> Optional[str]:
        """Prompt for the package name or search term an operation needs

        Returns:
            The input exactly as typed, or None if it was blank
        """
        term = self.sink.prompt(PROMPTS[operation])
        if not term.strip():
            self.sink.warning("No name given, nothing to do.")
            return None
        return term

    def execute(self, operation: Operation, term: Optional[str] = None) -> Optional[RunResult]:
        """Run one operation

        Args:
            operation: Operation to run
            term: Package name or search term; prompted for when the
                  operation needs one and none is given

        Returns:
            RunResult, or None when the operation was skipped for lack of input
        """
        if operation.needs_argument and term is None:
            term = self.ask_term(operation)
            if term is None:
                return None

        announce, done = MESSAGES[operation]
        self.sink.info(announce.format(term=term))

        command = self.adapter.build_command(operation, term)
        result = self.runner.run(command)

        if result.success:
            self.sink.success(done.format(term=term))
        else:
            self.sink.warning(f"Command failed (exit {result.returncode}): {command.display()}")
        return result

    def run_sequence(self, operations: Iterable[Operation] = AUTO_SEQUENCE) -> List[RunResult]:
        """Run the full maintenance sequence, continuing past failures"""
        results = [self.execute(operation) for operation in operations]
        self.sink.success("Full maintenance completed.")
        return results
