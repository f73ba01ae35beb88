import shutil
from typing import Dict, NamedTuple, Optional, Tuple

from pkgmenu.adapters.base import PackageManagerAdapter
from pkgmenu.config import Config
from pkgmenu.models import CommandSpec, Operation


class Template(NamedTuple):
    binary: str
    args: Tuple[str, ...]
    quiet: bool  # append the quiet flag
    noninteractive: bool  # run with DEBIAN_FRONTEND set


TEMPLATES: Dict[Operation, Template] = {
    Operation.REFRESH_LISTS: Template("apt-get", ("update",), True, False),
    Operation.UPGRADE: Template("apt-get", ("upgrade", "-y"), True, True),
    Operation.FULL_UPGRADE: Template("apt-get", ("dist-upgrade", "-y"), True, True),
    # Search results are the output, so no quiet flag
    Operation.SEARCH: Template("apt-cache", ("search",), False, False),
    Operation.INSTALL: Template("apt-get", ("install", "-y"), True, True),
    Operation.REMOVE: Template("apt-get", ("remove", "--purge", "-y"), True, True),
    Operation.AUTOREMOVE: Template("apt-get", ("autoremove", "--purge", "-y"), True, False),
    Operation.AUTOCLEAN: Template("apt-get", ("autoclean", "-y"), True, False),
}


class AptAdapter(PackageManagerAdapter):
    """Adapter for APT via apt-get and apt-cache"""

    name = "apt"

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def is_available(self) -> bool:
        """Check if apt-get is on PATH"""
        return shutil.which("apt-get") is not None

    def build_command(self, operation: Operation, term: Optional[str] = None) -> CommandSpec:
        """Build the apt-get/apt-cache command for an operation

        The term is appended as one argument exactly as given.

        Raises:
            ValueError: term is missing for an operation that needs one
        """
        template = TEMPLATES[operation]
        args = list(template.args)
        if template.quiet:
            args.append(self.config.quiet_flag)
        if operation.needs_argument:
            if term is None:
                raise ValueError(f"'{operation.value}' needs a package name or search term")
            args.append(term)

        env = ()
        if template.noninteractive:
            env = (("DEBIAN_FRONTEND", self.config.frontend),)

        return CommandSpec(
            binary=template.binary,
            args=tuple(args),
            env=env,
            skip_blank_lines=operation is Operation.SEARCH,
        )
