import pytest
from unittest.mock import patch

from pkgmenu.adapters.apt_adapter import AptAdapter
from pkgmenu.config import Config
from pkgmenu.models import Operation


EXPECTED_ARGV = {
    Operation.REFRESH_LISTS: ["apt-get", "update", "-qq"],
    Operation.UPGRADE: ["apt-get", "upgrade", "-y", "-qq"],
    Operation.FULL_UPGRADE: ["apt-get", "dist-upgrade", "-y", "-qq"],
    Operation.SEARCH: ["apt-cache", "search", "vim"],
    Operation.INSTALL: ["apt-get", "install", "-y", "-qq", "vim"],
    Operation.REMOVE: ["apt-get", "remove", "--purge", "-y", "-qq", "vim"],
    Operation.AUTOREMOVE: ["apt-get", "autoremove", "--purge", "-y", "-qq"],
    Operation.AUTOCLEAN: ["apt-get", "autoclean", "-y", "-qq"],
}


def test_apt_adapter_creation():
    """Test creating APT adapter"""
    adapter = AptAdapter()
    assert adapter is not None
    assert adapter.name == "apt"


@pytest.mark.parametrize("operation", list(Operation))
def test_command_templates(operation):
    """Test every operation maps to its fixed command"""
    adapter = AptAdapter()
    term = "vim" if operation.needs_argument else None

    command = adapter.build_command(operation, term)

    assert command.argv == EXPECTED_ARGV[operation]


def test_mutating_operations_are_noninteractive():
    """Test DEBIAN_FRONTEND is set only where apt could ask questions"""
    adapter = AptAdapter()
    noninteractive = {
        op for op in Operation
        if adapter.build_command(op, "vim" if op.needs_argument else None).environment.get("DEBIAN_FRONTEND") == "noninteractive"
    }
    assert noninteractive == {Operation.UPGRADE, Operation.FULL_UPGRADE, Operation.INSTALL, Operation.REMOVE}


def test_term_passed_as_single_verbatim_argument():
    """Test shell metacharacters are passed through as one argument"""
    term = "foo; rm -rf / && $(whoami)"
    command = AptAdapter().build_command(Operation.INSTALL, term)

    assert command.argv[-1] == term
    assert len(command.argv) == 5


def test_missing_term_rejected():
    """Test operations needing a term refuse to build without one"""
    with pytest.raises(ValueError):
        AptAdapter().build_command(Operation.REMOVE)


def test_only_search_skips_blank_lines():
    adapter = AptAdapter()
    assert adapter.build_command(Operation.SEARCH, "vim").skip_blank_lines is True
    assert adapter.build_command(Operation.UPGRADE).skip_blank_lines is False


def test_quiet_flag_comes_from_config():
    """Test the configured quiet flag is used"""
    adapter = AptAdapter(Config(quiet_flag="-q"))
    assert adapter.build_command(Operation.REFRESH_LISTS).argv == ["apt-get", "update", "-q"]


def test_apt_availability():
    """Test checking if APT is available"""
    with patch("pkgmenu.adapters.apt_adapter.shutil.which", return_value="/usr/bin/apt-get"):
        assert AptAdapter().is_available() is True
    with patch("pkgmenu.adapters.apt_adapter.shutil.which", return_value=None):
        assert AptAdapter().is_available() is False
