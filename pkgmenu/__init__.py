"""
pkg-menu: interactive APT maintenance front-end
"""

__version__ = "2.1"
PROG_NAME = "pkg-menu"
