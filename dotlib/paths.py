"""Centralized path constants for dotfiles.

This module provides all path constants used throughout the installer,
including the table of dotfiles it provisions.
"""

from pathlib import Path
from typing import NamedTuple

# Project paths (relative to this file's location)
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
PACKAGES_MANIFEST = PROJECT_ROOT / "packages.toml"

# Backups of displaced targets live under $HOME/<BACKUP_DIRNAME>/<timestamp>
BACKUP_DIRNAME = ".dotfiles_backup"
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


class LinkSpec(NamedTuple):
    """A dotfile to provision: repo-relative source, home-relative target."""
    source: str
    target: str


DOTFILE_LINKS = (
    LinkSpec("tmux/tmux.conf", ".tmux.conf"),
    LinkSpec("nvim", ".config/nvim"),
)


# User paths
def get_user_home() -> Path:
    """
    Get real user's home directory (handles sudo).

    When running under sudo, returns the original user's home directory,
    not root's home.
    """
    import os
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user:
        import pwd
        try:
            return Path(pwd.getpwnam(sudo_user).pw_dir)
        except KeyError:
            pass
    return Path.home()


def get_backup_dir(home: Path, timestamp: str) -> Path:
    """
    Get the backup directory for a single run.

    Args:
        home: User home directory
        timestamp: Run start time formatted with BACKUP_TIMESTAMP_FORMAT

    Returns:
        Path to $HOME/.dotfiles_backup/<timestamp>
    """
    return home / BACKUP_DIRNAME / timestamp
