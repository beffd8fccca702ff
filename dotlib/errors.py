"""Error types raised by dotfiles steps.

Every step of an install run signals failure by raising one of these.
The orchestrator stops at the first one and exits with its exit code.
"""

from typing import Sequence


class DotfilesError(Exception):
    """Base class for failures that abort an install run."""

    exit_code = 1


class ConfigError(DotfilesError):
    """A config file (e.g. packages.toml) is unreadable or malformed."""


class DownloadFailure(DotfilesError):
    """A network fetch (e.g. the Homebrew installer script) failed."""


class PackageManagerFailure(DotfilesError):
    """A package manager command exited non-zero."""

    def __init__(self, cmd: Sequence[str], returncode: int):
        self.cmd = list(cmd)
        self.returncode = returncode
        super().__init__(f"Command failed with exit code {returncode}: {' '.join(self.cmd)}")

    @property
    def exit_code(self) -> int:
        # subprocess reports death by signal N as -N; shells report 128 + N
        if self.returncode < 0:
            return 128 - self.returncode
        return self.returncode or 1


class FilesystemFailure(DotfilesError):
    """Backup, directory creation, link or copy failed."""
