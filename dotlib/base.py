"""Base orchestrator class for dotfiles components."""

import os
import sys
from typing import List, TextIO

# ANSI colors for status prefixes
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[0;33m"
BLUE = "\033[0;34m"
NC = "\033[0m"


def use_color(stream: TextIO) -> bool:
    """Colorize only for terminals, and never when NO_COLOR is set."""
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def colorize(text: str, color: str, stream: TextIO) -> str:
    if not use_color(stream):
        return text
    return f"{color}{text}{NC}"


class BaseOrchestrator:
    """
    Base class for dotfiles orchestrator components.

    Provides common functionality for dry-run mode, leveled status lines,
    and change tracking. Dotfiles, Provisioner and PackageInstaller
    inherit from this class.
    """

    def __init__(self, dry_run: bool = False, verbose: bool = False):
        """
        Initialize the orchestrator.

        Args:
            dry_run: If True, only show what would be done without making changes
            verbose: If True, enable verbose output
        """
        self.dry_run = dry_run
        self.verbose = verbose
        self.changes: List[str] = []

    def log(self, msg: str) -> None:
        """
        Log a message with optional dry-run prefix.

        Args:
            msg: Message to log
        """
        prefix = "[DRY-RUN] " if self.dry_run else ""
        print(f"{prefix}{msg}")

    def _status(self, label: str, color: str, msg: str, stream: TextIO) -> None:
        prefix = "[DRY-RUN] " if self.dry_run else ""
        print(f"{prefix}{colorize(label, color, stream)} {msg}", file=stream)

    def info(self, msg: str) -> None:
        self._status("[INFO]", BLUE, msg, sys.stdout)

    def success(self, msg: str) -> None:
        self._status("[OK]", GREEN, msg, sys.stdout)

    def warn(self, msg: str) -> None:
        self._status("[WARN]", YELLOW, msg, sys.stdout)

    def error(self, msg: str) -> None:
        self._status("[ERROR]", RED, msg, sys.stderr)

    def log_verbose(self, msg: str) -> None:
        """
        Log a message only if verbose mode is enabled.

        Args:
            msg: Message to log
        """
        if self.verbose:
            self.log(msg)

    def record_change(self, description: str) -> None:
        """
        Record a change that was made.

        Args:
            description: Description of the change
        """
        self.changes.append(description)

    def summarize(self) -> None:
        """Print a summary of changes made."""
        self.log("")
        self.log("=" * 40)
        if self.dry_run:
            self.log("Dry-run complete - no changes were made")
        elif self.changes:
            self.log(f"Changes made: {len(self.changes)}")
            for change in self.changes:
                self.log(f"  - {change}")
        else:
            self.log("No changes needed - dotfiles are up to date")
        self.log("=" * 40)
