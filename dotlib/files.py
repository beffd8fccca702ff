"""Dotfile provisioning: link or copy into place, backing up what was there."""

import shutil
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .base import BaseOrchestrator
from .config import InstallConfig
from .errors import FilesystemFailure
from .paths import DOTFILE_LINKS, LinkSpec


def _lexists(path: Path) -> bool:
    """True for files, directories and dangling symlinks."""
    return path.exists() or path.is_symlink()


def is_linked_to(target: Path, source: Path) -> bool:
    """Check whether target is a symlink resolving to source."""
    if not target.is_symlink():
        return False
    try:
        return target.resolve() == source.resolve()
    except (OSError, RuntimeError):
        # Symlink loop or unreadable link
        return False


def unique_destination(directory: Path, name: str) -> Path:
    """Pick a name inside directory that doesn't clobber an existing entry."""
    dest = directory / name
    n = 1
    while _lexists(dest):
        dest = directory / f"{name}.{n}"
        n += 1
    return dest


def copy_path(source: Path, target: Path) -> None:
    """Recursively copy a file or directory tree (symlinks kept as symlinks)."""
    if source.is_dir():
        shutil.copytree(source, target, symlinks=True)
    else:
        shutil.copy2(source, target, follow_symlinks=False)


class Provisioner(BaseOrchestrator):
    """
    Reconciles dotfile targets with their sources.

    One mode (link or copy) and one backup directory apply to a whole run.
    The backup directory is only created once something needs backing up.
    """

    def __init__(self, config: InstallConfig):
        super().__init__(dry_run=config.dry_run, verbose=config.verbose)
        self.config = config
        self.backup_dir = config.backup_dir
        self.backups: List[Path] = []

    def resolve(self, spec: LinkSpec) -> Tuple[Path, Path]:
        """Turn a LinkSpec into absolute (source, target) paths."""
        return self.config.repo_root / spec.source, self.config.home / spec.target

    def backup(self, target: Path) -> Optional[Path]:
        """
        Move an existing target into this run's backup directory.

        Returns:
            Where the target was moved, or None if nothing existed
        """
        if not _lexists(target):
            return None

        self.warn(f"Backing up existing {target.name} to {self.backup_dir}")
        dest = unique_destination(self.backup_dir, target.name)
        if self.dry_run:
            return dest

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(target), str(dest))
        except OSError as e:
            raise FilesystemFailure(f"Failed to back up {target}: {e}") from e

        self.backups.append(dest)
        self.record_change(f"Backed up {target} to {dest}")
        return dest

    def provision(self, source: Path, target: Path) -> bool:
        """
        Make target reflect source, using the run's mode.

        Returns:
            True if anything changed
        """
        if not self.config.copy_mode and is_linked_to(target, source):
            self.success(f"{target.name} already linked")
            return False

        if not _lexists(source):
            raise FilesystemFailure(f"Source {source} does not exist")

        self.backup(target)

        verb = "Copied" if self.config.copy_mode else "Linked"
        self.log_verbose(f"  {target} -> {source}")
        if self.dry_run:
            self.success(f"{verb} {target.name}")
            return True

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if self.config.copy_mode:
                copy_path(source, target)
            else:
                target.symlink_to(source, target_is_directory=source.is_dir())
        except OSError as e:
            raise FilesystemFailure(f"Failed to install {target}: {e}") from e

        self.success(f"{verb} {target.name}")
        self.record_change(f"{verb} {target}")
        return True

    def provision_all(self, links: Iterable[LinkSpec] = DOTFILE_LINKS) -> List[str]:
        """
        Provision every configured dotfile.

        Returns:
            The changes recorded during this call
        """
        if self.config.copy_mode:
            self.info("Copying dotfiles...")
        else:
            self.info("Creating symlinks...")

        start = len(self.changes)
        for spec in links:
            source, target = self.resolve(spec)
            self.provision(source, target)
        return self.changes[start:]
