"""Cross-platform package management with idempotent operations."""

import subprocess
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .base import BaseOrchestrator
from .bootstrap import ensure_homebrew
from .config import InstallConfig
from .errors import ConfigError, PackageManagerFailure
from .osdetect import OSFamily

DEFAULT_PACKAGES = ("git", "tmux", "neovim")


@dataclass(frozen=True)
class PackageBackend:
    """
    How one OS family checks for and installs packages.

    Attributes:
        check_cmd: Command prefix; the package name is appended. Exit 0 = installed.
        install_cmd: Command prefix; package name(s) are appended.
        refresh_cmd: Run once before installing (e.g. apt-get update), if set.
        batch: Install all missing packages in one command, else one per package.
    """
    check_cmd: Tuple[str, ...]
    install_cmd: Tuple[str, ...]
    refresh_cmd: Optional[Tuple[str, ...]] = None
    batch: bool = True


BACKENDS: Dict[OSFamily, PackageBackend] = {
    OSFamily.MACOS: PackageBackend(
        check_cmd=("brew", "list"),
        install_cmd=("brew", "install"),
        batch=False,
    ),
    OSFamily.DEBIAN: PackageBackend(
        check_cmd=("dpkg", "-l"),
        install_cmd=("sudo", "apt-get", "install", "-y"),
        refresh_cmd=("sudo", "apt-get", "update"),
    ),
    OSFamily.FEDORA: PackageBackend(
        check_cmd=("rpm", "-q"),
        install_cmd=("sudo", "dnf", "install", "-y"),
    ),
    OSFamily.ARCH: PackageBackend(
        check_cmd=("pacman", "-Q"),
        install_cmd=("sudo", "pacman", "-S", "--noconfirm"),
    ),
    OSFamily.ALPINE: PackageBackend(
        check_cmd=("apk", "info", "-e"),
        install_cmd=("sudo", "apk", "add"),
    ),
}


def get_backend(family: OSFamily) -> Optional[PackageBackend]:
    """Get the package backend for a family (None for linux/unknown)."""
    return BACKENDS.get(family)


def is_installed(package: str, backend: PackageBackend) -> bool:
    """Check if a package is already installed."""
    cmd = [*backend.check_cmd, package]
    try:
        result = subprocess.run(cmd, capture_output=True)
    except FileNotFoundError:
        return False
    except OSError as e:
        raise PackageManagerFailure(cmd, 126) from e
    return result.returncode == 0


def missing_packages(packages: Sequence[str], backend: PackageBackend) -> List[str]:
    """Scan every package and return the ones not installed, in order."""
    return [p for p in packages if not is_installed(p, backend)]


def _run_checked(cmd: List[str]) -> None:
    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as e:
        raise PackageManagerFailure(cmd, e.returncode) from e
    except FileNotFoundError as e:
        raise PackageManagerFailure(cmd, 127) from e
    except OSError as e:
        raise PackageManagerFailure(cmd, 126) from e


def install(packages: Sequence[str], backend: PackageBackend) -> None:
    """Install packages (not idempotent - use PackageInstaller.ensure_packages instead)."""
    if not packages:
        return

    if backend.refresh_cmd:
        _run_checked(list(backend.refresh_cmd))

    if backend.batch:
        _run_checked([*backend.install_cmd, *packages])
    else:
        for pkg in packages:
            _run_checked([*backend.install_cmd, pkg])


def load_package_manifest(manifest_path: Path, family: OSFamily) -> List[str]:
    """
    Resolve the packages.toml manifest for one OS family.

    Every `[<group>] packages = [...]` table contributes, in file order.
    `[aliases.<family>]` renames a package; an empty alias skips it.
    A missing manifest means DEFAULT_PACKAGES.
    """
    if not manifest_path.exists():
        return list(DEFAULT_PACKAGES)

    try:
        with open(manifest_path, "rb") as f:
            manifest = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read {manifest_path}: {e}") from e

    aliases = manifest.get("aliases", {}).get(family.value, {})

    packages = []
    for name, group in manifest.items():
        if name == "aliases" or not isinstance(group, dict):
            continue
        for pkg in group.get("packages", []):
            resolved = aliases.get(pkg, pkg)
            if resolved and resolved not in packages:
                packages.append(resolved)

    return packages


class PackageInstaller(BaseOrchestrator):
    """Ensures the required packages are present using the host's package manager."""

    def __init__(self, config: InstallConfig):
        super().__init__(dry_run=config.dry_run, verbose=config.verbose)
        self.config = config
        self.family = config.environment.family

    def ensure_packages(self, packages: Sequence[str]) -> List[str]:
        """
        Idempotently ensure packages are installed.

        Returns:
            List of packages that were newly installed (or would be, in dry-run)
        """
        backend = get_backend(self.family)
        if backend is None:
            self.warn(f"Unknown OS. Please install {_human_list(packages)} manually.")
            return []

        self.info("Checking dependencies...")

        if self.family is OSFamily.MACOS:
            if self.dry_run:
                self.log_verbose("Would ensure Homebrew is installed")
            else:
                self.log_verbose("Ensuring Homebrew is installed")
                if ensure_homebrew():
                    self.record_change("Installed Homebrew")

        to_install = missing_packages(packages, backend)
        for pkg in packages:
            if pkg not in to_install:
                self.success(f"{pkg} already installed")

        if not to_install:
            return []

        self.info(f"Installing: {' '.join(to_install)}")
        if not self.dry_run:
            install(to_install, backend)
        self.record_change(f"Installed {len(to_install)} packages: {', '.join(to_install)}")
        return to_install


def _human_list(items: Sequence[str]) -> str:
    items = list(items)
    if len(items) <= 1:
        return "".join(items)
    return ", ".join(items[:-1]) + f", and {items[-1]}"
