"""dotfiles - installer for a personal tmux/Neovim setup."""

from .bootstrap import ensure_homebrew
from .config import InstallConfig, ProvisionMode, build_config
from .errors import ConfigError, DotfilesError, DownloadFailure, FilesystemFailure, PackageManagerFailure
from .files import Provisioner
from .osdetect import Environment, OSFamily, detect_environment, detect_os, is_container
from .packages import PackageInstaller, load_package_manifest

__all__ = [
    "InstallConfig",
    "ProvisionMode",
    "build_config",
    "ConfigError",
    "DotfilesError",
    "DownloadFailure",
    "FilesystemFailure",
    "PackageManagerFailure",
    "Provisioner",
    "Environment",
    "OSFamily",
    "detect_environment",
    "detect_os",
    "is_container",
    "PackageInstaller",
    "ensure_homebrew",
    "load_package_manifest",
]
