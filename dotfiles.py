#!/usr/bin/env python3
"""
dotfiles - install dependencies and link (or copy) dotfiles into $HOME.

Installs git, tmux and neovim with the host's package manager, then
provisions ~/.tmux.conf and ~/.config/nvim from this repository. Anything
already at a target is moved to ~/.dotfiles_backup/<timestamp>/ first.

Usage:
    ./dotfiles.py                   # Install packages and symlink dotfiles
    ./dotfiles.py --copy            # Copy instead of symlinking (containers)
    ./dotfiles.py --dry-run         # Show what would change
    ./dotfiles.py --skip-packages   # Only provision dotfiles
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from dotlib.base import BaseOrchestrator, BLUE, GREEN, colorize
from dotlib.config import InstallConfig, build_config
from dotlib.errors import DotfilesError
from dotlib.files import Provisioner
from dotlib.packages import PackageInstaller, load_package_manifest
from dotlib.paths import DOTFILE_LINKS, PACKAGES_MANIFEST

NEXT_STEPS = (
    "  1. Start tmux:   tmux",
    "  2. Start neovim: nvim  (plugins will auto-install)",
)

USEFUL_COMMANDS = (
    "  - :Mason       - Open LSP installer in Neovim",
    "  - :LspInstall  - Install language server",
    "  - :Lazy        - Manage Neovim plugins",
)


class Dotfiles(BaseOrchestrator):
    """Runs detect -> packages -> dotfiles, stopping at the first failure."""

    def __init__(self, config: InstallConfig):
        super().__init__(dry_run=config.dry_run, verbose=config.verbose)
        self.config = config

    def banner(self, title: str, color: str) -> None:
        line = colorize("=" * 40, color, sys.stdout)
        self.log("")
        self.log(line)
        self.log(colorize(f"{title:^40}", color, sys.stdout))
        self.log(line)
        self.log("")

    def report_environment(self) -> None:
        env = self.config.environment
        self.info(f"Detected OS: {env.family}")
        if env.distro_id:
            self.log_verbose(f"  Distribution: {env.distro_id}")
        if env.in_container:
            self.info("Running inside a container")

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def install_packages(self) -> None:
        """Ensure required system packages are installed."""
        if self.config.skip_packages:
            self.info("Skipping package installation")
            return

        family = self.config.environment.family
        manifest = self.config.repo_root / PACKAGES_MANIFEST.name
        packages = load_package_manifest(manifest, family)
        self.log_verbose(f"Packages to ensure: {', '.join(packages)}")

        installer = PackageInstaller(self.config)
        installer.ensure_packages(packages)
        self.changes.extend(installer.changes)

    def install_dotfiles(self) -> None:
        """Link or copy each dotfile into place."""
        provisioner = Provisioner(self.config)
        try:
            provisioner.provision_all(DOTFILE_LINKS)
        finally:
            self.changes.extend(provisioner.changes)

    # -------------------------------------------------------------------------
    # Full run
    # -------------------------------------------------------------------------

    def run(self) -> int:
        """
        Run every step in order.

        Returns:
            0 on success, else the exit code of the first failing step
        """
        self.banner("Dotfiles Installation", BLUE)
        self.report_environment()

        steps = (
            ("Package installation", self.install_packages),
            ("Dotfile installation", self.install_dotfiles),
        )
        for name, step in steps:
            self.log("")
            try:
                step()
            except DotfilesError as e:
                self.error(f"{name} failed: {e}")
                return e.exit_code

        self.summarize()
        self.banner("Installation Complete!", GREEN)
        self.info("Next steps:")
        for line in NEXT_STEPS:
            self.log(line)
        self.log("")
        self.info("Useful commands:")
        for line in USEFUL_COMMANDS:
            self.log(line)
        self.log("")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dotfiles.py",
        description="Install dependencies and symlink (or copy) dotfiles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--copy",
        action="store_true",
        help="Copy files instead of symlinking (useful for containers)",
    )
    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Show what would be done without making changes",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--skip-packages",
        action="store_true",
        help="Don't install git, tmux and neovim",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        config = build_config(
            copy=args.copy,
            dry_run=args.dry_run,
            verbose=args.verbose,
            skip_packages=args.skip_packages,
        )
        code = Dotfiles(config).run()
    except KeyboardInterrupt:
        print("\nAborted.")
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
