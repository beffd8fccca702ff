"""Run configuration, resolved once at startup."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from .osdetect import Environment, detect_environment
from .paths import BACKUP_TIMESTAMP_FORMAT, PROJECT_ROOT, get_backup_dir, get_user_home


class ProvisionMode(Enum):
    LINK = "link"
    COPY = "copy"


@dataclass(frozen=True)
class InstallConfig:
    """Everything an install run depends on; passed to each component."""
    repo_root: Path
    home: Path
    environment: Environment
    mode: ProvisionMode = ProvisionMode.LINK
    dry_run: bool = False
    verbose: bool = False
    skip_packages: bool = False
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def copy_mode(self) -> bool:
        return self.mode is ProvisionMode.COPY

    @property
    def backup_dir(self) -> Path:
        return get_backup_dir(self.home, self.started_at.strftime(BACKUP_TIMESTAMP_FORMAT))


def build_config(
    copy: bool = False,
    dry_run: bool = False,
    verbose: bool = False,
    skip_packages: bool = False,
    repo_root: Optional[Path] = None,
    home: Optional[Path] = None,
    environment: Optional[Environment] = None,
) -> InstallConfig:
    """
    Resolve an InstallConfig from CLI options and the host.

    Host lookups (home directory, OS detection) happen here and nowhere else.
    """
    return InstallConfig(
        repo_root=(repo_root or PROJECT_ROOT).resolve(),
        home=home or get_user_home(),
        environment=environment or detect_environment(),
        mode=ProvisionMode.COPY if copy else ProvisionMode.LINK,
        dry_run=dry_run,
        verbose=verbose,
        skip_packages=skip_packages,
    )
