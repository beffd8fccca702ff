"""Bootstrap installers fetched over the network (Homebrew on macOS)."""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional
from urllib.error import URLError
from urllib.request import urlopen

from .errors import DownloadFailure, PackageManagerFailure

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

# Where the Homebrew installer puts brew (Apple Silicon, Intel)
HOMEBREW_PREFIXES = (Path("/opt/homebrew/bin"), Path("/usr/local/bin"))


def fetch(url: str, timeout: int = 30) -> bytes:
    """Download a URL, raising DownloadFailure on any network error."""
    try:
        with urlopen(url, timeout=timeout) as resp:
            return resp.read()
    except (URLError, OSError) as e:
        raise DownloadFailure(f"Failed to download {url}: {e}") from e


def find_brew() -> Optional[Path]:
    """Locate brew on PATH or at the installer's default prefixes."""
    found = shutil.which("brew")
    if found:
        return Path(found)
    for prefix in HOMEBREW_PREFIXES:
        candidate = prefix / "brew"
        if candidate.exists():
            return candidate
    return None


def _add_to_path(directory: Path) -> None:
    """Make a freshly installed brew visible to later subprocess calls."""
    path = os.environ.get("PATH", "")
    if str(directory) not in path.split(os.pathsep):
        os.environ["PATH"] = str(directory) + os.pathsep + path


def run_script(script: bytes, interpreter: str = "/bin/bash") -> None:
    """Write a downloaded script to a temp file and run it."""
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(mode="wb", delete=False, suffix=".sh") as tmp:
            tmp.write(script)
            tmp_path = tmp.name
        cmd = [interpreter, tmp_path]
        try:
            subprocess.run(cmd, check=True)
        except subprocess.CalledProcessError as e:
            raise PackageManagerFailure(cmd, e.returncode) from e
    finally:
        if tmp_path and Path(tmp_path).exists():
            Path(tmp_path).unlink()


def ensure_homebrew() -> bool:
    """
    Idempotently ensure Homebrew is installed.

    Returns:
        True if Homebrew was installed by this call
    """
    brew = find_brew()
    if brew is not None:
        _add_to_path(brew.parent)
        return False

    run_script(fetch(HOMEBREW_INSTALL_URL))

    brew = find_brew()
    if brew is None:
        raise PackageManagerFailure(["brew"], 127)
    _add_to_path(brew.parent)
    return True
