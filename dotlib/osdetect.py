"""Host OS family and container detection."""

import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

OS_RELEASE = Path("/etc/os-release")

CONTAINER_MARKERS = (".dockerenv", "run/.containerenv")
CGROUP_MARKERS = ("docker", "lxc", "containerd")


class OSFamily(Enum):
    MACOS = "macos"
    DEBIAN = "debian"
    FEDORA = "fedora"
    ARCH = "arch"
    ALPINE = "alpine"
    LINUX = "linux"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


# os-release ID -> family
_DISTRO_FAMILIES: Dict[str, OSFamily] = {
    "ubuntu": OSFamily.DEBIAN,
    "debian": OSFamily.DEBIAN,
    "fedora": OSFamily.FEDORA,
    "rhel": OSFamily.FEDORA,
    "centos": OSFamily.FEDORA,
    "rocky": OSFamily.FEDORA,
    "alma": OSFamily.FEDORA,
    "arch": OSFamily.ARCH,
    "manjaro": OSFamily.ARCH,
    "alpine": OSFamily.ALPINE,
}


@dataclass(frozen=True)
class Environment:
    """What the installer knows about the host it runs on."""
    family: OSFamily
    in_container: bool = False
    distro_id: Optional[str] = None


def parse_os_release(text: str) -> Dict[str, str]:
    """
    Parse os-release content into a dict.

    Lines are KEY=value; values may be wrapped in single or double quotes.
    Blank lines and comments are ignored.
    """
    fields = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        fields[key.strip()] = value
    return fields


def _read_os_release(os_release: Path) -> Optional[Dict[str, str]]:
    try:
        return parse_os_release(os_release.read_text(errors="replace"))
    except OSError:
        return None


def family_from_os_release(fields: Dict[str, str]) -> OSFamily:
    """Map os-release ID (then ID_LIKE, in order) to a family."""
    distro_id = fields.get("ID", "").lower()
    if distro_id in _DISTRO_FAMILIES:
        return _DISTRO_FAMILIES[distro_id]
    for like in fields.get("ID_LIKE", "").lower().split():
        if like in _DISTRO_FAMILIES:
            return _DISTRO_FAMILIES[like]
    return OSFamily.LINUX


def detect_os(
    platform_id: Optional[str] = None,
    os_release: Path = OS_RELEASE,
) -> OSFamily:
    """
    Detect the host OS family.

    Never raises: anything unrecognized degrades to LINUX (os-release
    present but unmapped) or UNKNOWN (no os-release at all).
    """
    platform_id = platform_id if platform_id is not None else sys.platform
    if platform_id.startswith("darwin"):
        return OSFamily.MACOS

    fields = _read_os_release(os_release)
    if fields is None:
        return OSFamily.UNKNOWN
    return family_from_os_release(fields)


def is_container(root: Path = Path("/")) -> bool:
    """Check for docker/podman marker files or a container cgroup."""
    for marker in CONTAINER_MARKERS:
        if (root / marker).exists():
            return True
    try:
        cgroup = (root / "proc" / "1" / "cgroup").read_text(errors="replace")
    except OSError:
        return False
    return any(name in cgroup for name in CGROUP_MARKERS)


def detect_environment(
    platform_id: Optional[str] = None,
    os_release: Path = OS_RELEASE,
    root: Path = Path("/"),
) -> Environment:
    """Detect OS family and container status in one pass."""
    family = detect_os(platform_id, os_release)
    distro_id = None
    if family is not OSFamily.MACOS:
        fields = _read_os_release(os_release)
        if fields:
            distro_id = fields.get("ID") or None
    return Environment(family=family, in_container=is_container(root), distro_id=distro_id)
