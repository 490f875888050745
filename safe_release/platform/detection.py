"""Host detection.

The musl prerequisite can only be installed automatically on Debian-family
Linux hosts (the CI runners); everything else is told what to install.
"""

from __future__ import annotations

import sys
from enum import Enum
from functools import lru_cache
from pathlib import Path

__all__ = [
    "LinuxDistro",
    "classify_os_release",
    "detect_linux_distro",
]

_OS_RELEASE = Path("/etc/os-release")


class LinuxDistro(Enum):
    """Linux distribution family, named after its package manager."""

    DEBIAN = "apt-get"
    FEDORA = "dnf"
    ARCH = "pacman"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def package_manager(self) -> str:
        return self.value


# os-release ID / ID_LIKE value -> family
_FAMILY_BY_ID: dict[str, LinuxDistro] = {
    "debian": LinuxDistro.DEBIAN,
    "ubuntu": LinuxDistro.DEBIAN,
    "linuxmint": LinuxDistro.DEBIAN,
    "pop": LinuxDistro.DEBIAN,
    "fedora": LinuxDistro.FEDORA,
    "rhel": LinuxDistro.FEDORA,
    "centos": LinuxDistro.FEDORA,
    "rocky": LinuxDistro.FEDORA,
    "almalinux": LinuxDistro.FEDORA,
    "arch": LinuxDistro.ARCH,
    "manjaro": LinuxDistro.ARCH,
}


def classify_os_release(content: str) -> LinuxDistro:
    """Map /etc/os-release content to a distro family via ID, then ID_LIKE."""
    fields: dict[str, str] = {}
    for line in content.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            fields[key.strip().upper()] = value.strip().strip("\"'").lower()

    candidates = [fields.get("ID", ""), *fields.get("ID_LIKE", "").split()]
    for candidate in candidates:
        family = _FAMILY_BY_ID.get(candidate)
        if family is not None:
            return family
    return LinuxDistro.UNKNOWN


@lru_cache(maxsize=1)
def detect_linux_distro() -> LinuxDistro:
    """Distro family of this host (cached); UNKNOWN off Linux."""
    if not sys.platform.startswith("linux"):
        return LinuxDistro.UNKNOWN
    try:
        content = _OS_RELEASE.read_text(encoding="utf-8")
    except OSError:
        return LinuxDistro.UNKNOWN
    return classify_os_release(content)
