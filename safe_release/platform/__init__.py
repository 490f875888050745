"""Host platform access: running external tools and identifying the host."""

from .detection import LinuxDistro, classify_os_release, detect_linux_distro
from .process import ProcessError, run, run_silent

__all__ = [
    "LinuxDistro",
    "ProcessError",
    "classify_os_release",
    "detect_linux_distro",
    "run",
    "run_silent",
]
