"""Process exit codes shared by every command.

CI jobs branch on these, so a caller mistake (bad platform name, malformed
release commit) is distinguishable from a toolchain or upload failure.
Values are stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    # unknown platform or binary, malformed release commit, missing version
    USER_ERROR = 1
    # missing prerequisite, no workspace, unreadable release.toml, git failure
    ENV_ERROR = 2
    # rustup, cross or cargo failed
    BUILD_ERROR = 3
    # release asset or bucket upload failed
    NETWORK_ERROR = 4
    # staged artifact or archive missing
    IO_ERROR = 5
