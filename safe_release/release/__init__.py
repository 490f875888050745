"""Release domain: target matrix, binary registry, release commit grammar.

Pure data and parsing. Nothing in this package touches the filesystem or
runs external tools; services/ builds on it.
"""

from safe_release.release.model import Archive, ReleaseEvent, ReleaseTag, archive_basename
from safe_release.release.registry import BinaryRegistry, BinarySpec, default_registry
from safe_release.release.tags import resolve_release_tags
from safe_release.release.targets import BuildStrategy, Target, TargetMatrix, default_target_matrix

__all__ = [
    "Archive",
    "BinaryRegistry",
    "BinarySpec",
    "BuildStrategy",
    "ReleaseEvent",
    "ReleaseTag",
    "Target",
    "TargetMatrix",
    "archive_basename",
    "default_registry",
    "default_target_matrix",
    "resolve_release_tags",
]
