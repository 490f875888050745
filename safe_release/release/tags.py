"""Release commit parsing.

A release commit subject looks like::

    chore(release): sn_node-v0.105.0/sn_cli-v0.90.0/sn_networking-v0.14.0

Everything up to the first ": " is a conventional-commit prefix. The rest is
a `/`-separated list of ``<component>-v<version>`` tokens, one per bumped
crate. Library crates appear alongside binaries; filtering happens later.
"""

from __future__ import annotations

import re

from safe_release.core.result import Err, Ok, Result
from safe_release.release.errors import ReleaseTagParseError
from safe_release.release.model import ReleaseEvent, ReleaseTag

__all__ = ["resolve_release_tags", "parse_release_token"]

_PREFIX_SEPARATOR = ": "

# Greedy component so the split happens on the last "-v".
_TOKEN_RE = re.compile(r"^(?P<component>.+)-v(?P<version>.+)$")
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)


def parse_release_token(token: str) -> Result[ReleaseTag, ReleaseTagParseError]:
    """Parse a single ``<component>-v<version>`` token."""
    m = _TOKEN_RE.match(token)
    if m is None:
        return Err(
            ReleaseTagParseError(
                message=f"release tag '{token}' is not of the form <component>-v<version>",
                token=token,
            )
        )
    component = m.group("component")
    version = m.group("version")
    if not component.strip() or component != component.strip():
        return Err(ReleaseTagParseError(f"release tag '{token}' has no component name", token))
    if _SEMVER_RE.match(version) is None:
        return Err(
            ReleaseTagParseError(
                f"release tag '{token}' has an invalid version '{version}'", token
            )
        )
    return Ok(ReleaseTag(component=component, version=version))


def resolve_release_tags(message: str) -> Result[ReleaseEvent, ReleaseTagParseError]:
    """Parse a release commit message into ordered (component, version) pairs.

    Only the subject line is read. The tag list is all-or-nothing: a single
    malformed token fails the whole message and no pairs are returned.
    """
    lines = message.strip().splitlines()
    subject = lines[0].strip() if lines else ""
    _, sep, rest = subject.partition(_PREFIX_SEPARATOR)
    tag_list = rest.strip() if sep else subject
    if not tag_list:
        return Err(ReleaseTagParseError("release commit message has no release tags"))

    tags: list[ReleaseTag] = []
    for raw in tag_list.split("/"):
        token = raw.strip()
        if not token:
            return Err(
                ReleaseTagParseError(f"empty release tag in '{tag_list}'", token=raw)
            )
        parsed = parse_release_token(token)
        if isinstance(parsed, Err):
            return parsed
        tags.append(parsed.value)
    return Ok(tuple(tags))
