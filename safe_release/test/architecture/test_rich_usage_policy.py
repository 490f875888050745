from __future__ import annotations

from ._gate import require_arch_checks_enabled
from ._utils import iter_source_files, matches_prefix, package_root, parse_imports


def test_rich_is_only_imported_by_the_console() -> None:
    require_arch_checks_enabled()

    root = package_root()
    offenders: list[str] = []
    for path in iter_source_files():
        rel = path.relative_to(root).as_posix()
        if rel == "output/console.py":
            continue
        for item in parse_imports(path):
            if matches_prefix(item.module, "rich"):
                offenders.append(f"{rel}:{item.line}: direct rich import '{item.module}'")

    assert not offenders, "Direct rich usage policy violations:\n" + "\n".join(offenders)
