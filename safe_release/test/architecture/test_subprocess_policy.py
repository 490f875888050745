from __future__ import annotations

import ast

from ._gate import require_arch_checks_enabled
from ._utils import iter_source_files, package_root, read_tree


def _direct_subprocess_calls(tree: ast.AST) -> list[int]:
    lines: list[int] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
            continue
        func = node.func
        if func.attr not in {"run", "check_output", "Popen", "call"}:
            continue
        if isinstance(func.value, ast.Name) and func.value.id == "subprocess":
            lines.append(node.lineno)
    return lines


def test_subprocess_is_only_used_by_the_process_wrapper() -> None:
    require_arch_checks_enabled()

    root = package_root()
    allowlist = {"platform/process.py"}

    offenders: list[str] = []
    for path in iter_source_files():
        rel = path.relative_to(root).as_posix()
        if rel in allowlist:
            continue
        for line in _direct_subprocess_calls(read_tree(path)):
            offenders.append(f"{rel}:{line}: direct subprocess call")

    assert not offenders, "Subprocess policy violations:\n" + "\n".join(offenders)
