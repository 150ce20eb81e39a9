from __future__ import annotations

import ast

from ._utils import iter_source_files, matches_prefix, package_root, parse_imports, read_tree


def _direct_subprocess_calls(tree: ast.AST) -> list[int]:
    lines: list[int] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
            continue
        func = node.func
        if func.attr in {"run", "check_output", "Popen"} and isinstance(func.value, ast.Name):
            if func.value.id == "subprocess":
                lines.append(node.lineno)
    return lines


def test_subprocess_only_in_platform_process() -> None:
    root = package_root()
    offenders: list[str] = []
    for path in iter_source_files():
        rel = path.relative_to(root).as_posix()
        if rel == "platform/process.py":
            continue
        offenders.extend(f"{rel}:{line}" for line in _direct_subprocess_calls(read_tree(path)))

    assert not offenders, "direct subprocess calls:\n" + "\n".join(offenders)


def test_rich_only_in_console() -> None:
    root = package_root()
    offenders: list[str] = []
    for path in iter_source_files():
        rel = path.relative_to(root).as_posix()
        if rel == "output/console.py":
            continue
        offenders.extend(
            f"{rel}:{item.line}" for item in parse_imports(path) if matches_prefix(item.module, "rich")
        )

    assert not offenders, "direct rich imports:\n" + "\n".join(offenders)


def test_services_do_not_depend_on_cli() -> None:
    root = package_root()
    offenders: list[str] = []
    for path in iter_source_files():
        rel = path.relative_to(root)
        if rel.parts[0] == "cli":
            continue
        for item in parse_imports(path):
            if matches_prefix(item.module, "relprep.cli") or matches_prefix(item.module, "typer"):
                offenders.append(f"{rel.as_posix()}:{item.line}: {item.module}")

    assert not offenders, "cli imports outside relprep.cli:\n" + "\n".join(offenders)
