from __future__ import annotations

import ast

from ._utils import iter_source_files, package_root, parse_imports, read_tree


def _direct_subprocess_calls(tree: ast.AST) -> list[int]:
    lines: list[int] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
            continue
        func = node.func
        if func.attr not in {"run", "check_output", "Popen"}:
            continue
        if isinstance(func.value, ast.Name) and func.value.id == "subprocess":
            lines.append(node.lineno)
    return lines


def test_subprocess_only_through_process_module() -> None:
    root = package_root()
    offenders: list[str] = []
    for path in iter_source_files():
        rel = path.relative_to(root).as_posix()
        if rel == "platform/process.py":
            continue
        for line in _direct_subprocess_calls(read_tree(path)):
            offenders.append(f"{rel}:{line}: direct subprocess call")

    assert not offenders, "Subprocess policy violations:\n" + "\n".join(offenders)


def test_rich_only_in_console_module() -> None:
    root = package_root()
    offenders: list[str] = []
    for path in iter_source_files():
        rel = path.relative_to(root).as_posix()
        if rel == "output/console.py":
            continue
        for item in parse_imports(path):
            if item.module == "rich" or item.module.startswith("rich."):
                offenders.append(f"{rel}:{item.line}: direct rich import '{item.module}'")

    assert not offenders, "Rich usage policy violations:\n" + "\n".join(offenders)


def test_stage_layer_does_not_import_cli() -> None:
    root = package_root()
    offenders: list[str] = []
    for path in iter_source_files():
        rel = path.relative_to(root).as_posix()
        if rel.startswith("cli/") or rel == "__main__.py":
            continue
        for item in parse_imports(path):
            if item.module.startswith("relstage.cli") or item.module == "typer":
                offenders.append(f"{rel}:{item.line}: imports '{item.module}'")

    assert not offenders, "Layering violations:\n" + "\n".join(offenders)


def test_source_functions_declare_return_types() -> None:
    root = package_root()
    offenders: list[str] = []
    for path in iter_source_files():
        rel = path.relative_to(root).as_posix()
        for node in ast.walk(read_tree(path)):
            if isinstance(node, ast.FunctionDef | ast.AsyncFunctionDef) and node.returns is None:
                offenders.append(f"{rel}:{node.lineno}: {node.name} has no return annotation")

    assert not offenders, "Missing return annotations:\n" + "\n".join(offenders)
