"""Static import guard for the tripmesh layers.

The domain layer stays pure: it may not reach into I/O, wiring or surfaces.
Sources talk to collaborators only through ``tripmesh.tools`` protocols.
"""

from __future__ import annotations

import argparse
import ast
from dataclasses import dataclass
from pathlib import Path

PACKAGE = "tripmesh"
KNOWN_LAYERS = {
    "domain",
    "sources",
    "application",
    "adapters",
    "infrastructure",
    "persistence",
    "observability",
    "api",
    "tools",
    "security",
    "config",
    "shared",
}
FORBIDDEN_IMPORTS = {
    ("domain", "infrastructure"): "domain layer must not import infrastructure layer",
    ("domain", "api"): "domain layer must not import api layer",
    ("domain", "adapters"): "domain layer must not import concrete collaborators",
    ("domain", "application"): "domain layer must not import application layer",
    ("domain", "sources"): "domain layer must not import sources",
    ("domain", "persistence"): "domain layer must not import persistence layer",
    ("sources", "adapters"): "sources must use tool protocols, not concrete collaborators",
    ("sources", "api"): "sources must not import api layer",
    ("application", "api"): "application layer must not import api layer",
}


@dataclass(frozen=True)
class ImportRecord:
    source_file: Path
    source_module: str
    source_layer: str | None
    target_module: str
    target_layer: str | None
    lineno: int


def _module_from_path(path: Path, root: Path) -> str:
    parts = [PACKAGE, *path.relative_to(root).with_suffix("").parts]
    if parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts)


def _layer_from_module(module_name: str) -> str | None:
    parts = module_name.split(".")
    if len(parts) < 2 or parts[0] != PACKAGE:
        return None
    return parts[1] if parts[1] in KNOWN_LAYERS else None


def _resolve_relative_base(current_module: str, is_package_module: bool, level: int, module: str | None) -> str | None:
    if level <= 0:
        return module
    current_package = current_module if is_package_module else current_module.rsplit(".", 1)[0]
    package_parts = current_package.split(".")
    trim = level - 1
    if trim > len(package_parts):
        return None
    base_parts = package_parts[: len(package_parts) - trim]
    if module:
        base_parts.extend(module.split("."))
    return ".".join(part for part in base_parts if part)


def _extract_target_modules(node: ast.stmt, current_module: str, is_package_module: bool) -> list[str]:
    if isinstance(node, ast.Import):
        return [alias.name for alias in node.names]
    if not isinstance(node, ast.ImportFrom):
        return []
    if node.level == 0:
        return [node.module] if node.module else []

    base = _resolve_relative_base(current_module, is_package_module, node.level, node.module)
    if not base:
        return []
    if node.module:
        return [base]
    return [f"{base}.{alias.name}" for alias in node.names if alias.name != "*"]


def collect_import_records(root: str | Path = PACKAGE) -> list[ImportRecord]:
    root_path = Path(root)
    records: list[ImportRecord] = []

    for path in sorted(root_path.rglob("*.py")):
        if "__pycache__" in path.parts:
            continue
        try:
            tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        except (OSError, SyntaxError, UnicodeDecodeError):
            continue

        source_module = _module_from_path(path, root_path)
        source_layer = _layer_from_module(source_module)
        is_package_module = path.name == "__init__.py"

        for node in ast.walk(tree):
            if not isinstance(node, (ast.Import, ast.ImportFrom)):
                continue
            for target in _extract_target_modules(node, source_module, is_package_module):
                if not target.startswith(f"{PACKAGE}."):
                    continue
                records.append(
                    ImportRecord(
                        source_file=path,
                        source_module=source_module,
                        source_layer=source_layer,
                        target_module=target,
                        target_layer=_layer_from_module(target),
                        lineno=getattr(node, "lineno", 1),
                    )
                )
    return records


def check_import_boundaries(root: str | Path = PACKAGE) -> list[str]:
    violations: list[str] = []
    for rec in collect_import_records(root):
        if rec.source_layer is None or rec.target_layer is None:
            continue
        rule = FORBIDDEN_IMPORTS.get((rec.source_layer, rec.target_layer))
        if not rule:
            continue
        violations.append(
            f"{rec.source_file.as_posix()}:{rec.lineno} "
            f"{rec.source_module} -> {rec.target_module}: {rule}"
        )
    return sorted(set(violations))


def main() -> int:
    parser = argparse.ArgumentParser(description="Check tripmesh import boundaries")
    parser.add_argument("--root", default=PACKAGE, help="Package directory to scan")
    args = parser.parse_args()

    violations = check_import_boundaries(args.root)
    if violations:
        print("Import boundary violations:")
        for line in violations:
            print(f"- {line}")
        return 1

    print("Import boundary check passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
