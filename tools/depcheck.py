from __future__ import annotations

import argparse
import ast
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

PACKAGE_ROOT = Path(__file__).resolve().parents[1] / "src" / "floorsvc"

_FRAMEWORK_MODULES = {
    "fastapi",
    "starlette",
    "sqlalchemy",
    "alembic",
    "psycopg",
    "redis",
    "httpx",
    "requests",
    "jose",
    "passlib",
    "opentelemetry",
    "floorsvc.api",
    "floorsvc.infrastructure",
}

LAYER_RULES: dict[str, set[str]] = {
    "domain": _FRAMEWORK_MODULES | {"pydantic", "prometheus_client", "floorsvc.application"},
    "application": set(_FRAMEWORK_MODULES),
}


@dataclass(frozen=True)
class Violation:
    file_path: Path
    line: int
    module: str


def _python_files(root: Path) -> Iterable[Path]:
    if root.is_file() and root.suffix == ".py":
        yield root
        return
    if root.is_dir():
        yield from root.rglob("*.py")


def _matches_forbidden(module: str, forbidden_modules: set[str]) -> bool:
    for forbidden in forbidden_modules:
        if module == forbidden or module.startswith(f"{forbidden}."):
            return True
    return False


def _scan_file(file_path: Path, forbidden_modules: set[str]) -> list[Violation]:
    tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    violations: list[Violation] = []

    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if _matches_forbidden(alias.name, forbidden_modules):
                    violations.append(
                        Violation(file_path=file_path, line=node.lineno, module=alias.name)
                    )
        elif isinstance(node, ast.ImportFrom) and node.module:
            if _matches_forbidden(node.module, forbidden_modules):
                violations.append(
                    Violation(file_path=file_path, line=node.lineno, module=node.module)
                )

    return violations


def find_violations(paths: Sequence[Path], forbidden_modules: set[str]) -> list[Violation]:
    violations: list[Violation] = []
    for path in paths:
        for file_path in _python_files(path):
            violations.extend(_scan_file(file_path, forbidden_modules))
    return violations


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Layering check for src/floorsvc: domain and application stay framework-free."
    )
    parser.add_argument(
        "--path",
        action="append",
        default=[],
        help="Path to scan (repeatable). Defaults to every layer under src/floorsvc.",
    )
    parser.add_argument(
        "--layer",
        choices=sorted(LAYER_RULES),
        default="domain",
        help="Rule set applied to --path entries (default: domain).",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.path:
        targets = [([Path(item) for item in args.path], LAYER_RULES[args.layer])]
    else:
        targets = [([PACKAGE_ROOT / layer], rules) for layer, rules in LAYER_RULES.items()]

    violations: list[Violation] = []
    for paths, rules in targets:
        violations.extend(find_violations(paths, rules))

    if not violations:
        print("depcheck passed")
        return 0

    print("depcheck failed: forbidden imports detected")
    for violation in violations:
        print(f"{violation.file_path}:{violation.line} -> {violation.module}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
