# tests/architecture/test_architecture.py
# Architecture tests enforcing layering rules.
# - handlers must not contain SQL or talk to the database driver directly
# - table models are only used by repositories and the storage lifecycle
# - middleware never depends on handlers or repositories

import ast
import pathlib
import re

import pytest  # type: ignore[import-not-found]

REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]
PACKAGE_ROOT = REPO_ROOT / "relay"

SQL_PATTERN = re.compile(
    r"\b(SELECT\s+.+\s+FROM|INSERT\s+INTO|UPDATE\s+\w+\s+SET|DELETE\s+FROM|CREATE\s+TABLE|DROP\s+TABLE)\b",
    flags=re.DOTALL,
)


def _iter_py_files(root: pathlib.Path):
    for path in root.rglob("*.py"):
        # skip virtualenv & build outputs
        parts = {"venv", ".venv", "node_modules", "__pycache__"}
        if any(part in parts for part in path.parts):
            continue
        yield path


def _parse(py_path: pathlib.Path) -> ast.AST:
    return ast.parse(py_path.read_text(encoding="utf-8"), filename=str(py_path))


def _collect_imports(py_path: pathlib.Path) -> set[str]:
    """Return the set of fully qualified modules imported by a file."""
    imports: set[str] = set()
    for node in ast.walk(_parse(py_path)):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.add(alias.name)
        elif isinstance(node, ast.ImportFrom) and node.module:
            imports.add(node.module)
    return imports


def _string_literals(py_path: pathlib.Path) -> list[str]:
    return [
        node.value
        for node in ast.walk(_parse(py_path))
        if isinstance(node, ast.Constant) and isinstance(node.value, str)
    ]


def _file_contains_sql(py_path: pathlib.Path) -> bool:
    """Raw SQL in string literals, or direct use of database libraries."""
    if any(SQL_PATTERN.search(s) for s in _string_literals(py_path)):
        return True
    bad_imports = {"sqlalchemy", "sqlite3"}
    return any(name.split(".")[0] in bad_imports for name in _collect_imports(py_path))


# ---------- Tests ----------

def test_sql_detector_sees_raw_sql(tmp_path):
    offender = tmp_path / "offender.py"
    offender.write_text('QUERY = "SELECT id FROM users WHERE identifier = :identifier"\n', encoding="utf-8")
    clean = tmp_path / "clean.py"
    clean.write_text('"""Look a user up from the store."""\nfrom fastapi import Request\n', encoding="utf-8")

    assert _file_contains_sql(offender)
    assert not _file_contains_sql(clean)


@pytest.mark.architecture
def test_handlers_do_not_contain_sql():
    offenders = [f for f in _iter_py_files(PACKAGE_ROOT / "handlers") if _file_contains_sql(f)]
    assert not offenders, "Handlers must not contain SQL; offending files:\n" + "\n".join(map(str, offenders))


@pytest.mark.architecture
def test_table_models_only_used_by_repositories_and_lifecycle():
    allowed = {PACKAGE_ROOT / "db" / "lifecycle.py"}
    offenders = []
    for f in _iter_py_files(PACKAGE_ROOT):
        if "repositories" in f.parts or "models" in f.parts or f in allowed:
            continue
        if any(name.endswith("_table") for name in _collect_imports(f)):
            offenders.append(f)
    assert not offenders, "Table models imported outside repositories:\n" + "\n".join(map(str, offenders))


@pytest.mark.architecture
def test_middleware_does_not_depend_on_handlers():
    for f in _iter_py_files(PACKAGE_ROOT / "middleware"):
        imports = _collect_imports(f)
        forbidden = [m for m in imports if m.startswith(("relay.handlers", "relay.repositories", "relay.routes"))]
        assert not forbidden, f"middleware must not import {forbidden}: {f}"


@pytest.mark.architecture
def test_package_metadata_ships_no_requirements_docs():
    pyproject = (REPO_ROOT / "pyproject.toml").read_text(encoding="utf-8")
    assert "SPEC_FULL.md" not in pyproject
    assert "DESIGN.md" not in pyproject
