from __future__ import annotations

import ast
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]


def _line_count(path: Path) -> int:
    return len(path.read_text(encoding="utf-8", errors="ignore").splitlines())


def _python_files(root: Path):
    for path in root.rglob("*.py"):
        # Keep architecture checks focused on source/test code, not packaged artifacts.
        if {"dist", "build", ".venv", "venv", "site-packages"} & set(path.parts):
            continue
        yield path


def _imported_modules(path: Path):
    tree = ast.parse(path.read_text(encoding="utf-8", errors="ignore"))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name
        elif isinstance(node, ast.ImportFrom):
            yield node.module or ""


def test_no_python_module_exceeds_hard_line_limit():
    offenders = []
    for path in _python_files(ROOT):
        lines = _line_count(path)
        if lines > 600:
            offenders.append((str(path.relative_to(ROOT)), lines))
    assert not offenders, f"Modules exceed hard 600-line limit: {offenders}"


def test_core_layer_does_not_import_infra_layer():
    violations: list[tuple[str, str]] = []

    for path in _python_files(ROOT / "core"):
        for name in _imported_modules(path):
            if name == "infra" or name.startswith("infra."):
                violations.append((str(path.relative_to(ROOT)), name))

    assert not violations, f"Core layer imports infra layer: {violations}"


def test_domain_layer_stays_free_of_sqlalchemy():
    violations: list[tuple[str, str]] = []

    for path in _python_files(ROOT / "core" / "domain"):
        for name in _imported_modules(path):
            if name.startswith("sqlalchemy"):
                violations.append((str(path.relative_to(ROOT)), name))

    assert not violations, f"Domain records import SQLAlchemy: {violations}"


def test_workflow_service_is_composed_from_mixins():
    text = (ROOT / "core" / "services" / "workflow" / "service.py").read_text(encoding="utf-8")

    assert "class WorkflowService(" in text
    assert "WorkflowLifecycleMixin" in text
    assert "WorkflowQueryMixin" in text
    assert "WorkflowAssignmentMixin" in text
    assert "def list_phases" not in text


def test_infra_repositories_module_is_facade_only():
    text = (ROOT / "infra" / "db" / "repositories.py").read_text(encoding="utf-8", errors="ignore")

    assert "from infra.db.workflow.repository import" in text
    assert "from infra.db.audit.repository import" in text
    assert "class SqlAlchemy" not in text


def test_service_wiring_and_guards_expose_only_used_entry_points():
    import core.services.auth.authorization as authorization
    import infra.services as wiring

    assert authorization.__all__ == ["require_permission", "require_agent", "current_actor"]
    assert not hasattr(authorization, "is_superadmin_session")
    assert not hasattr(wiring, "build_service_dict")
