"""Reporting API wrappers around renderer classes."""

from pathlib import Path

from core.models import AuditLogFilter, utc_now
from core.reporting.contexts import AuditExportContext
from core.reporting.renderers.excel import AuditLogExcelRenderer
from core.services.audit.service import AuditService


def _ensure_parent(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def generate_audit_log_excel(
    audit_service: AuditService,
    output_path: str | Path,
    query: AuditLogFilter | None = None,
    *,
    max_rows: int = 10_000,
) -> Path:
    normalized, entries, total = audit_service.collect_for_export(query, max_rows=max_rows)
    ctx = AuditExportContext(
        entries=entries,
        query=normalized,
        generated_at=utc_now(),
        generated_by=audit_service.actor_email,
        total_matching=total,
        truncated=total > len(entries),
    )
    return AuditLogExcelRenderer().render(ctx, _ensure_parent(Path(output_path)))
