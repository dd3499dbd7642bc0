from core.services.audit.diff import FieldDiff, compute_changed_fields, field_diffs, format_value
from core.services.audit.service import AuditService

__all__ = ["AuditService", "FieldDiff", "compute_changed_fields", "field_diffs", "format_value"]
