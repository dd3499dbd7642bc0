from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from core.models import AuditLogEntry, AuditLogFilter


@dataclass
class AuditExportContext:
    entries: List[AuditLogEntry]
    query: AuditLogFilter
    generated_at: datetime
    generated_by: str | None = None
    total_matching: int = 0
    truncated: bool = False
    notes: List[str] = field(default_factory=list)
