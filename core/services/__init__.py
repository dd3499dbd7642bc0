from .audit import AuditService
from .auth import AuthService
from .directory import DirectoryService
from .incident import IncidentService
from .workflow import WorkflowService

__all__ = [
    "AuditService",
    "AuthService",
    "DirectoryService",
    "IncidentService",
    "WorkflowService",
]
