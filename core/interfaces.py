from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from core.models import (
    Agent,
    AuditLogEntry,
    AuditLogFilter,
    Facility,
    IdentityUser,
    IncidentLog,
    IncidentRow,
    PhaseRow,
    Provider,
    ProviderFacilityCredential,
    StateLicense,
    VestaPrivilege,
    WorkflowPhase,
    WorkflowType,
)


class WorkflowPhaseRepository(ABC):
    @abstractmethod
    def add(self, phase: WorkflowPhase) -> None: ...
    @abstractmethod
    def update(self, phase: WorkflowPhase) -> None: ...
    @abstractmethod
    def delete(self, phase_id: str) -> None: ...
    @abstractmethod
    def get(self, phase_id: str) -> Optional[WorkflowPhase]: ...
    @abstractmethod
    def refresh(self, phase_id: str) -> Optional[WorkflowPhase]: ...
    @abstractmethod
    def claim_if_unassigned(self, phase_id: str, agent_id: str, updated_at: datetime) -> bool: ...
    @abstractmethod
    def list_rows(
        self,
        *,
        workflow_type: WorkflowType | None = None,
        status: str | None = None,
        involving_agent_ids: Iterable[str] = (),
        has_incidents: bool = False,
        search: str | None = None,
        limit: int = 60,
        offset: int = 0,
    ) -> List[PhaseRow]: ...
    @abstractmethod
    def get_row(self, phase_id: str) -> Optional[PhaseRow]: ...
    @abstractmethod
    def list_by_related_ids(self, related_ids: Iterable[str]) -> List[WorkflowPhase]: ...
    @abstractmethod
    def distinct_statuses(self, workflow_type: WorkflowType | None = None) -> List[str]: ...


class IncidentRepository(ABC):
    @abstractmethod
    def add(self, incident: IncidentLog) -> None: ...
    @abstractmethod
    def update(self, incident: IncidentLog) -> None: ...
    @abstractmethod
    def delete(self, incident_id: str) -> None: ...
    @abstractmethod
    def get(self, incident_id: str) -> Optional[IncidentLog]: ...
    @abstractmethod
    def list_by_phase(self, phase_id: str) -> List[IncidentLog]: ...
    @abstractmethod
    def list_rows_by_phase(self, phase_id: str) -> List[IncidentRow]: ...


class AuditLogRepository(ABC):
    @abstractmethod
    def add(self, entry: AuditLogEntry) -> None: ...
    @abstractmethod
    def list_filtered(self, query: AuditLogFilter) -> List[AuditLogEntry]: ...
    @abstractmethod
    def count_filtered(self, query: AuditLogFilter) -> int: ...
    @abstractmethod
    def list_by_record_ids(
        self, record_ids: Iterable[str], *, limit: int = 30, offset: int = 0
    ) -> List[AuditLogEntry]: ...


class AgentRepository(ABC):
    @abstractmethod
    def add(self, agent: Agent) -> None: ...
    @abstractmethod
    def update(self, agent: Agent) -> None: ...
    @abstractmethod
    def delete(self, agent_id: str) -> None: ...
    @abstractmethod
    def get(self, agent_id: str) -> Optional[Agent]: ...
    @abstractmethod
    def get_by_user_id(self, user_id: str) -> Optional[Agent]: ...
    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Agent]: ...
    @abstractmethod
    def list_all(self) -> List[Agent]: ...
    @abstractmethod
    def list_by_ids(self, agent_ids: Iterable[str]) -> List[Agent]: ...
    @abstractmethod
    def count(self) -> int: ...
    @abstractmethod
    def count_references(self, agent_id: str) -> int: ...


class IdentityUserRepository(ABC):
    @abstractmethod
    def add(self, user: IdentityUser) -> None: ...
    @abstractmethod
    def update(self, user: IdentityUser) -> None: ...
    @abstractmethod
    def get(self, user_id: str) -> Optional[IdentityUser]: ...
    @abstractmethod
    def list_all(self) -> List[IdentityUser]: ...


class ProviderRepository(ABC):
    @abstractmethod
    def add(self, provider: Provider) -> None: ...
    @abstractmethod
    def update(self, provider: Provider) -> None: ...
    @abstractmethod
    def delete(self, provider_id: str) -> None: ...
    @abstractmethod
    def get(self, provider_id: str) -> Optional[Provider]: ...
    @abstractmethod
    def list_all(self) -> List[Provider]: ...
    @abstractmethod
    def list_by_ids(self, provider_ids: Iterable[str]) -> List[Provider]: ...


class FacilityRepository(ABC):
    @abstractmethod
    def add(self, facility: Facility) -> None: ...
    @abstractmethod
    def update(self, facility: Facility) -> None: ...
    @abstractmethod
    def delete(self, facility_id: str) -> None: ...
    @abstractmethod
    def get(self, facility_id: str) -> Optional[Facility]: ...
    @abstractmethod
    def list_all(self) -> List[Facility]: ...
    @abstractmethod
    def list_by_ids(self, facility_ids: Iterable[str]) -> List[Facility]: ...


class CredentialLinkRepository(ABC):
    @abstractmethod
    def add(self, link: ProviderFacilityCredential) -> None: ...
    @abstractmethod
    def update(self, link: ProviderFacilityCredential) -> None: ...
    @abstractmethod
    def delete(self, link_id: str) -> None: ...
    @abstractmethod
    def get(self, link_id: str) -> Optional[ProviderFacilityCredential]: ...
    @abstractmethod
    def get_for_pair(self, provider_id: str, facility_id: str) -> Optional[ProviderFacilityCredential]: ...
    @abstractmethod
    def list_by_ids(self, link_ids: Iterable[str]) -> List[ProviderFacilityCredential]: ...
    @abstractmethod
    def list_by_provider(self, provider_id: str) -> List[ProviderFacilityCredential]: ...
    @abstractmethod
    def list_by_facility(self, facility_id: str) -> List[ProviderFacilityCredential]: ...


class StateLicenseRepository(ABC):
    @abstractmethod
    def add(self, license_: StateLicense) -> None: ...
    @abstractmethod
    def update(self, license_: StateLicense) -> None: ...
    @abstractmethod
    def delete(self, license_id: str) -> None: ...
    @abstractmethod
    def get(self, license_id: str) -> Optional[StateLicense]: ...
    @abstractmethod
    def list_by_ids(self, license_ids: Iterable[str]) -> List[StateLicense]: ...
    @abstractmethod
    def list_by_provider(self, provider_id: str) -> List[StateLicense]: ...


class VestaPrivilegeRepository(ABC):
    @abstractmethod
    def add(self, privilege: VestaPrivilege) -> None: ...
    @abstractmethod
    def update(self, privilege: VestaPrivilege) -> None: ...
    @abstractmethod
    def delete(self, privilege_id: str) -> None: ...
    @abstractmethod
    def get(self, privilege_id: str) -> Optional[VestaPrivilege]: ...
    @abstractmethod
    def list_by_ids(self, privilege_ids: Iterable[str]) -> List[VestaPrivilege]: ...
    @abstractmethod
    def list_by_provider(self, provider_id: str) -> List[VestaPrivilege]: ...


__all__ = [
    "WorkflowPhaseRepository",
    "IncidentRepository",
    "AuditLogRepository",
    "AgentRepository",
    "IdentityUserRepository",
    "ProviderRepository",
    "FacilityRepository",
    "CredentialLinkRepository",
    "StateLicenseRepository",
    "VestaPrivilegeRepository",
]
