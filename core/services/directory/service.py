from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List

from sqlalchemy.orm import Session

from core.events.domain_events import domain_events
from core.exceptions import NotFoundError, ValidationError
from core.interfaces import (
    CredentialLinkRepository,
    FacilityRepository,
    IncidentRepository,
    ProviderRepository,
    StateLicenseRepository,
    VestaPrivilegeRepository,
    WorkflowPhaseRepository,
)
from core.models import AuditAction, Facility, Provider, StateLicense, VestaPrivilege, utc_now
from core.services.audit.helpers import (
    TABLE_FACILITIES,
    TABLE_PROVIDERS,
    TABLE_STATE_LICENSES,
    TABLE_VESTA_PRIVILEGES,
    record_audit,
)
from core.services.audit.service import AuditService
from core.services.auth.authorization import require_permission
from core.services.auth.session import UserSessionContext
from core.services.common.values import blank_to_none, require_text
from core.services.directory.maintenance import DirectoryMaintenanceMixin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryOption:
    id: str
    name: str


class DirectoryService(DirectoryMaintenanceMixin):
    """Providers, facilities and the per-provider records workflows hang off."""

    def __init__(
        self,
        session: Session,
        provider_repo: ProviderRepository,
        facility_repo: FacilityRepository,
        license_repo: StateLicenseRepository,
        privilege_repo: VestaPrivilegeRepository,
        credential_repo: CredentialLinkRepository,
        phase_repo: WorkflowPhaseRepository,
        incident_repo: IncidentRepository,
        audit_service: AuditService,
        user_session: UserSessionContext | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._session: Session = session
        self._provider_repo: ProviderRepository = provider_repo
        self._facility_repo: FacilityRepository = facility_repo
        self._license_repo: StateLicenseRepository = license_repo
        self._privilege_repo: VestaPrivilegeRepository = privilege_repo
        self._credential_repo: CredentialLinkRepository = credential_repo
        self._phase_repo: WorkflowPhaseRepository = phase_repo
        self._incident_repo: IncidentRepository = incident_repo
        self._audit_service: AuditService = audit_service
        self._user_session: UserSessionContext | None = user_session
        self._clock: Callable[[], datetime] = clock or utc_now

    def create_provider(
        self,
        first_name: str | None,
        last_name: str | None,
        *,
        degree: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        notes: str | None = None,
    ) -> Provider:
        require_permission(self._user_session, "directory.manage", operation_label="create provider")
        first = blank_to_none(first_name)
        last = blank_to_none(last_name)
        if first is None and last is None:
            raise ValidationError("Provider needs a first or last name.", code="PROVIDER_NAME_REQUIRED")
        provider = Provider.create(
            first_name=first,
            last_name=last,
            degree=blank_to_none(degree),
            email=(blank_to_none(email) or "").lower() or None,
            phone=blank_to_none(phone),
            notes=blank_to_none(notes),
            now=self._clock(),
        )
        self._insert(self._provider_repo, provider, TABLE_PROVIDERS)
        logger.info("Created provider %s (%s)", provider.id, provider.display_name)
        return provider

    def create_facility(
        self,
        name: str,
        *,
        state: str | None = None,
        email: str | None = None,
        address: str | None = None,
        active: bool = True,
    ) -> Facility:
        require_permission(self._user_session, "directory.manage", operation_label="create facility")
        facility = Facility.create(
            name=require_text(name, "Facility name"),
            state=self._normalize_state(state),
            email=(blank_to_none(email) or "").lower() or None,
            address=blank_to_none(address),
            active=bool(active),
            now=self._clock(),
        )
        self._insert(self._facility_repo, facility, TABLE_FACILITIES)
        logger.info("Created facility %s (%s)", facility.id, facility.name)
        return facility

    def add_state_license(
        self,
        provider_id: str,
        state: str,
        *,
        status: str | None = None,
        number: str | None = None,
    ) -> StateLicense:
        require_permission(self._user_session, "directory.manage", operation_label="add state license")
        self._require_provider(provider_id)
        license_ = StateLicense.create(
            provider_id=provider_id,
            state=self._normalize_state(require_text(state, "State")),
            status=blank_to_none(status),
            number=blank_to_none(number),
            now=self._clock(),
        )
        self._insert(self._license_repo, license_, TABLE_STATE_LICENSES)
        return license_

    def add_vesta_privilege(self, provider_id: str, privilege_tier: str | None = None) -> VestaPrivilege:
        require_permission(self._user_session, "directory.manage", operation_label="add vesta privilege")
        self._require_provider(provider_id)
        privilege = VestaPrivilege.create(
            provider_id=provider_id,
            privilege_tier=blank_to_none(privilege_tier),
            now=self._clock(),
        )
        self._insert(self._privilege_repo, privilege, TABLE_VESTA_PRIVILEGES)
        return privilege

    def list_providers_for_dropdown(self) -> List[DirectoryOption]:
        require_permission(self._user_session, "directory.read", operation_label="list providers")
        providers = sorted(self._provider_repo.list_all(), key=lambda p: (p.first_name or "").lower())
        return [DirectoryOption(id=p.id, name=p.display_name) for p in providers]

    def list_facilities_for_dropdown(self) -> List[DirectoryOption]:
        require_permission(self._user_session, "directory.read", operation_label="list facilities")
        facilities = sorted(self._facility_repo.list_all(), key=lambda f: (f.name or "").lower())
        return [DirectoryOption(id=f.id, name=f.name or "Unknown Facility") for f in facilities]

    def _insert(self, repo, record, table_name: str) -> None:
        try:
            repo.add(record)
            record_audit(self, table_name=table_name, record_id=record.id, action=AuditAction.INSERT, new=record)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        domain_events.directory_changed.emit(record.id)

    def _require_provider(self, provider_id: str) -> Provider:
        provider = self._provider_repo.get(provider_id) if provider_id else None
        if provider is None:
            raise NotFoundError("Provider not found.", code="PROVIDER_NOT_FOUND")
        return provider

    @staticmethod
    def _normalize_state(state: str | None) -> str | None:
        cleaned = blank_to_none(state)
        if cleaned is None:
            return None
        if len(cleaned) != 2 or not cleaned.isalpha():
            raise ValidationError("State must be a two-letter code.", code="INVALID_STATE")
        return cleaned.upper()


__all__ = ["DirectoryService", "DirectoryOption"]
