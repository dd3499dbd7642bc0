from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, List

from sqlalchemy.orm import Session

from core.events.domain_events import domain_events
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.interfaces import (
    CredentialLinkRepository,
    FacilityRepository,
    IncidentRepository,
    ProviderRepository,
    StateLicenseRepository,
    VestaPrivilegeRepository,
    WorkflowPhaseRepository,
)
from core.models import (
    AuditAction,
    Facility,
    Provider,
    ProviderFacilityCredential,
    StateLicense,
    VestaPrivilege,
    WorkflowPhase,
    WorkflowType,
)
from core.services.audit.helpers import (
    TABLE_FACILITIES,
    TABLE_INCIDENT_LOGS,
    TABLE_PROVIDER_FACILITY_CREDENTIALS,
    TABLE_PROVIDERS,
    TABLE_STATE_LICENSES,
    TABLE_VESTA_PRIVILEGES,
    TABLE_WORKFLOW_PHASES,
    record_audit,
)
from core.services.auth.authorization import require_permission
from core.services.common.values import blank_to_none, require_text

logger = logging.getLogger(__name__)


class DirectoryMaintenanceMixin:
    """Edits and removals of directory records.

    Removing a record that workflows hang off (PFC link, state license, Vesta
    privilege) also removes its phases and their incidents, each with its own
    audit row, in the same transaction. Providers and facilities are only
    removed once nothing points at them.
    """

    _session: Session
    _provider_repo: ProviderRepository
    _facility_repo: FacilityRepository
    _license_repo: StateLicenseRepository
    _privilege_repo: VestaPrivilegeRepository
    _credential_repo: CredentialLinkRepository
    _phase_repo: WorkflowPhaseRepository
    _incident_repo: IncidentRepository
    _clock: Callable[[], datetime]

    def update_provider(
        self,
        provider_id: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        degree: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        notes: str | None = None,
    ) -> Provider:
        require_permission(self._user_session, "directory.manage", operation_label="update provider")
        provider = self._require_provider(provider_id)
        before = replace(provider)
        if first_name is not None:
            provider.first_name = blank_to_none(first_name)
        if last_name is not None:
            provider.last_name = blank_to_none(last_name)
        if provider.first_name is None and provider.last_name is None:
            raise ValidationError("Provider needs a first or last name.", code="PROVIDER_NAME_REQUIRED")
        if degree is not None:
            provider.degree = blank_to_none(degree)
        if email is not None:
            provider.email = (blank_to_none(email) or "").lower() or None
        if phone is not None:
            provider.phone = blank_to_none(phone)
        if notes is not None:
            provider.notes = blank_to_none(notes)
        provider.updated_at = self._clock()
        self._update(self._provider_repo, before, provider, TABLE_PROVIDERS)
        return provider

    def delete_provider(self, provider_id: str) -> None:
        require_permission(self._user_session, "directory.admin", operation_label="delete provider")
        provider = self._require_provider(provider_id)
        in_use = (
            self._credential_repo.list_by_provider(provider.id)
            or self._license_repo.list_by_provider(provider.id)
            or self._privilege_repo.list_by_provider(provider.id)
        )
        if in_use:
            raise ConflictError(
                "Remove this provider's facility links, licenses and privileges first.",
                code="PROVIDER_IN_USE",
            )
        self._delete_record(self._provider_repo, provider, TABLE_PROVIDERS)
        logger.info("Deleted provider %s (%s)", provider.id, provider.display_name)

    def update_facility(
        self,
        facility_id: str,
        *,
        name: str | None = None,
        state: str | None = None,
        email: str | None = None,
        address: str | None = None,
        active: bool | None = None,
    ) -> Facility:
        require_permission(self._user_session, "directory.manage", operation_label="update facility")
        facility = self._require_facility(facility_id)
        before = replace(facility)
        if name is not None:
            facility.name = require_text(name, "Facility name")
        if state is not None:
            facility.state = self._normalize_state(state)
        if email is not None:
            facility.email = (blank_to_none(email) or "").lower() or None
        if address is not None:
            facility.address = blank_to_none(address)
        if active is not None:
            facility.active = bool(active)
        facility.updated_at = self._clock()
        self._update(self._facility_repo, before, facility, TABLE_FACILITIES)
        return facility

    def delete_facility(self, facility_id: str) -> None:
        require_permission(self._user_session, "directory.admin", operation_label="delete facility")
        facility = self._require_facility(facility_id)
        pipeline = [
            p
            for p in self._phase_repo.list_by_related_ids([facility.id])
            if p.workflow_type == WorkflowType.PRELIVE_PIPELINE
        ]
        if self._credential_repo.list_by_facility(facility.id) or pipeline:
            raise ConflictError(
                "Remove this facility's provider links and pre-live phases first.",
                code="FACILITY_IN_USE",
            )
        self._delete_record(self._facility_repo, facility, TABLE_FACILITIES)
        logger.info("Deleted facility %s (%s)", facility.id, facility.name)

    def update_state_license(
        self,
        license_id: str,
        *,
        state: str | None = None,
        status: str | None = None,
        number: str | None = None,
    ) -> StateLicense:
        require_permission(self._user_session, "directory.manage", operation_label="update state license")
        license_ = self._require_license(license_id)
        before = replace(license_)
        if state is not None:
            license_.state = self._normalize_state(require_text(state, "State"))
        if status is not None:
            license_.status = blank_to_none(status)
        if number is not None:
            license_.number = blank_to_none(number)
        self._update(self._license_repo, before, license_, TABLE_STATE_LICENSES)
        return license_

    def delete_state_license(self, license_id: str) -> None:
        require_permission(self._user_session, "directory.admin", operation_label="delete state license")
        license_ = self._require_license(license_id)
        self._delete_workflow_parent(self._license_repo, license_, TABLE_STATE_LICENSES)

    def update_vesta_privilege(self, privilege_id: str, *, privilege_tier: str | None = None) -> VestaPrivilege:
        require_permission(self._user_session, "directory.manage", operation_label="update vesta privilege")
        privilege = self._require_privilege(privilege_id)
        before = replace(privilege)
        if privilege_tier is not None:
            privilege.privilege_tier = blank_to_none(privilege_tier)
        self._update(self._privilege_repo, before, privilege, TABLE_VESTA_PRIVILEGES)
        return privilege

    def delete_vesta_privilege(self, privilege_id: str) -> None:
        require_permission(self._user_session, "directory.admin", operation_label="delete vesta privilege")
        privilege = self._require_privilege(privilege_id)
        self._delete_workflow_parent(self._privilege_repo, privilege, TABLE_VESTA_PRIVILEGES)

    def update_pfc(
        self,
        link_id: str,
        *,
        facility_type: str | None = None,
        privileges: str | None = None,
        priority: str | None = None,
        application_required: bool | None = None,
        notes: str | None = None,
    ) -> ProviderFacilityCredential:
        require_permission(self._user_session, "directory.manage", operation_label="update provider-facility link")
        link = self._require_link(link_id)
        before = replace(link)
        if facility_type is not None:
            link.facility_type = blank_to_none(facility_type)
        if privileges is not None:
            link.privileges = blank_to_none(privileges)
        if priority is not None:
            link.priority = blank_to_none(priority)
        if application_required is not None:
            link.application_required = bool(application_required)
        if notes is not None:
            link.notes = blank_to_none(notes)
        link.updated_at = self._clock()
        self._update(self._credential_repo, before, link, TABLE_PROVIDER_FACILITY_CREDENTIALS)
        return link

    def delete_pfc(self, link_id: str) -> None:
        require_permission(self._user_session, "directory.admin", operation_label="delete provider-facility link")
        link = self._require_link(link_id)
        self._delete_workflow_parent(self._credential_repo, link, TABLE_PROVIDER_FACILITY_CREDENTIALS)

    def _update(self, repo, before, record, table_name: str) -> None:
        try:
            repo.update(record)
            record_audit(
                self,
                table_name=table_name,
                record_id=record.id,
                action=AuditAction.UPDATE,
                old=before,
                new=record,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        domain_events.directory_changed.emit(record.id)

    def _delete_record(self, repo, record, table_name: str) -> None:
        try:
            repo.delete(record.id)
            record_audit(self, table_name=table_name, record_id=record.id, action=AuditAction.DELETE, old=record)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        domain_events.directory_changed.emit(record.id)

    def _delete_workflow_parent(self, repo, record, table_name: str) -> None:
        phases = self._phase_repo.list_by_related_ids([record.id])
        touched: List[WorkflowPhase] = []
        try:
            for phase in phases:
                if self._delete_phase_with_incidents(phase):
                    touched.append(phase)
            repo.delete(record.id)
            record_audit(self, table_name=table_name, record_id=record.id, action=AuditAction.DELETE, old=record)
            self._session.commit()
        except Exception as exc:
            self._session.rollback()
            logger.error("Error deleting %s %s: %s", table_name, record.id, exc)
            raise
        logger.info("Deleted %s %s with %d phase(s)", table_name, record.id, len(phases))
        for phase in touched:
            domain_events.incidents_changed.emit(phase.id)
        if phases:
            domain_events.phases_changed.emit(record.id)
        domain_events.directory_changed.emit(record.id)

    def _delete_phase_with_incidents(self, phase: WorkflowPhase) -> int:
        incidents = self._incident_repo.list_by_phase(phase.id)
        for incident in incidents:
            self._incident_repo.delete(incident.id)
            record_audit(
                self,
                table_name=TABLE_INCIDENT_LOGS,
                record_id=incident.id,
                action=AuditAction.DELETE,
                old=incident,
            )
        self._phase_repo.delete(phase.id)
        record_audit(
            self,
            table_name=TABLE_WORKFLOW_PHASES,
            record_id=phase.id,
            action=AuditAction.DELETE,
            old=phase,
        )
        return len(incidents)

    def _require_facility(self, facility_id: str) -> Facility:
        facility = self._facility_repo.get(facility_id) if facility_id else None
        if facility is None:
            raise NotFoundError("Facility not found.", code="FACILITY_NOT_FOUND")
        return facility

    def _require_license(self, license_id: str) -> StateLicense:
        license_ = self._license_repo.get(license_id) if license_id else None
        if license_ is None:
            raise NotFoundError("State license not found.", code="LICENSE_NOT_FOUND")
        return license_

    def _require_privilege(self, privilege_id: str) -> VestaPrivilege:
        privilege = self._privilege_repo.get(privilege_id) if privilege_id else None
        if privilege is None:
            raise NotFoundError("Vesta privilege not found.", code="PRIVILEGE_NOT_FOUND")
        return privilege

    def _require_link(self, link_id: str) -> ProviderFacilityCredential:
        link = self._credential_repo.get(link_id) if link_id else None
        if link is None:
            raise NotFoundError("Provider-facility link not found.", code="PFC_NOT_FOUND")
        return link
