from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from core.interfaces import (
    CredentialLinkRepository,
    FacilityRepository,
    ProviderRepository,
    StateLicenseRepository,
    VestaPrivilegeRepository,
)
from core.models import (
    Facility,
    Provider,
    ProviderFacilityCredential,
    StateLicense,
    VestaPrivilege,
)
from infra.db.directory.mapper import (
    credential_from_orm,
    credential_to_orm,
    facility_from_orm,
    facility_to_orm,
    license_from_orm,
    license_to_orm,
    privilege_from_orm,
    privilege_to_orm,
    provider_from_orm,
    provider_to_orm,
)
from infra.db.models import (
    FacilityORM,
    ProviderFacilityCredentialORM,
    ProviderORM,
    StateLicenseORM,
    VestaPrivilegeORM,
)


class SqlAlchemyProviderRepository(ProviderRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, provider: Provider) -> None:
        self.session.add(provider_to_orm(provider))

    def update(self, provider: Provider) -> None:
        obj = self.session.get(ProviderORM, provider.id)
        if obj is None:
            raise NotFoundError("Provider not found.", code="PROVIDER_NOT_FOUND")
        obj.first_name = provider.first_name
        obj.last_name = provider.last_name
        obj.degree = provider.degree
        obj.email = provider.email
        obj.phone = provider.phone
        obj.notes = provider.notes
        obj.updated_at = provider.updated_at

    def delete(self, provider_id: str) -> None:
        self.session.execute(delete(ProviderORM).where(ProviderORM.id == provider_id))

    def get(self, provider_id: str) -> Optional[Provider]:
        obj = self.session.get(ProviderORM, provider_id)
        return provider_from_orm(obj) if obj else None

    def list_all(self) -> List[Provider]:
        rows = self.session.execute(select(ProviderORM).order_by(ProviderORM.first_name)).scalars().all()
        return [provider_from_orm(row) for row in rows]

    def list_by_ids(self, provider_ids: Iterable[str]) -> List[Provider]:
        ids = list(provider_ids)
        if not ids:
            return []
        rows = self.session.execute(select(ProviderORM).where(ProviderORM.id.in_(ids))).scalars().all()
        return [provider_from_orm(row) for row in rows]


class SqlAlchemyFacilityRepository(FacilityRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, facility: Facility) -> None:
        self.session.add(facility_to_orm(facility))

    def update(self, facility: Facility) -> None:
        obj = self.session.get(FacilityORM, facility.id)
        if obj is None:
            raise NotFoundError("Facility not found.", code="FACILITY_NOT_FOUND")
        obj.name = facility.name
        obj.state = facility.state
        obj.email = facility.email
        obj.address = facility.address
        obj.active = facility.active
        obj.updated_at = facility.updated_at

    def delete(self, facility_id: str) -> None:
        self.session.execute(delete(FacilityORM).where(FacilityORM.id == facility_id))

    def get(self, facility_id: str) -> Optional[Facility]:
        obj = self.session.get(FacilityORM, facility_id)
        return facility_from_orm(obj) if obj else None

    def list_all(self) -> List[Facility]:
        rows = self.session.execute(select(FacilityORM).order_by(FacilityORM.name)).scalars().all()
        return [facility_from_orm(row) for row in rows]

    def list_by_ids(self, facility_ids: Iterable[str]) -> List[Facility]:
        ids = list(facility_ids)
        if not ids:
            return []
        rows = self.session.execute(select(FacilityORM).where(FacilityORM.id.in_(ids))).scalars().all()
        return [facility_from_orm(row) for row in rows]


class SqlAlchemyCredentialLinkRepository(CredentialLinkRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, link: ProviderFacilityCredential) -> None:
        self.session.add(credential_to_orm(link))

    def update(self, link: ProviderFacilityCredential) -> None:
        obj = self.session.get(ProviderFacilityCredentialORM, link.id)
        if obj is None:
            raise NotFoundError("Provider-facility link not found.", code="PFC_NOT_FOUND")
        obj.facility_type = link.facility_type
        obj.privileges = link.privileges
        obj.priority = link.priority
        obj.application_required = link.application_required
        obj.notes = link.notes
        obj.updated_at = link.updated_at

    def delete(self, link_id: str) -> None:
        self.session.execute(
            delete(ProviderFacilityCredentialORM).where(ProviderFacilityCredentialORM.id == link_id)
        )

    def get(self, link_id: str) -> Optional[ProviderFacilityCredential]:
        obj = self.session.get(ProviderFacilityCredentialORM, link_id)
        return credential_from_orm(obj) if obj else None

    def get_for_pair(self, provider_id: str, facility_id: str) -> Optional[ProviderFacilityCredential]:
        stmt = select(ProviderFacilityCredentialORM).where(
            ProviderFacilityCredentialORM.provider_id == provider_id,
            ProviderFacilityCredentialORM.facility_id == facility_id,
        )
        obj = self.session.execute(stmt).scalars().first()
        return credential_from_orm(obj) if obj else None

    def list_by_ids(self, link_ids: Iterable[str]) -> List[ProviderFacilityCredential]:
        ids = list(link_ids)
        if not ids:
            return []
        stmt = select(ProviderFacilityCredentialORM).where(ProviderFacilityCredentialORM.id.in_(ids))
        return [credential_from_orm(row) for row in self.session.execute(stmt).scalars().all()]

    def list_by_provider(self, provider_id: str) -> List[ProviderFacilityCredential]:
        stmt = select(ProviderFacilityCredentialORM).where(
            ProviderFacilityCredentialORM.provider_id == provider_id
        )
        return [credential_from_orm(row) for row in self.session.execute(stmt).scalars().all()]

    def list_by_facility(self, facility_id: str) -> List[ProviderFacilityCredential]:
        stmt = select(ProviderFacilityCredentialORM).where(
            ProviderFacilityCredentialORM.facility_id == facility_id
        )
        return [credential_from_orm(row) for row in self.session.execute(stmt).scalars().all()]


class SqlAlchemyStateLicenseRepository(StateLicenseRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, license_: StateLicense) -> None:
        self.session.add(license_to_orm(license_))

    def update(self, license_: StateLicense) -> None:
        obj = self.session.get(StateLicenseORM, license_.id)
        if obj is None:
            raise NotFoundError("State license not found.", code="LICENSE_NOT_FOUND")
        obj.state = license_.state
        obj.status = license_.status
        obj.number = license_.number

    def delete(self, license_id: str) -> None:
        self.session.execute(delete(StateLicenseORM).where(StateLicenseORM.id == license_id))

    def get(self, license_id: str) -> Optional[StateLicense]:
        obj = self.session.get(StateLicenseORM, license_id)
        return license_from_orm(obj) if obj else None

    def list_by_ids(self, license_ids: Iterable[str]) -> List[StateLicense]:
        ids = list(license_ids)
        if not ids:
            return []
        rows = self.session.execute(select(StateLicenseORM).where(StateLicenseORM.id.in_(ids))).scalars().all()
        return [license_from_orm(row) for row in rows]

    def list_by_provider(self, provider_id: str) -> List[StateLicense]:
        stmt = select(StateLicenseORM).where(StateLicenseORM.provider_id == provider_id)
        return [license_from_orm(row) for row in self.session.execute(stmt).scalars().all()]


class SqlAlchemyVestaPrivilegeRepository(VestaPrivilegeRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, privilege: VestaPrivilege) -> None:
        self.session.add(privilege_to_orm(privilege))

    def update(self, privilege: VestaPrivilege) -> None:
        obj = self.session.get(VestaPrivilegeORM, privilege.id)
        if obj is None:
            raise NotFoundError("Vesta privilege not found.", code="PRIVILEGE_NOT_FOUND")
        obj.privilege_tier = privilege.privilege_tier

    def delete(self, privilege_id: str) -> None:
        self.session.execute(delete(VestaPrivilegeORM).where(VestaPrivilegeORM.id == privilege_id))

    def get(self, privilege_id: str) -> Optional[VestaPrivilege]:
        obj = self.session.get(VestaPrivilegeORM, privilege_id)
        return privilege_from_orm(obj) if obj else None

    def list_by_ids(self, privilege_ids: Iterable[str]) -> List[VestaPrivilege]:
        ids = list(privilege_ids)
        if not ids:
            return []
        stmt = select(VestaPrivilegeORM).where(VestaPrivilegeORM.id.in_(ids))
        return [privilege_from_orm(row) for row in self.session.execute(stmt).scalars().all()]

    def list_by_provider(self, provider_id: str) -> List[VestaPrivilege]:
        stmt = select(VestaPrivilegeORM).where(VestaPrivilegeORM.provider_id == provider_id)
        return [privilege_from_orm(row) for row in self.session.execute(stmt).scalars().all()]


__all__ = [
    "SqlAlchemyProviderRepository",
    "SqlAlchemyFacilityRepository",
    "SqlAlchemyCredentialLinkRepository",
    "SqlAlchemyStateLicenseRepository",
    "SqlAlchemyVestaPrivilegeRepository",
]
