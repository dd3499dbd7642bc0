from __future__ import annotations

from core.models import (
    Facility,
    Provider,
    ProviderFacilityCredential,
    StateLicense,
    VestaPrivilege,
)
from infra.db.mappers import as_utc
from infra.db.models import (
    FacilityORM,
    ProviderFacilityCredentialORM,
    ProviderORM,
    StateLicenseORM,
    VestaPrivilegeORM,
)


def provider_to_orm(provider: Provider) -> ProviderORM:
    return ProviderORM(
        id=provider.id,
        first_name=provider.first_name,
        last_name=provider.last_name,
        degree=provider.degree,
        email=provider.email,
        phone=provider.phone,
        notes=provider.notes,
        created_at=provider.created_at,
        updated_at=provider.updated_at,
    )


def provider_from_orm(obj: ProviderORM) -> Provider:
    return Provider(
        id=obj.id,
        first_name=obj.first_name,
        last_name=obj.last_name,
        degree=obj.degree,
        email=obj.email,
        phone=obj.phone,
        notes=obj.notes,
        created_at=as_utc(obj.created_at),
        updated_at=as_utc(obj.updated_at),
    )


def facility_to_orm(facility: Facility) -> FacilityORM:
    return FacilityORM(
        id=facility.id,
        name=facility.name,
        state=facility.state,
        email=facility.email,
        address=facility.address,
        active=facility.active,
        created_at=facility.created_at,
        updated_at=facility.updated_at,
    )


def facility_from_orm(obj: FacilityORM) -> Facility:
    return Facility(
        id=obj.id,
        name=obj.name,
        state=obj.state,
        email=obj.email,
        address=obj.address,
        active=bool(obj.active),
        created_at=as_utc(obj.created_at),
        updated_at=as_utc(obj.updated_at),
    )


def credential_to_orm(link: ProviderFacilityCredential) -> ProviderFacilityCredentialORM:
    return ProviderFacilityCredentialORM(
        id=link.id,
        provider_id=link.provider_id,
        facility_id=link.facility_id,
        facility_type=link.facility_type,
        privileges=link.privileges,
        priority=link.priority,
        application_required=link.application_required,
        notes=link.notes,
        created_at=link.created_at,
        updated_at=link.updated_at,
    )


def credential_from_orm(obj: ProviderFacilityCredentialORM) -> ProviderFacilityCredential:
    return ProviderFacilityCredential(
        id=obj.id,
        provider_id=obj.provider_id,
        facility_id=obj.facility_id,
        facility_type=obj.facility_type,
        privileges=obj.privileges,
        priority=obj.priority,
        application_required=obj.application_required,
        notes=obj.notes,
        created_at=as_utc(obj.created_at),
        updated_at=as_utc(obj.updated_at),
    )


def license_to_orm(license_: StateLicense) -> StateLicenseORM:
    return StateLicenseORM(
        id=license_.id,
        provider_id=license_.provider_id,
        state=license_.state,
        status=license_.status,
        number=license_.number,
        created_at=license_.created_at,
    )


def license_from_orm(obj: StateLicenseORM) -> StateLicense:
    return StateLicense(
        id=obj.id,
        provider_id=obj.provider_id,
        state=obj.state,
        status=obj.status,
        number=obj.number,
        created_at=as_utc(obj.created_at),
    )


def privilege_to_orm(privilege: VestaPrivilege) -> VestaPrivilegeORM:
    return VestaPrivilegeORM(
        id=privilege.id,
        provider_id=privilege.provider_id,
        privilege_tier=privilege.privilege_tier,
        created_at=privilege.created_at,
    )


def privilege_from_orm(obj: VestaPrivilegeORM) -> VestaPrivilege:
    return VestaPrivilege(
        id=obj.id,
        provider_id=obj.provider_id,
        privilege_tier=obj.privilege_tier,
        created_at=as_utc(obj.created_at),
    )
