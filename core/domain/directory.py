from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.domain.identifiers import generate_id, utc_now


@dataclass
class Provider:
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    degree: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def display_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p) or "Unknown Provider"

    @staticmethod
    def create(
        first_name: str | None,
        last_name: str | None,
        now: datetime | None = None,
        **extra,
    ) -> "Provider":
        now = now or utc_now()
        return Provider(
            id=generate_id(),
            first_name=first_name,
            last_name=last_name,
            created_at=now,
            updated_at=now,
            **extra,
        )


@dataclass
class Facility:
    id: str
    name: Optional[str] = None
    state: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def create(name: str, now: datetime | None = None, **extra) -> "Facility":
        now = now or utc_now()
        return Facility(id=generate_id(), name=name, created_at=now, updated_at=now, **extra)


@dataclass
class ProviderFacilityCredential:
    """PFC: the link between a provider and a facility, the usual workflow parent."""

    id: str
    provider_id: str
    facility_id: str
    facility_type: Optional[str] = None
    privileges: Optional[str] = None
    priority: Optional[str] = None
    application_required: Optional[bool] = None
    notes: Optional[str] = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @staticmethod
    def create(
        provider_id: str,
        facility_id: str,
        now: datetime | None = None,
        **extra,
    ) -> "ProviderFacilityCredential":
        now = now or utc_now()
        return ProviderFacilityCredential(
            id=generate_id(),
            provider_id=provider_id,
            facility_id=facility_id,
            created_at=now,
            updated_at=now,
            **extra,
        )


@dataclass
class StateLicense:
    id: str
    provider_id: str
    state: Optional[str] = None
    status: Optional[str] = None
    number: Optional[str] = None
    created_at: datetime | None = None

    @staticmethod
    def create(
        provider_id: str,
        state: str | None,
        now: datetime | None = None,
        **extra,
    ) -> "StateLicense":
        return StateLicense(
            id=generate_id(),
            provider_id=provider_id,
            state=state,
            created_at=now or utc_now(),
            **extra,
        )


@dataclass
class VestaPrivilege:
    id: str
    provider_id: str
    privilege_tier: Optional[str] = None
    created_at: datetime | None = None

    @staticmethod
    def create(
        provider_id: str,
        privilege_tier: str | None = None,
        now: datetime | None = None,
    ) -> "VestaPrivilege":
        return VestaPrivilege(
            id=generate_id(),
            provider_id=provider_id,
            privilege_tier=privilege_tier,
            created_at=now or utc_now(),
        )


__all__ = [
    "Provider",
    "Facility",
    "ProviderFacilityCredential",
    "StateLicense",
    "VestaPrivilege",
]
