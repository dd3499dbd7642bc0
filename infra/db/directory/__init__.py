from infra.db.directory.repository import (
    SqlAlchemyCredentialLinkRepository,
    SqlAlchemyFacilityRepository,
    SqlAlchemyProviderRepository,
    SqlAlchemyStateLicenseRepository,
    SqlAlchemyVestaPrivilegeRepository,
)

__all__ = [
    "SqlAlchemyProviderRepository",
    "SqlAlchemyFacilityRepository",
    "SqlAlchemyCredentialLinkRepository",
    "SqlAlchemyStateLicenseRepository",
    "SqlAlchemyVestaPrivilegeRepository",
]
