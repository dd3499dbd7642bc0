from infra.db.incident.mapper import incident_from_orm, incident_to_orm
from infra.db.incident.repository import SqlAlchemyIncidentRepository

__all__ = ["incident_to_orm", "incident_from_orm", "SqlAlchemyIncidentRepository"]
