from core.services.incident.service import IncidentService

__all__ = ["IncidentService"]
