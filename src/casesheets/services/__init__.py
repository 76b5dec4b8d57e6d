from casesheets.services.cases import CaseTableService
from casesheets.services.locations import LocationService

__all__ = ["CaseTableService", "LocationService"]
