from __future__ import annotations

from fastapi import Request

from casesheets.services import CaseTableService, LocationService
from casesheets.sheets import SheetsClient


def get_sheets_client(request: Request) -> SheetsClient:
    # Built once by create_app and shared by every request.
    return request.app.state.sheets_client


def get_case_service(request: Request) -> CaseTableService:
    return CaseTableService(client=get_sheets_client(request))


def get_location_service(request: Request) -> LocationService:
    return LocationService(client=get_sheets_client(request))
