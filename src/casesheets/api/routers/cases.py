from typing import Optional

from fastapi import APIRouter, Depends

from casesheets.api.deps import get_case_service, get_location_service
from casesheets.api.models import CaseTablePayload, LocationPayload
from casesheets.services import CaseTableService, LocationService

router = APIRouter(prefix="/api", tags=["Cases"])


@router.get("/cases")
def list_cases(svc: CaseTableService = Depends(get_case_service)):
    return svc.list_cases().to_dict()


@router.put("/cases")
def overwrite_cases(
    payload: Optional[CaseTablePayload] = None,
    svc: CaseTableService = Depends(get_case_service),
):
    payload = payload or CaseTablePayload()
    message = svc.overwrite_cases(payload.headers, payload.cases, start_row=payload.start_row)
    return {"message": message}


@router.post("/location")
def append_location(
    payload: Optional[LocationPayload] = None,
    svc: LocationService = Depends(get_location_service),
):
    payload = payload or LocationPayload()
    coords = payload.location or {}
    message = svc.append_location(
        payload.address,
        coords.get("lat"),
        coords.get("lon"),
        case_id=payload.case_id,
    )
    return {"message": message}
