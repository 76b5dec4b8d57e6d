from typing import Any, Optional

from pydantic import BaseModel, Field


class CaseTablePayload(BaseModel):
    """
    Body of PUT /api/cases. Cell values pass through untouched; presence of
    headers/cases is checked by the service so it can answer 400.
    """
    headers: Optional[Any] = None
    cases: Optional[Any] = None
    start_row: Optional[int] = Field(default=None, alias="startRow", ge=1)


class LocationPayload(BaseModel):
    # Coordinates are forwarded as sent; only truthiness is checked.
    address: Optional[Any] = None
    location: Optional[dict[str, Any]] = None
    case_id: Optional[Any] = Field(default=None, alias="caseId")
