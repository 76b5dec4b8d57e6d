import logging
from datetime import UTC, datetime
from typing import Any, Callable, Optional

from casesheets.config import LOCATIONS_SHEET
from casesheets.exceptions import PayloadError, SheetsApiError, SheetsServiceError
from casesheets.sheets.client import SheetsClient, a1_range

logger = logging.getLogger(__name__)

MISSING_FIELDS = "Faltan la dirección o las coordenadas (lat, lon)."
APPEND_FAILED = "Error al guardar la ubicación en Google Sheets."
PERMISSION_DENIED = "La cuenta de servicio no tiene permiso de edición sobre la hoja."
SHEET_NOT_FOUND = "No se encontró la pestaña '{sheet}' en la hoja de cálculo."
NO_CASE_ID = "N/A"


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC timestamp like 2024-05-01T12:30:00.123Z."""
    moment = now or datetime.now(UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_location_row(address: str, lat: Any, lon: Any, case_id: Any = None, timestamp: Optional[str] = None) -> list[Any]:
    return [timestamp or iso_timestamp(), address, lat, lon, case_id or NO_CASE_ID]


class LocationService:
    """
    Appends geocoded addresses to the locations tab, one row per call.
    """

    def __init__(
        self,
        client: SheetsClient,
        sheet: str = LOCATIONS_SHEET,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self.client = client
        self.sheet = sheet
        self.clock = clock

    def append_location(self, address: Optional[str], lat: Any, lon: Any, case_id: Any = None) -> str:
        # Truthiness check: a 0 coordinate is rejected along with missing ones.
        if not address or not lat or not lon:
            raise PayloadError(MISSING_FIELDS)

        row = build_location_row(address, lat, lon, case_id, timestamp=iso_timestamp(self.clock()))
        try:
            self.client.append(a1_range(self.sheet, "A:E"), [row])
        except SheetsApiError as exc:
            logger.exception("Failed to append location to %s", self.sheet)
            raise SheetsServiceError(self._failure_message(str(exc)), str(exc)) from exc

        label = str(address).split(",")[0]
        logger.info("Location appended for %s", label)
        return f"{label}: ubicación guardada con éxito."

    def _failure_message(self, error_text: str) -> str:
        lowered = error_text.lower()
        if "permission" in lowered:
            return PERMISSION_DENIED
        if "unable to parse range" in lowered or "not found" in lowered:
            return SHEET_NOT_FOUND.format(sheet=self.sheet)
        return APPEND_FAILED
