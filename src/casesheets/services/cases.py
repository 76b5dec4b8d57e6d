import logging
from typing import Any, Optional, Sequence

from casesheets.config import CASES_SHEET
from casesheets.exceptions import PayloadError, SheetsApiError, SheetsServiceError
from casesheets.sheets.client import SheetsClient, a1_range
from casesheets.tables import DATA_START_ROW, CaseTable, project_case_table, serialize_records

logger = logging.getLogger(__name__)

READ_FAILED = "Error al conectar con Google Sheets."
WRITE_FAILED = "Error al escribir en Google Sheets."
MISSING_FIELDS = "Faltan headers o cases en la petición."
WRITE_OK = "Hoja de cálculo actualizada con éxito."
NOT_LISTS = "headers y cases deben ser listas."


class CaseTableService:
    """
    Reads and overwrites the case table stored in the cases tab.
    """

    def __init__(self, client: SheetsClient, sheet: str = CASES_SHEET):
        self.client = client
        self.sheet = sheet

    def list_cases(self) -> CaseTable:
        try:
            grid = self.client.read(a1_range(self.sheet, "A:ZZ"))
        except SheetsApiError as exc:
            logger.exception("Failed to read sheet %s", self.sheet)
            raise SheetsServiceError(READ_FAILED, str(exc)) from exc
        return project_case_table(grid)

    def overwrite_cases(
        self,
        headers: Optional[Sequence[str]],
        cases: Optional[Sequence[dict[str, Any]]],
        start_row: Optional[int] = None,
    ) -> str:
        """
        Clears the tab from start_row down, then writes one row per case in header order.

        start_row defaults to DATA_START_ROW and must match the row right below the
        sheet's header row. Clear and update are separate calls: if the update fails
        the data rows stay cleared.
        """
        if headers is None or cases is None:
            raise PayloadError(MISSING_FIELDS)
        if not isinstance(headers, list) or not isinstance(cases, list):
            raise PayloadError(NOT_LISTS)

        first_row = start_row or DATA_START_ROW
        values = serialize_records(headers, cases)

        try:
            self.client.clear(a1_range(self.sheet, f"A{first_row}:ZZ"))
            if values:
                self.client.write_at(a1_range(self.sheet, f"A{first_row}"), values)
        except SheetsApiError as exc:
            logger.exception("Failed to overwrite sheet %s", self.sheet)
            raise SheetsServiceError(WRITE_FAILED, str(exc)) from exc

        logger.info("Wrote %s case rows to %s from row %s", len(values), self.sheet, first_row)
        return WRITE_OK
