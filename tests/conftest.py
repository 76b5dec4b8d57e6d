from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from casesheets.api import create_app
from casesheets.exceptions import SheetsApiError


class FakeSheetsClient:
    """
    In-memory stand-in for the Sheets values API. Records every call; `fail_on`
    names an operation that should raise SheetsApiError with `error_text`.
    """

    def __init__(self, grid: Optional[list[list[Any]]] = None):
        self.grid = grid if grid is not None else []
        self.calls: list[tuple] = []
        self.fail_on: Optional[str] = None
        self.error_text = "backend unavailable"

    def _maybe_fail(self, op: str):
        if self.fail_on == op:
            raise SheetsApiError(self.error_text, status=500)

    def read(self, range_: str):
        self.calls.append(("read", range_))
        self._maybe_fail("read")
        return self.grid

    def clear(self, range_: str):
        self.calls.append(("clear", range_))
        self._maybe_fail("clear")

    def write_at(self, range_: str, values):
        self.calls.append(("write_at", range_, values))
        self._maybe_fail("write_at")

    def append(self, range_: str, values):
        self.calls.append(("append", range_, values))
        self._maybe_fail("append")


SAMPLE_GRID = [
    ["Registro de causas"],
    [],
    ["EXPEDIENTE", "NOMBRES", "RUT", " ESTADO "],
    ["C-1", "Ana Pérez", "11.111.111-1", "Abierta"],
    ["C-2", "Luis Soto"],
    [],
]


@pytest.fixture
def sheets():
    return FakeSheetsClient(grid=[list(row) for row in SAMPLE_GRID])


@pytest.fixture
def client(sheets):
    return TestClient(create_app(sheets_client=sheets))
