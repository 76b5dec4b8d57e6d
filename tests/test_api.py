import logging
import re

from fastapi.testclient import TestClient

from casesheets.api import create_app

from conftest import FakeSheetsClient

ISO_UTC = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.headers["x-request-id"]


def test_list_cases(client, sheets):
    resp = client.get("/api/cases")
    assert resp.status_code == 200
    body = resp.json()
    assert body["headers"] == ["EXPEDIENTE", "NOMBRES", "RUT", "ESTADO"]
    assert [c["rowIndex"] for c in body["cases"]] == [4, 5, 6]
    assert body["cases"][1] == {"EXPEDIENTE": "C-2", "NOMBRES": "Luis Soto", "rowIndex": 5}
    assert sheets.calls == [("read", "BD!A:ZZ")]


def test_list_cases_without_header_is_empty_success():
    sheets = FakeSheetsClient(grid=[["a", "b"], ["EXPEDIENTE", "NOMBRES"]])
    client = TestClient(create_app(sheets_client=sheets))
    resp = client.get("/api/cases")
    assert resp.status_code == 200
    assert resp.json() == {"headers": [], "cases": []}


def test_list_cases_empty_sheet():
    client = TestClient(create_app(sheets_client=FakeSheetsClient(grid=[])))
    resp = client.get("/api/cases")
    assert resp.status_code == 200
    assert resp.json() == {"headers": [], "cases": []}


def test_list_cases_remote_failure(client, sheets):
    sheets.fail_on = "read"
    resp = client.get("/api/cases")
    assert resp.status_code == 500
    assert resp.json() == {"message": "Error al conectar con Google Sheets.", "error": "backend unavailable"}


def test_put_cases_requires_headers_and_cases(client, sheets):
    for body in ({}, {"headers": ["A"]}, {"cases": []}):
        resp = client.put("/api/cases", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"message": "Faltan headers o cases en la petición."}
    assert sheets.calls == []


def test_put_cases_clears_then_writes(client, sheets):
    body = {
        "headers": ["EXPEDIENTE", "NOMBRES", "RUT"],
        "cases": [
            {"EXPEDIENTE": "C-1", "NOMBRES": "Ana", "RUT": "1-9", "rowIndex": 4},
            {"EXPEDIENTE": "C-2", "RUT": ""},
        ],
    }
    resp = client.put("/api/cases", json=body)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Hoja de cálculo actualizada con éxito."}
    assert sheets.calls == [
        ("clear", "BD!A4:ZZ"),
        ("write_at", "BD!A4", [["C-1", "Ana", "1-9"], ["C-2", None, None]]),
    ]


def test_put_cases_explicit_start_row(client, sheets):
    resp = client.put("/api/cases", json={"headers": ["A"], "cases": [{"A": 1}], "startRow": 7})
    assert resp.status_code == 200
    assert sheets.calls == [("clear", "BD!A7:ZZ"), ("write_at", "BD!A7", [[1]])]


def test_put_empty_cases_only_clears(client, sheets):
    resp = client.put("/api/cases", json={"headers": ["A"], "cases": []})
    assert resp.status_code == 200
    assert sheets.calls == [("clear", "BD!A4:ZZ")]


def test_put_cases_failure_after_clear(client, sheets):
    sheets.fail_on = "write_at"
    sheets.error_text = "Quota exceeded"
    resp = client.put("/api/cases", json={"headers": ["A"], "cases": [{"A": "x"}]})
    assert resp.status_code == 500
    assert resp.json() == {"message": "Error al escribir en Google Sheets.", "error": "Quota exceeded"}
    # Clear already happened; nothing is rolled back.
    assert [c[0] for c in sheets.calls] == ["clear", "write_at"]


def test_location_appends_single_row(client, sheets):
    resp = client.post(
        "/api/location",
        json={"address": "123 Main St, City", "location": {"lat": 1.0, "lon": 2.0}},
    )
    assert resp.status_code == 200
    assert resp.json()["message"].startswith("123 Main St")

    assert len(sheets.calls) == 1
    op, range_, values = sheets.calls[0]
    assert op == "append"
    assert range_ == "Ubicaciones!A:E"
    assert len(values) == 1
    row = values[0]
    assert ISO_UTC.match(row[0])
    assert row[1:] == ["123 Main St, City", 1.0, 2.0, "N/A"]


def test_location_keeps_case_id(client, sheets):
    resp = client.post(
        "/api/location",
        json={"address": "Av. Siempre Viva 742", "location": {"lat": -33.4, "lon": -70.6}, "caseId": "C-9"},
    )
    assert resp.status_code == 200
    assert sheets.calls[0][2][0][4] == "C-9"


def test_location_missing_fields(client, sheets):
    bodies = [
        {},
        {"address": "123 Main St", "location": {"lon": 2.0}},
        {"address": "123 Main St", "location": {"lat": 1.0}},
        {"address": "123 Main St"},
        {"address": "", "location": {"lat": 1.0, "lon": 2.0}},
        {"address": "123 Main St", "location": {"lat": 0, "lon": 2.0}},
    ]
    for body in bodies:
        resp = client.post("/api/location", json=body)
        assert resp.status_code == 400
        assert "message" in resp.json()
    assert sheets.calls == []


def test_location_failure_messages(client, sheets):
    body = {"address": "123 Main St, City", "location": {"lat": 1.0, "lon": 2.0}}
    sheets.fail_on = "append"

    sheets.error_text = "The caller does not have permission"
    resp = client.post("/api/location", json=body)
    assert resp.status_code == 500
    assert resp.json() == {
        "message": "La cuenta de servicio no tiene permiso de edición sobre la hoja.",
        "error": "The caller does not have permission",
    }

    sheets.error_text = "Unable to parse range: Ubicaciones!A:E"
    resp = client.post("/api/location", json=body)
    assert resp.status_code == 500
    assert "Ubicaciones" in resp.json()["message"]

    sheets.error_text = "socket closed"
    resp = client.post("/api/location", json=body)
    assert resp.status_code == 500
    assert resp.json()["message"] == "Error al guardar la ubicación en Google Sheets."
    assert resp.json()["error"] == "socket closed"


def test_body_size_guard(client, sheets, monkeypatch):
    from casesheets.config import settings

    monkeypatch.setattr(settings.security, "max_body_mb", 0)
    resp = client.put("/api/cases", json={"headers": ["A"], "cases": []})
    assert resp.status_code == 413
    assert sheets.calls == []


def test_location_coordinates_are_forwarded_as_sent(client, sheets):
    resp = client.post(
        "/api/location",
        json={"address": "Calle 1, Stgo", "location": {"lat": "-33.45 S", "lon": "-70.6 W"}, "caseId": 42},
    )
    assert resp.status_code == 200
    assert resp.json()["message"].startswith("Calle 1")
    row = sheets.calls[0][2][0]
    assert row[1:] == ["Calle 1, Stgo", "-33.45 S", "-70.6 W", 42]

    client.post("/api/location", json={"address": "Calle 2", "location": {"lat": "-33.45", "lon": "-70.6"}})
    assert sheets.calls[1][2][0][2:4] == ["-33.45", "-70.6"]


def test_put_cases_accepts_non_string_headers(client, sheets):
    resp = client.put("/api/cases", json={"headers": ["A", 2], "cases": [{"A": "x", "2": "y"}, "junk"]})
    assert resp.status_code == 200
    assert sheets.calls[1] == ("write_at", "BD!A4", [["x", "y"], [None, None]])


def test_malformed_bodies_answer_400_with_message(client, sheets):
    resp = client.post("/api/location", json={"address": "Calle 1", "location": "here"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "El cuerpo de la petición no es válido."}

    resp = client.put("/api/cases", json={"headers": ["A"], "cases": [], "startRow": "top"})
    assert resp.status_code == 400
    assert set(resp.json()) == {"message"}

    resp = client.put("/api/cases", json={"headers": "A", "cases": {}})
    assert resp.status_code == 400
    assert resp.json() == {"message": "headers y cases deben ser listas."}
    assert sheets.calls == []


def test_request_log_line_carries_fields(client, caplog):
    caplog.set_level(logging.INFO, logger="casesheets.api")
    resp = client.get("/health", headers={"x-request-id": "abc123"})
    assert resp.headers["x-request-id"] == "abc123"

    lines = [r.getMessage() for r in caplog.records if r.name == "casesheets.api"]
    assert any(line.startswith("GET /health -> 200 (") and line.endswith("rid=abc123") for line in lines)
