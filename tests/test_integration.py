from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from src.foodbank.config import settings
from src.foodbank.main import create_app
from src.foodbank.services.locking import RunLock


@pytest.fixture
def api_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    # keep lock files and run outputs inside the tmpdir
    monkeypatch.setattr(settings, "data_root", tmp_path)
    monkeypatch.setattr(settings, "workbook_file", tmp_path / "deliveries.xlsx")
    monkeypatch.setattr(settings, "persist_outputs", False)
    monkeypatch.setattr(settings, "lock_timeout_ms", 0)
    return TestClient(create_app())


def _write_workbook(path: Path) -> None:
    wb = Workbook()
    drivers = wb.active
    drivers.title = "Drivers"
    drivers.append(["Name", "Email", "Capacity"])
    drivers.append(["Ana", "ana@example.org", 10])
    drivers.append(["Ben", "ben@example.org", 10])
    deliveries = wb.create_sheet("Deliveries")
    deliveries.append(["Client", "Address", "Quantity"])
    deliveries.append(["Cara", "1 Elm St", 5])
    wb.save(path)


def test_health(api_client: TestClient) -> None:
    response = api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_allocate_endpoint(api_client: TestClient) -> None:
    payload = {
        "drivers": [{"Name": "Ana", "Email": "ana@example.org", "Capacity": 10}, {"Name": ""}],
        "deliveries": [{"Client": "Cara", "Address": "1 Elm St", "Quantity": 5, "Order": 7}],
    }

    response = api_client.post("/api/routes/allocate", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["summary"]["routes"] == 1
    assert body["routes"] == [
        {
            "Route": 1,
            "Driver": "Ana",
            "Email": "ana@example.org",
            "Capacity": 10,
            "Remaining": 5,
            "Client": "Cara",
            "Address": "1 Elm St",
            "Phone": "",
            "Boxes": 5,
            "Order": 7,
            "Notes": "",
        }
    ]


def test_allocate_endpoint_rejects_malformed_quantity(api_client: TestClient) -> None:
    payload = {"drivers": [], "deliveries": [{"Address": "1 Elm St", "Quantity": "many"}]}

    response = api_client.post("/api/routes/allocate", json=payload)

    assert response.status_code == 400
    assert "Quantity" in response.json()["detail"]


def test_run_endpoint_allocates_from_workbook(api_client: TestClient, tmp_path: Path) -> None:
    _write_workbook(tmp_path / "deliveries.xlsx")

    response = api_client.post("/api/routes/run")

    assert response.status_code == 200
    body = response.json()
    assert [row["Route"] for row in body["routes"]] == [1, "unassigned-driver"]
    assert body["metadata"]["routes_sheet"] == "Routes"
    assert not (tmp_path / "allocation.lock").exists()


def test_run_endpoint_reports_conflict_when_locked(api_client: TestClient, tmp_path: Path) -> None:
    _write_workbook(tmp_path / "deliveries.xlsx")
    holder = RunLock(tmp_path / "allocation.lock", timeout_ms=0)
    holder.try_acquire()

    try:
        response = api_client.post("/api/routes/run")
    finally:
        holder.release()

    assert response.status_code == 409
    assert "in progress" in response.json()["detail"]


def test_run_endpoint_missing_workbook(api_client: TestClient) -> None:
    response = api_client.post("/api/routes/run")

    assert response.status_code == 404


def test_workbook_health_reports_lock_state(api_client: TestClient, tmp_path: Path) -> None:
    _write_workbook(tmp_path / "deliveries.xlsx")
    holder = RunLock(tmp_path / "allocation.lock", timeout_ms=0)
    holder.try_acquire()

    try:
        response = api_client.get("/api/health/workbook")
    finally:
        holder.release()

    assert response.status_code == 200
    body = response.json()
    assert body["exists"] is True
    assert body["locked"] is True


def test_run_endpoint_rejects_flat_file_source(api_client: TestClient, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = tmp_path / "deliveries.csv"
    source.write_text("Name,Address,Boxes\nCara,1 Elm St,3\n", encoding="utf-8")
    monkeypatch.setattr(settings, "workbook_file", source)

    response = api_client.post("/api/routes/run")

    assert response.status_code == 400
    assert source.read_text(encoding="utf-8") == "Name,Address,Boxes\nCara,1 Elm St,3\n"


def test_root_describes_allocation_setup(api_client: TestClient) -> None:
    response = api_client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["sheets"] == {"drivers": "Drivers", "deliveries": "Deliveries", "routes": "Routes"}
    assert body["max_deliveries_per_route"] == settings.max_deliveries_per_route
    assert body["run"] == "/api/routes/run"
