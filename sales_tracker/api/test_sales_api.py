"""
Tests for sales API endpoints
"""

import pytest
from fastapi.testclient import TestClient
import pandas as pd
import io

from sales_tracker.api.main import app
from sales_tracker.config.settings import settings

client = TestClient(app)


@pytest.fixture
def sale_payload():
    """Valid sale creation body"""
    return {
        "date": "2024-03-15T10:00:00",
        "customerName": "Alice",
        "type": "Plugin",
        "assetName": "Plugin A",
        "link": "https://example.com/plugin-a",
        "price": 49.0
    }


@pytest.fixture
def sample_csv():
    """Create sample CSV data with one invalid row"""
    data = {
        "Date": ["31/01/2024", "2024-02-10", "15/03/2024"],
        "Name": ["Alice", "Bob", ""],
        "Type": ["Plugin", "Theme", "Theme"],
        "Asset": ["Plugin A", "Theme B", "Theme C"],
        "Link": ["", "https://example.com/b", ""],
        "Price": ["$100.00", "59.50", "20"]
    }
    df = pd.DataFrame(data)
    csv_data = io.StringIO()
    df.to_csv(csv_data, index=False)
    return csv_data.getvalue()


def create_sale(payload):
    """Helper to store a sale and return its body"""
    response = client.post("/api/sales", json=payload)
    assert response.status_code == 201
    return response.json()


def test_list_sales_empty():
    """Test listing with no sales"""
    response = client.get("/api/sales")
    assert response.status_code == 200
    assert response.json() == []


def test_create_and_get_sale(sale_payload):
    """Test creating a sale and reading it back"""
    created = create_sale(sale_payload)

    assert created["id"] > 0
    assert created["customerName"] == "Alice"
    assert created["assetName"] == "Plugin A"
    assert created["price"] == 49.0

    response = client.get(f"/api/sales/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created


def test_create_sale_accepts_snake_case():
    """Test snake_case field names are accepted on input"""
    body = {
        "customer_name": "Bob",
        "type": "Theme",
        "asset_name": "Theme B",
        "price": 10
    }
    created = create_sale(body)

    assert created["customerName"] == "Bob"
    assert created["link"] == ""


@pytest.mark.parametrize("changes", [
    {"price": 0},
    {"price": -1},
    {"customerName": "   "},
    {"assetName": ""},
    {"customerName": "x" * 201},
])
def test_create_sale_invalid(sale_payload, changes):
    """Test invalid sales are rejected"""
    response = client.post("/api/sales", json={**sale_payload, **changes})

    assert response.status_code == 422
    assert response.json()["type"] == "validation_error"


def test_list_sales_newest_first(sale_payload):
    """Test sales are listed by date descending"""
    create_sale({**sale_payload, "date": "2024-01-01T00:00:00", "customerName": "Old"})
    create_sale({**sale_payload, "date": "2024-06-01T00:00:00", "customerName": "New"})

    response = client.get("/api/sales")

    assert [sale["customerName"] for sale in response.json()] == ["New", "Old"]


def test_get_sale_not_found():
    """Test getting an unknown sale"""
    response = client.get("/api/sales/999999")

    assert response.status_code == 404
    assert response.json()["message"] == "Sale with ID 999999 not found"


def test_update_sale(sale_payload):
    """Test a full update"""
    created = create_sale(sale_payload)
    body = {**created, "customerName": "Alice Smith", "price": 75.25}

    response = client.put(f"/api/sales/{created['id']}", json=body)
    assert response.status_code == 204

    updated = client.get(f"/api/sales/{created['id']}").json()
    assert updated["customerName"] == "Alice Smith"
    assert updated["price"] == 75.25


def test_update_sale_id_mismatch(sale_payload):
    """Test the body ID must match the path ID"""
    created = create_sale(sale_payload)
    body = {**created, "id": created["id"] + 1}

    response = client.put(f"/api/sales/{created['id']}", json=body)

    assert response.status_code == 400
    assert response.json()["type"] == "identifier_mismatch"


def test_update_sale_not_found(sale_payload):
    """Test updating an unknown sale"""
    response = client.put("/api/sales/424242", json={**sale_payload, "id": 424242})
    assert response.status_code == 404


def test_delete_sale(sale_payload):
    """Test deleting a single sale"""
    created = create_sale(sale_payload)

    response = client.delete(f"/api/sales/{created['id']}")
    assert response.status_code == 204

    assert client.get(f"/api/sales/{created['id']}").status_code == 404
    assert client.delete(f"/api/sales/{created['id']}").status_code == 404


def test_delete_all_sales(sale_payload):
    """Test deleting every sale"""
    create_sale(sale_payload)
    create_sale({**sale_payload, "customerName": "Bob"})

    response = client.delete("/api/sales/all")

    assert response.status_code == 204
    assert client.get("/api/sales").json() == []


def test_bulk_import():
    """Test bulk import stores valid rows and reports the rest"""
    items = [
        {"customerName": "Alice", "assetName": "Plugin A", "type": "Plugin", "price": 100},
        {"customerName": "", "assetName": "Theme B", "price": 50},
        {"customerName": "Carol", "assetName": "Theme C", "price": 0},
    ]

    response = client.post("/api/sales/bulk", json=items)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "imported": 1,
        "failed": 2,
        "errors": [
            "Invalid data for customer: Unknown",
            "Invalid data for customer: Carol",
        ]
    }
    sales = client.get("/api/sales").json()
    assert len(sales) == 1
    assert sales[0]["customerName"] == "Alice"


def test_bulk_import_empty():
    """Test an empty bulk import is rejected"""
    response = client.post("/api/sales/bulk", json=[])

    assert response.status_code == 400
    assert response.json()["message"] == "No sales data provided"


def test_import_csv(sample_csv):
    """Test importing a CSV file"""
    files = {"file": ("sales.csv", sample_csv, "text/csv")}

    response = client.post("/api/sales/import", files=files)

    assert response.status_code == 200
    body = response.json()
    assert body["imported"] == 2
    assert body["failed"] == 1
    assert body["errors"] == ["Invalid data for customer: Unknown"]

    sales = client.get("/api/sales").json()
    assert [sale["customerName"] for sale in sales] == ["Bob", "Alice"]
    assert sales[1]["date"].startswith("2024-01-31")
    assert sales[1]["price"] == 100.0


def test_import_excel():
    """Test importing an Excel file"""
    output = io.BytesIO()
    pd.DataFrame({
        "Customer": ["Dana"],
        "Product": ["Icon Pack"],
        "Amount": ["12.00"],
        "Created": ["05/06/2024"]
    }).to_excel(output, index=False, engine="openpyxl")
    files = {
        "file": (
            "sales.xlsx",
            output.getvalue(),
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
    }

    response = client.post("/api/sales/import", files=files)

    assert response.status_code == 200
    assert response.json()["imported"] == 1
    sale = client.get("/api/sales").json()[0]
    assert sale["customerName"] == "Dana"
    assert sale["type"] == "Other"
    assert sale["date"].startswith("2024-06-05")


def test_import_invalid_file_type():
    """Test uploading an unsupported file"""
    files = {"file": ("sales.txt", "Name,Price\nAlice,10\n", "text/plain")}

    response = client.post("/api/sales/import", files=files)

    assert response.status_code == 400


def test_import_empty_file():
    """Test uploading a file with only a header"""
    files = {"file": ("sales.csv", "Name,Asset,Price\n", "text/csv")}

    response = client.post("/api/sales/import", files=files)

    assert response.status_code == 400
    assert response.json()["message"] == "No sales data provided"


def test_import_file_too_large(monkeypatch):
    """Test files over the size limit are rejected"""
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE_MB", 0)
    files = {"file": ("sales.csv", "Name,Asset,Price\nAlice,A,1\n", "text/csv")}

    response = client.post("/api/sales/import", files=files)

    assert response.status_code == 413


def test_import_preview(sample_csv):
    """Test previewing does not store anything"""
    files = {"file": ("sales.csv", sample_csv, "text/csv")}

    response = client.post("/api/sales/import/preview", files=files)

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert body["valid"] == 2
    assert body["invalid"] == 1
    assert [row["customerName"] for row in body["preview"]] == ["Alice", "Bob"]
    assert client.get("/api/sales").json() == []


def test_export_csv_round_trip(sample_csv):
    """Test an export can be imported again"""
    client.post("/api/sales/import", files={"file": ("sales.csv", sample_csv, "text/csv")})
    before = client.get("/api/sales").json()

    response = client.get("/api/sales/export", params={"format": "csv"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    exported = pd.read_csv(io.StringIO(response.text), dtype=str, keep_default_na=False)
    assert list(exported.columns) == ["Date", "Name", "Type", "Asset", "Link", "Price"]

    client.delete("/api/sales/all")
    reimport = client.post(
        "/api/sales/import", files={"file": ("export.csv", response.content, "text/csv")}
    )
    assert reimport.json()["imported"] == 2

    after = client.get("/api/sales").json()
    def strip_ids(sales):
        return [{k: v for k, v in sale.items() if k != "id"} for sale in sales]

    assert strip_ids(after) == strip_ids(before)


def test_export_excel(sale_payload):
    """Test exporting as Excel"""
    create_sale(sale_payload)

    response = client.get("/api/sales/export", params={"format": "excel"})

    assert response.status_code == 200
    exported = pd.read_excel(io.BytesIO(response.content), dtype=str)
    assert exported.loc[0, "Name"] == "Alice"
    assert exported.loc[0, "Price"] == "49.00"


def test_export_unsupported_format():
    """Test an unknown export format"""
    response = client.get("/api/sales/export", params={"format": "pdf"})
    assert response.status_code == 400


def test_blank_type_stored_as_other():
    """Test blank types from files and bulk rows are stored as Other"""
    csv_data = "Name,Type,Asset,Price,Date\nAlice,,Plugin A,10,2024-01-31\n"
    response = client.post("/api/sales/import", files={"file": ("sales.csv", csv_data, "text/csv")})
    assert response.json()["imported"] == 1

    response = client.post(
        "/api/sales/bulk",
        json=[{"customerName": "Bob", "type": "", "assetName": "Theme B", "price": 20}]
    )
    assert response.json()["imported"] == 1

    assert {sale["type"] for sale in client.get("/api/sales").json()} == {"Other"}
    assert client.get("/api/reports/summary").json()["mostSoldType"] == "Other"


def test_offset_dates_stored_as_utc(sale_payload):
    """Test dates with a UTC offset are converted before storing"""
    created = create_sale({**sale_payload, "date": "2024-01-31T23:30:00-05:00"})
    assert created["date"] == "2024-02-01T04:30:00"

    client.post(
        "/api/sales/bulk",
        json=[{"customerName": "Bob", "assetName": "Theme B", "price": 20,
               "date": "2024-03-01T01:00:00+02:00"}]
    )
    dates = [sale["date"] for sale in client.get("/api/sales").json()]
    assert "2024-02-29T23:00:00" in dates

    monthly = client.get("/api/reports/monthly-comparison", params={"year": 2024}).json()
    assert monthly[0]["salesCount"] == 0
    assert monthly[1]["salesCount"] == 2
