"""
Shared fixtures for QuickInvoice tests
"""
import pytest

from invoice_app import QuickInvoiceApp
from models import Company, Employee, InvoiceDraft, ItemCategory, LineItem
from storage import JsonStore, StorageService


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def storage(data_dir):
    return StorageService(JsonStore(str(data_dir)))


@pytest.fixture
def app(storage, tmp_path):
    return QuickInvoiceApp(storage, export_dir=str(tmp_path / "exports")).load()


@pytest.fixture
def employee():
    return Employee(name="Ana", lastname="Rojas", abn="34632148828",
                    bsb="062033", acc="010999518", address="128 Gorge Rd")


@pytest.fixture
def company():
    return Company(name="Corporate Clean", address="128 Waymouth St",
                   postcode="5000", city="Adelaide", state="SA")


@pytest.fixture
def draft():
    d = InvoiceDraft(invoice_number=3, start_date="2025-02-03", end_date="2025-02-14")
    d.items = [
        LineItem(1, "2025/02/03", "floor 1", ItemCategory.KITCHEN, "Kitchen cleaning", "", 120.0),
        LineItem(2, "2025/02/04", "Lobby", ItemCategory.OTHER, "Windows", "2h", 55.5),
    ]
    d.total_amount = 175.5
    d.last_id = 2
    return d
