import json
import os

import pytest

from errors import StorageError, ValidationError
from invoice_app import QuickInvoiceApp
from models import CleaningSelections, InvoiceDraft, ItemCategory, LineItem


def test_load_uses_defaults_when_nothing_stored(app):
    assert app.employee.name == "John"
    assert app.company.name == "Example Cleaning Company Pty Ltd"
    assert app.selections == CleaningSelections(kitchen=False, night=True)
    assert app.saved_invoices == []


def test_kitchen_only_first_week(app):
    app.set_cleaning_selections(kitchen=True, night=False)

    app.set_date_range("2025-01-06", "2025-01-09")

    assert len(app.draft.items) == 4
    assert all(i.amount == 120 for i in app.draft.items)
    assert app.draft.total_amount == 480
    assert app.draft.invoice_number == 1
    assert app.draft.start_date == "2025-01-06"
    assert app.draft.end_date == "2025-01-09"


def test_both_services_over_a_fortnight(app):
    app.set_cleaning_selections(kitchen=True, night=True)

    app.set_date_range("2025-01-20", "2025-01-31")

    descriptions = [i.description for i in app.draft.items]
    assert descriptions == ["Kitchen cleaning"] * 8 + ["Night cleaning"] * 8
    assert app.draft.total_amount == 8 * 120 + 8 * 90
    assert app.draft.invoice_number == 2
    assert all(i.category == ItemCategory.KITCHEN for i in app.draft.items)
    assert len({i.id for i in app.draft.items}) == 16


@pytest.mark.parametrize("start,end", [
    ("2025-01-09", "2025-01-06"),
    ("2025-01-06", "2025-01-06"),
    ("not a date", "2025-01-06"),
])
def test_invalid_range_leaves_draft_untouched(app, start, end):
    with pytest.raises(ValidationError):
        app.set_date_range(start, end)

    assert app.draft == InvoiceDraft()


def test_no_cleaning_type_selected(app):
    app.set_cleaning_selections(kitchen=False, night=False)

    with pytest.raises(ValidationError):
        app.set_date_range("2025-01-06", "2025-01-09")
    assert app.draft == InvoiceDraft()


def test_selections_are_persisted(app, storage):
    app.set_cleaning_selections(kitchen=True)

    assert storage.get_cleaning_selections() == CleaningSelections(kitchen=True, night=True)


def test_regeneration_keeps_manual_items(app):
    app.set_date_range("2025-01-06", "2025-01-09")
    manual = app.new_item()
    manual.date, manual.room, manual.description, manual.amount = "2025/01/07", "Lobby", "Windows", 50
    app.save_item(manual)

    app.set_cleaning_selections(kitchen=True, night=False)
    app.set_date_range("2025-01-06", "2025-01-16")

    others = [i for i in app.draft.items if i.category == ItemCategory.OTHER]
    generated = [i for i in app.draft.items if i.category == ItemCategory.KITCHEN]
    assert [i.description for i in others] == ["Windows"]
    assert len(generated) == 8
    assert all(i.description == "Kitchen cleaning" for i in generated)
    assert app.draft.total_amount == 50 + 8 * 120
    assert len({i.id for i in app.draft.items}) == len(app.draft.items)


def test_save_item_requires_fields(app):
    item = app.new_item()
    item.date = "2025/01/07"

    with pytest.raises(ValidationError) as exc:
        app.save_item(item)
    assert "room" in str(exc.value)
    assert app.draft.items == []


def test_edit_and_delete_item(app):
    app.set_date_range("2025-01-06", "2025-01-09")
    edited = LineItem(**{**vars(app.draft.items[0]), "amount": 100})

    app.save_item(edited)
    assert len(app.draft.items) == 4
    assert app.draft.total_amount == 3 * 90 + 100

    app.delete_item(edited.id)
    assert len(app.draft.items) == 3
    assert app.draft.total_amount == 270


def test_update_employee_rejects_unknown_fields(app):
    app.update_employee(name="Ana", abn="111")
    assert app.employee.name == "Ana"

    with pytest.raises(ValidationError):
        app.update_employee(nickname="A")


def test_profile_edits_are_persisted(app, storage):
    app.update_employee(name="Ana", lastname="Rojas")
    app.update_company(city="Adelaide", state="SA")
    app.save_employee()
    app.save_company()

    assert storage.get_employee().lastname == "Rojas"
    assert storage.get_company().state == "SA"


def test_save_invoice_persists_and_resets_draft(app, storage, tmp_path):
    app.set_date_range("2025-01-06", "2025-01-09")

    invoice = app.save_invoice(app.default_title())

    assert invoice.total_amount == 360
    assert app.draft == InvoiceDraft()
    assert [i.id for i in storage.get_invoices()] == [invoice.id]

    reopened = QuickInvoiceApp(storage, export_dir=str(tmp_path)).load()
    assert reopened.get_invoice(invoice.id) == invoice


def test_save_invoice_requires_title(app):
    app.set_date_range("2025-01-06", "2025-01-09")

    with pytest.raises(ValidationError):
        app.save_invoice("   ")
    assert len(app.draft.items) == 4


def test_two_immediate_saves_get_distinct_ids(app):
    app.set_date_range("2025-01-06", "2025-01-09")
    first = app.save_invoice("first")
    app.set_date_range("2025-01-06", "2025-01-09")
    second = app.save_invoice("second")

    assert first.id != second.id
    assert len(app.saved_invoices) == 2


def test_saved_invoice_unaffected_by_new_draft(app):
    app.set_date_range("2025-01-06", "2025-01-09")
    invoice = app.save_invoice("first")

    app.set_date_range("2025-01-06", "2025-01-09")
    app.draft.items[0].amount = 1
    app.update_employee(name="Someone else")

    assert invoice.items[0].amount == 90
    assert invoice.employee.name == "John"


def test_storage_failure_keeps_draft(app, monkeypatch):
    app.set_date_range("2025-01-06", "2025-01-09")

    def fail(invoices):
        raise StorageError("disk full")

    monkeypatch.setattr(app.storage, "save_invoices", fail)

    with pytest.raises(StorageError):
        app.save_invoice("title")
    assert len(app.draft.items) == 4
    assert len(app.saved_invoices) == 1


def test_delete_invoice(app, storage):
    app.set_date_range("2025-01-06", "2025-01-09")
    invoice = app.save_invoice("first")

    assert app.delete_invoice(invoice.id) is True
    assert app.delete_invoice(invoice.id) is False
    assert storage.get_invoices() == []


def test_export_current_and_saved(app, tmp_path):
    with pytest.raises(ValidationError):
        app.export_current()

    app.set_date_range("2025-01-06", "2025-01-09")
    path = app.export_current()
    assert os.path.exists(path)
    assert os.path.basename(path) == "Invoice_John_Doe_Jan 6_to_January 9.xlsx"

    invoice, saved_path = app.export_and_save("title", str(tmp_path / "share"))
    assert os.path.exists(saved_path)
    assert app.draft == InvoiceDraft()

    again = app.export_saved(invoice.id, str(tmp_path / "again"))
    assert os.path.exists(again)


def test_overviews_tolerate_malformed_stored_invoice(storage, data_dir, tmp_path):
    record = [{
        "id": "1736121600000-abc-1",
        "invoiceNumber": 1,
        "employee": {"name": "Ana", "lastname": "Rojas"},
        "company": {"name": "Corporate Clean"},
        "startDate": "2025-01-06",
        "endDate": "2025-01-09",
        "items": [
            {"id": 1, "date": "2025/01/06", "room": "floor 1", "type": "1",
             "description": "Kitchen cleaning", "time": "", "amount": "abc"},
            {"id": 2, "date": "bad", "room": "Lobby", "type": "2",
             "description": "Windows", "time": "", "amount": 40},
        ],
        "totalAmount": 40,
        "createdAt": "2025-01-10T01:02:03.000Z",
    }]
    (data_dir / "saved_invoices.json").write_text(json.dumps(record), encoding="utf-8")

    app = QuickInvoiceApp(storage, export_dir=str(tmp_path)).load()
    view = app.invoice_overviews()[0]

    assert [i["amount"] for i in view["items"]] == ["$0.00", "$40.00"]
    assert view["items"][1]["day"] == ""
    assert view["total"] == "$40.00"
    assert view["created"] == "January 10, 2025"
    assert view["employee_name"] == "Ana Rojas"


def test_storage_info(app):
    app.set_date_range("2025-01-06", "2025-01-09")
    app.save_invoice("first")
    app.set_date_range("2025-01-13", "2025-01-14")

    info = app.storage_info()

    assert info["current_invoice_items"] == 2
    assert info["saved_invoices"] == 1
    assert info["total_invoice_value"] == 360
    assert info["employee_name"] == "John Doe"


def test_clear_all_data(app, storage):
    app.update_employee(name="Ana")
    app.save_employee()
    app.set_date_range("2025-01-06", "2025-01-09")
    app.save_invoice("first")
    app.set_date_range("2025-01-13", "2025-01-16")

    app.clear_all_data()

    assert app.draft == InvoiceDraft()
    assert app.saved_invoices == []
    assert app.employee.name == "John"
    assert storage.get_employee() is None
    assert storage.get_invoices() == []


def test_unreadable_history_file_does_not_lose_saved_invoices(app, storage, data_dir):
    app.set_date_range("2025-01-06", "2025-01-09")
    first = app.save_invoice("first")
    app.set_date_range("2025-01-20", "2025-01-23")
    second = app.save_invoice("second")
    (data_dir / "saved_invoices.json").write_text("{truncated", encoding="utf-8")

    app.set_date_range("2025-02-03", "2025-02-06")
    third = app.save_invoice("third")

    assert [i.id for i in storage.get_invoices()] == [first.id, second.id, third.id]


def test_delete_keeps_unreadable_history(app, storage, data_dir):
    app.set_date_range("2025-01-06", "2025-01-09")
    first = app.save_invoice("first")
    app.set_date_range("2025-01-20", "2025-01-23")
    second = app.save_invoice("second")
    (data_dir / "saved_invoices.json").write_text("{truncated", encoding="utf-8")

    app.delete_invoice(first.id)

    assert [i.id for i in storage.get_invoices()] == [second.id]


def test_control_characters_do_not_break_export(app, tmp_path):
    app.set_date_range("2025-01-06", "2025-01-09")
    app.update_employee(name="Jo\x01hn")
    item = app.draft.items[0]
    item.room = "floor\x01 1"
    app.save_item(item)

    path = app.export_current(str(tmp_path / "ctrl"))

    assert os.path.exists(path)


def test_missing_date_is_a_validation_error(app):
    with pytest.raises(ValidationError):
        app.set_date_range(None, "2025-01-09")
    assert app.draft == InvoiceDraft()


def test_profile_values_are_typed(app):
    app.update_employee(abn=34632148828, phone=None)
    assert app.employee.abn == "34632148828"
    assert app.employee.phone == ""

    with pytest.raises(ValidationError):
        app.update_employee(name=["Ana"])
    with pytest.raises(ValidationError):
        app.update_company(id="seven")
    assert app.employee.name == "John"
