"""
Application state and actions for QuickInvoice.

QuickInvoiceApp owns the employee, company, cleaning selections, the draft
being built and the saved invoice collection. Every user action maps to one
method; validation runs before any state changes, and persistence failures
surface as StorageError after the in-memory step has already happened.
"""
from __future__ import annotations
import os
from dataclasses import fields, replace
from typing import Any, Dict, List, Optional, Tuple, TypeVar

from openpyxl.utils.exceptions import IllegalCharacterError

from computations import (
    compute_recurring_items,
    compute_storage_summary,
    invoice_number_for,
    invoice_overview,
)
from config import get_default_company, get_default_employee, get_default_selections
from draft import (
    recompute_total,
    remove_item,
    remove_items_by_category,
    reset_draft,
    set_end_date,
    set_invoice_number,
    set_start_date,
    upsert_item,
)
from errors import ExportError, ValidationError
from excel_export import export_filename, export_invoice_excel
from logs import logger
from models import (
    CleaningSelections,
    Company,
    Employee,
    InvoiceDraft,
    ItemCategory,
    LineItem,
    SavedInvoice,
)
from records import (
    add_saved_invoice,
    assemble_invoice,
    delete_saved_invoice,
    find_saved_invoice,
    merge_saved_invoices,
)
from storage import StorageService
from utils import generate_invoice_title, to_date

log = logger(__file__)

T = TypeVar("T")


def _coerce_field(name: str, annotation: str, value: Any) -> Any:
    """Text fields take str (numbers are converted, None clears); ids take int or None"""
    if annotation == "str":
        if value is None:
            return ""
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValidationError(f"{name} must be text")
        return str(value)
    if annotation == "Optional[int]":
        if value is None or (isinstance(value, int) and not isinstance(value, bool)):
            return value
        raise ValidationError(f"{name} must be an integer or empty")
    return value


def _merge(record: T, changes: Dict[str, Any]) -> T:
    """Apply a partial update, rejecting unknown field names and mistyped values"""
    types = {f.name: f.type for f in fields(record)}
    unknown = sorted(set(changes) - set(types))
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(unknown)}")
    coerced = {name: _coerce_field(name, types[name], value) for name, value in changes.items()}
    return replace(record, **coerced)


class QuickInvoiceApp:
    """State container for one QuickInvoice user"""

    def __init__(self, storage: Optional[StorageService] = None, export_dir: Optional[str] = None):
        self.storage = storage or StorageService()
        self.export_dir = export_dir or os.path.join(self.storage.store.base_dir, "exports")

        self.employee: Employee = get_default_employee()
        self.company: Company = get_default_company()
        self.selections: CleaningSelections = get_default_selections()
        self.draft = InvoiceDraft()
        self.saved_invoices: List[SavedInvoice] = []

    def load(self) -> "QuickInvoiceApp":
        """Read persisted records, using defaults for anything not stored"""
        self.employee = self.storage.get_employee() or get_default_employee()
        self.company = self.storage.get_company() or get_default_company()
        self.selections = self.storage.get_cleaning_selections()
        self.saved_invoices = self.storage.get_invoices()
        log.info("Loaded %d saved invoice(s)", len(self.saved_invoices))
        return self

    # ---------- Employee / Company ----------
    def update_employee(self, **changes: Any) -> Employee:
        self.employee = _merge(self.employee, changes)
        return self.employee

    def save_employee(self) -> None:
        self.storage.save_employee(self.employee)

    def update_company(self, **changes: Any) -> Company:
        self.company = _merge(self.company, changes)
        return self.company

    def save_company(self) -> None:
        self.storage.save_company(self.company)

    def set_cleaning_selections(
        self,
        kitchen: Optional[bool] = None,
        night: Optional[bool] = None,
    ) -> CleaningSelections:
        """Update which services are generated and persist the choice"""
        self.selections = CleaningSelections(
            kitchen=self.selections.kitchen if kitchen is None else bool(kitchen),
            night=self.selections.night if night is None else bool(night),
        )
        self.storage.save_cleaning_selections(self.selections)
        return self.selections

    # ---------- Draft ----------
    def _require_selection(self):
        if not self.selections.enabled_kinds():
            raise ValidationError("Select at least one cleaning type")

    def set_date_range(self, start: Any, end: Any) -> List[LineItem]:
        """
        Set the invoice period, derive the invoice number from the start
        date and regenerate the recurring items.
        """
        try:
            start_d = to_date(start)
            end_d = to_date(end)
        except (TypeError, ValueError, AttributeError) as ex:
            raise ValidationError(f"Invalid date: {ex}") from ex
        if start_d >= end_d:
            raise ValidationError("Start date must be before end date")
        self._require_selection()

        set_start_date(self.draft, start_d.isoformat())
        set_end_date(self.draft, end_d.isoformat())
        set_invoice_number(self.draft, invoice_number_for(start_d))
        return self.calculate_items()

    def calculate_items(self) -> List[LineItem]:
        """
        Replace previously generated items with fresh ones for the draft period.
        Items of other categories are kept.
        """
        if not self.draft.start_date or not self.draft.end_date:
            raise ValidationError("Select a start and end date first")
        self._require_selection()

        removed = remove_items_by_category(self.draft, ItemCategory.KITCHEN)
        added = []
        for kind in self.selections.enabled_kinds():
            entries = compute_recurring_items(kind, self.draft.start_date, self.draft.end_date)
            log.info("Generated %d %s item(s)", len(entries), kind.value)
            for entry in entries:
                added.append(upsert_item(self.draft, LineItem(
                    id=None,
                    date=entry.date,
                    room=entry.room,
                    category=ItemCategory.KITCHEN,
                    description=entry.description,
                    time="",
                    amount=entry.amount,
                )))
        recompute_total(self.draft)
        log.debug("Replaced %d generated item(s) with %d", removed, len(added))
        return added

    @staticmethod
    def new_item() -> LineItem:
        """Blank item for manual entry"""
        return LineItem(id=None, date="", room="", category=ItemCategory.OTHER,
                        description="", time="", amount=0.0)

    def save_item(self, item: LineItem) -> LineItem:
        """Validate and add or update a manually edited item"""
        missing = [name for name in ("date", "room", "description")
                   if not str(getattr(item, name) or "").strip()]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
        stored = upsert_item(self.draft, item)
        recompute_total(self.draft)
        return stored

    def delete_item(self, item_id: int) -> None:
        remove_item(self.draft, item_id)
        recompute_total(self.draft)

    def clear_current_invoice(self) -> None:
        reset_draft(self.draft)

    def default_title(self) -> str:
        return generate_invoice_title(
            self.employee.name, self.employee.lastname,
            self.draft.start_date, self.draft.end_date,
        )

    # ---------- Saved invoices ----------
    def save_invoice(self, title: str) -> SavedInvoice:
        """
        Snapshot the draft, add it to the saved collection, persist the
        collection, then reset the draft. If persisting fails the draft is
        kept so nothing is lost.
        """
        if not (title or "").strip():
            raise ValidationError("Please enter a title for this invoice")
        if not self.draft.items:
            raise ValidationError("No items to save")

        stored = self.storage.get_invoices()
        existing_ids = {inv.id for inv in stored} | {inv.id for inv in self.saved_invoices}
        invoice = assemble_invoice(self.employee, self.company, self.draft, existing_ids)

        self.saved_invoices = add_saved_invoice(self.saved_invoices, invoice)
        # in-memory history covers records a failed read could not return
        self.storage.save_invoices(merge_saved_invoices(stored, self.saved_invoices))
        log.info("Saved invoice %s (%r, %d items)", invoice.id, title, len(invoice.items))

        reset_draft(self.draft)
        return invoice

    def delete_invoice(self, invoice_id: str) -> bool:
        """Remove a saved invoice from memory and storage; False if unknown"""
        if find_saved_invoice(self.saved_invoices, invoice_id) is None:
            return False
        self.saved_invoices = delete_saved_invoice(self.saved_invoices, invoice_id)
        remaining = merge_saved_invoices(self.storage.get_invoices(), self.saved_invoices)
        self.storage.save_invoices(delete_saved_invoice(remaining, invoice_id))
        log.info("Deleted invoice %s", invoice_id)
        return True

    def get_invoice(self, invoice_id: str) -> Optional[SavedInvoice]:
        return find_saved_invoice(self.saved_invoices, invoice_id)

    def invoice_overviews(self) -> List[Dict[str, object]]:
        """Saved invoices, newest first, ready for display"""
        ordered = sorted(self.saved_invoices, key=lambda inv: inv.created_at, reverse=True)
        return [invoice_overview(inv) for inv in ordered]

    # ---------- Export ----------
    def _export(
        self,
        employee: Employee,
        company: Company,
        items: List[LineItem],
        start_date: str,
        end_date: str,
        invoice_number: int,
        total_amount: float,
        directory: Optional[str],
    ) -> str:
        path = os.path.join(directory or self.export_dir, export_filename(employee, start_date, end_date))
        try:
            export_invoice_excel(
                employee, company, items, start_date, end_date,
                invoice_number, total_amount, path,
            )
        except (OSError, ValueError, IllegalCharacterError) as ex:
            log.error("Error generating Excel: %s", ex)
            raise ExportError(f"Failed to generate Excel file: {ex}") from ex
        log.info("Exported invoice %s to %s", invoice_number, path)
        return path

    def export_current(self, directory: Optional[str] = None) -> str:
        """Write the draft to a spreadsheet and return its path"""
        if not self.draft.items:
            raise ValidationError("No items to export")
        d = self.draft
        return self._export(self.employee, self.company, d.items, d.start_date, d.end_date,
                            d.invoice_number, d.total_amount, directory)

    def export_saved(self, invoice_id: str, directory: Optional[str] = None) -> str:
        inv = self.get_invoice(invoice_id)
        if inv is None:
            raise ValidationError(f"No saved invoice with id {invoice_id}")
        return self._export(inv.employee, inv.company, inv.items, inv.start_date, inv.end_date,
                            inv.invoice_number, inv.total_amount, directory)

    def export_and_save(self, title: str, directory: Optional[str] = None) -> Tuple[SavedInvoice, str]:
        """Export the draft, then save it (which resets the draft)"""
        if not (title or "").strip():
            raise ValidationError("Please enter a title for this invoice")
        path = self.export_current(directory)
        return self.save_invoice(title), path

    # ---------- Data management ----------
    def storage_info(self) -> Dict[str, object]:
        return compute_storage_summary(self.employee, self.company, self.draft, self.saved_invoices)

    def clear_all_data(self) -> None:
        """Wipe every stored record, then reset in-memory state to defaults"""
        self.storage.clear_all_data()
        reset_draft(self.draft)
        self.saved_invoices = []
        self.employee = get_default_employee()
        self.company = get_default_company()
        self.selections = get_default_selections()
