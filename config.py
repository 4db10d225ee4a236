"""
Configuration defaults and record (de)serialization for QuickInvoice.

Persisted field names follow the records already stored on users' devices
(camelCase, ``stateA``, ``type``), so the dict converters below are the
only place where Python attribute names and stored keys differ.
"""
from __future__ import annotations
from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional

from logs import logger
from models import (
    CleaningSelections,
    Company,
    Employee,
    ItemCategory,
    LineItem,
    SavedInvoice,
)
from utils import safe_float

log = logger(__file__)

# Persisted record keys
EMPLOYEE_KEY = "employee_data"
COMPANY_KEY = "company_data"
INVOICES_KEY = "saved_invoices"
CLEANING_SELECTIONS_KEY = "cleaning_selections"
ALL_KEYS = (EMPLOYEE_KEY, COMPANY_KEY, INVOICES_KEY, CLEANING_SELECTIONS_KEY)

UNKNOWN_EMPLOYEE = "Unknown employee"


def get_default_employee() -> Employee:
    """Employee used when nothing has been stored yet"""
    return Employee(
        name="John",
        lastname="Doe",
        abn="12345678901",
        bsb="123456",
        acc="123456789",
        address="123 Main Street, Sydney NSW 2000",
    )


def get_default_company() -> Company:
    """Company used when nothing has been stored yet"""
    return Company(
        name="Example Cleaning Company Pty Ltd",
        address="456 Business Street",
        city="Sydney",
        state="NSW",
        postcode="2000",
    )


def get_default_selections() -> CleaningSelections:
    return CleaningSelections(kitchen=False, night=True)


def _as_dict(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _as_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ---------- Employee / Company ----------

def employee_to_dict(employee: Employee) -> dict:
    return asdict(employee)


def dict_to_employee(d: Any) -> Employee:
    """Build an Employee, falling back to blank fields for anything missing"""
    d = _as_dict(d)
    return Employee(
        id=_as_int(d.get("id"), 1),
        email=_as_str(d.get("email")),
        name=_as_str(d.get("name")),
        lastname=_as_str(d.get("lastname")),
        birthdate=_as_str(d.get("birthdate")),
        address=_as_str(d.get("address")),
        phone=_as_str(d.get("phone")),
        abn=_as_str(d.get("abn")),
        tax=_as_str(d.get("tax")),
        bsb=_as_str(d.get("bsb")),
        acc=_as_str(d.get("acc")),
    )


def company_to_dict(company: Company) -> dict:
    return {
        "id": company.id,
        "name": company.name,
        "address": company.address,
        "phone": company.phone,
        "postcode": company.postcode,
        "city": company.city,
        "stateA": company.state,
    }


def dict_to_company(d: Any) -> Company:
    d = _as_dict(d)
    return Company(
        id=_as_int(d.get("id")),
        name=_as_str(d.get("name")),
        address=_as_str(d.get("address")),
        phone=_as_str(d.get("phone")),
        postcode=_as_str(d.get("postcode")),
        city=_as_str(d.get("city")),
        state=_as_str(d.get("stateA", d.get("state"))),
    )


def employee_display_name(employee: Employee) -> str:
    """Full name for display, or a placeholder when both parts are blank"""
    name = f"{employee.name} {employee.lastname}".strip()
    return name or UNKNOWN_EMPLOYEE


# ---------- Line items ----------

def line_item_to_dict(item: LineItem) -> dict:
    return {
        "id": item.id,
        "date": item.date,
        "room": item.room,
        "type": ItemCategory(item.category).value,
        "description": item.description,
        "time": item.time,
        "amount": item.amount,
    }


def dict_to_line_item(d: Any) -> LineItem:
    """
    Build a LineItem from stored data. Unknown categories become OTHER and
    the amount is kept as stored; consumers coerce it with safe_float.
    """
    d = _as_dict(d)
    try:
        category = ItemCategory(_as_str(d.get("type"), ItemCategory.OTHER.value))
    except ValueError:
        category = ItemCategory.OTHER
    amount = d.get("amount", 0)
    return LineItem(
        id=_as_int(d.get("id")),
        date=_as_str(d.get("date")),
        room=_as_str(d.get("room")),
        category=category,
        description=_as_str(d.get("description")),
        time=_as_str(d.get("time")),
        amount=0.0 if amount is None else amount,
    )


# ---------- Saved invoices ----------

def invoice_to_dict(invoice: SavedInvoice) -> dict:
    """Convert SavedInvoice object to dictionary for JSON serialization"""
    return {
        "id": invoice.id,
        "invoiceNumber": invoice.invoice_number,
        "employee": employee_to_dict(invoice.employee),
        "company": company_to_dict(invoice.company),
        "startDate": invoice.start_date,
        "endDate": invoice.end_date,
        "items": [line_item_to_dict(i) for i in invoice.items],
        "totalAmount": invoice.total_amount,
        "createdAt": invoice.created_at,
    }


def dict_to_invoice(d: Any) -> SavedInvoice:
    """Convert dictionary from JSON to SavedInvoice object"""
    d = _as_dict(d)
    raw_items = d.get("items")
    if not isinstance(raw_items, list):
        raw_items = []
    total = d.get("totalAmount")
    return SavedInvoice(
        id=_as_str(d.get("id")),
        invoice_number=_as_int(d.get("invoiceNumber"), 0),
        employee=dict_to_employee(d.get("employee")),
        company=dict_to_company(d.get("company")),
        start_date=_as_str(d.get("startDate")),
        end_date=_as_str(d.get("endDate")),
        items=[dict_to_line_item(i) for i in raw_items if isinstance(i, Mapping)],
        total_amount=safe_float(total),
        created_at=_as_str(d.get("createdAt")),
    )


def invoices_to_list(invoices: List[SavedInvoice]) -> List[dict]:
    return [invoice_to_dict(inv) for inv in invoices]


def list_to_invoices(data: Any) -> List[SavedInvoice]:
    """Load the saved collection, skipping entries that are not objects"""
    if not isinstance(data, list):
        log.warning("Saved invoices record is not a list; treating it as empty")
        return []
    out = []
    for entry in data:
        if not isinstance(entry, Mapping):
            log.warning("Skipping malformed saved invoice entry: %r", entry)
            continue
        out.append(dict_to_invoice(entry))
    return out


# ---------- Cleaning selections ----------

def selections_to_dict(selections: CleaningSelections) -> Dict[str, bool]:
    return {"kitchen": selections.kitchen, "night": selections.night}


def dict_to_selections(d: Any) -> CleaningSelections:
    """Accepts both {kitchen, night} and {kitchenEnabled, nightEnabled}"""
    d = _as_dict(d)
    default = get_default_selections()
    kitchen = d.get("kitchen", d.get("kitchenEnabled", default.kitchen))
    night = d.get("night", d.get("nightEnabled", default.night))
    return CleaningSelections(kitchen=bool(kitchen), night=bool(night))
