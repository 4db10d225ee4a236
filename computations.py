"""
Business logic and computations for QuickInvoice
"""
from __future__ import annotations
from datetime import date, timedelta
from typing import Dict, Iterable, Iterator, List, Sequence, Union

from models import (
    CleaningKind,
    Company,
    Employee,
    InvoiceDraft,
    LineItem,
    SavedInvoice,
    ServiceEntry,
)
from config import employee_display_name
from utils import (
    day_of_week,
    format_amount,
    format_long_date,
    format_short_date,
    format_slash_date,
    safe_float,
    to_date,
)

DateLike = Union[date, str]

# Monday..Thursday, as date.weekday() values
QUALIFYING_WEEKDAYS = (0, 1, 2, 3)

KITCHEN_ROOMS = {
    0: "floor 1, 2, 3, 4 (128 Waymouth St)",
    1: "floor 5, 6, 7, 8 (128 Waymouth St)",
    2: "floor 9, 10, 11, 12 (128 Waymouth St)",
    3: "floor 13, 14, 15, 16 (128 Waymouth St)",
}
NIGHT_ROOM = "Night Clean (Y-Suite city Gardens)"

SERVICE_DESCRIPTIONS = {
    CleaningKind.KITCHEN: "Kitchen cleaning",
    CleaningKind.NIGHT: "Night cleaning",
}
SERVICE_PRICES = {
    CleaningKind.KITCHEN: 120.0,
    CleaningKind.NIGHT: 90.0,
}

INVOICE_PERIOD_DAYS = 14


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in the inclusive range"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def room_for(kind: CleaningKind, weekday: int) -> str:
    """Room label for a service kind on a qualifying weekday"""
    if kind == CleaningKind.KITCHEN:
        return KITCHEN_ROOMS.get(weekday, "Unknown")
    return NIGHT_ROOM


def compute_recurring_items(
    kind: Union[CleaningKind, str],
    start: DateLike,
    end: DateLike,
) -> List[ServiceEntry]:
    """
    Build one service entry per Monday-Thursday in [start, end].
    Entries come out in ascending date order; an exhausted range yields [].
    """
    kind = CleaningKind(kind)
    description = SERVICE_DESCRIPTIONS[kind]
    price = SERVICE_PRICES[kind]

    out = []
    for day in iter_days(to_date(start), to_date(end)):
        weekday = day.weekday()
        if weekday not in QUALIFYING_WEEKDAYS:
            continue
        out.append(ServiceEntry(
            date=format_slash_date(day),
            room=room_for(kind, weekday),
            description=description,
            amount=price,
        ))
    return out


def first_monday(year: int) -> date:
    """First Monday on or after January 1st"""
    jan1 = date(year, 1, 1)
    return jan1 + timedelta(days=(7 - jan1.weekday()) % 7)


def invoice_number_for(value: DateLike) -> int:
    """
    Fortnightly invoice number: 1 for the fortnight starting on the year's
    first Monday, +1 every 14 days. Dates before that Monday give 0 or less.
    """
    d = to_date(value)
    days = (d - first_monday(d.year)).days
    return days // INVOICE_PERIOD_DAYS + 1


def sum_amounts(items: Iterable[LineItem]) -> float:
    """Sum item amounts, counting non-numeric amounts as 0"""
    return sum(safe_float(item.amount) for item in items)


def service_types_summary(items: Sequence[LineItem]) -> str:
    """Label describing which cleaning services an invoice contains"""
    has_kitchen = any("Kitchen" in (item.description or "") for item in items)
    has_night = any("Night" in (item.description or "") for item in items)

    if has_kitchen and has_night:
        return "Kitchen & Night"
    if has_kitchen:
        return "Kitchen"
    if has_night:
        return "Night"
    return "Other"


def compute_storage_summary(
    employee: Employee,
    company: Company,
    draft: InvoiceDraft,
    saved: Sequence[SavedInvoice],
) -> Dict[str, object]:
    """
    Snapshot of what the app currently holds.
    Returns dict with current_invoice_items, saved_invoices, total_invoice_value,
    employee_name and company_name.
    """
    return {
        "current_invoice_items": len(draft.items),
        "saved_invoices": len(saved),
        "total_invoice_value": sum(safe_float(inv.total_amount) for inv in saved),
        "employee_name": employee_display_name(employee),
        "company_name": company.name,
    }


def invoice_overview(invoice: SavedInvoice) -> Dict[str, object]:
    """
    Display-ready view of a saved invoice. Malformed stored values degrade
    to placeholders ("Invalid date", "$0.00", "Unknown employee").
    """
    return {
        "id": invoice.id,
        "invoice_number": invoice.invoice_number,
        "employee_name": employee_display_name(invoice.employee),
        "company_name": invoice.company.name,
        "period": f"{format_short_date(invoice.start_date)} - {format_short_date(invoice.end_date)}",
        "created": format_long_date(invoice.created_at),
        "services": service_types_summary(invoice.items),
        "item_count": len(invoice.items),
        "total": format_amount(invoice.total_amount),
        "items": [
            {
                "id": item.id,
                "date": item.date,
                "day": day_of_week(item.date),
                "room": item.room,
                "description": item.description,
                "time": item.time,
                "amount": format_amount(item.amount),
            }
            for item in invoice.items
        ],
    }
