"""
Saved invoice records: assembling snapshots from the draft and keeping the
saved collection unique by id.
"""
from __future__ import annotations
import copy
import itertools
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, Collection, List, Optional

from models import Company, Employee, InvoiceDraft, SavedInvoice

_SEQUENCE = itertools.count(1)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2025-01-06T09:30:00.123Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_invoice_id(invoice_number: int) -> str:
    """
    Collision resistant id: millisecond timestamp, a process-wide sequence,
    a random token and the invoice number.
    """
    millis = time.time_ns() // 1_000_000
    token = uuid.uuid4().hex[:9]
    return f"{millis}-{next(_SEQUENCE)}{token}-{invoice_number}"


def assemble_invoice(
    employee: Employee,
    company: Company,
    draft: InvoiceDraft,
    existing_ids: Collection[str] = (),
    id_factory: Optional[Callable[[int], str]] = None,
) -> SavedInvoice:
    """
    Snapshot employee, company and draft into a SavedInvoice.
    Employee, company and items are deep copied; nothing is persisted here
    and the draft is left untouched.
    """
    make_id = id_factory or new_invoice_id
    invoice_id = make_id(draft.invoice_number)
    while invoice_id in existing_ids:
        invoice_id = make_id(draft.invoice_number)

    return SavedInvoice(
        id=invoice_id,
        invoice_number=draft.invoice_number,
        employee=copy.deepcopy(employee),
        company=copy.deepcopy(company),
        start_date=draft.start_date,
        end_date=draft.end_date,
        items=copy.deepcopy(draft.items),
        total_amount=draft.total_amount,
        created_at=utc_timestamp(),
    )


def add_saved_invoice(invoices: List[SavedInvoice], invoice: SavedInvoice) -> List[SavedInvoice]:
    """Return a new collection with the invoice added (replacing one with the same id)"""
    out = list(invoices)
    for i, existing in enumerate(out):
        if existing.id == invoice.id:
            out[i] = invoice
            return out
    out.append(invoice)
    return out


def delete_saved_invoice(invoices: List[SavedInvoice], invoice_id: str) -> List[SavedInvoice]:
    """Return a new collection without the invoice; unknown ids are ignored"""
    return [inv for inv in invoices if inv.id != invoice_id]


def find_saved_invoice(invoices: List[SavedInvoice], invoice_id: str) -> Optional[SavedInvoice]:
    for inv in invoices:
        if inv.id == invoice_id:
            return inv
    return None


def merge_saved_invoices(stored: List[SavedInvoice], current: List[SavedInvoice]) -> List[SavedInvoice]:
    """
    Union of the stored collection and the in-memory one, keyed by id.
    Stored order comes first; in-memory copies win on id clashes.
    """
    out = list(stored)
    for inv in current:
        out = add_saved_invoice(out, inv)
    return out
