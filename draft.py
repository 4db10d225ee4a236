"""
Line item store: the operations that mutate an InvoiceDraft.

All draft mutation goes through these functions. None of them recompute the
total on their own; callers run :func:`recompute_total` after each change.
"""
from __future__ import annotations
from dataclasses import replace
from typing import List, Optional, Union

from computations import sum_amounts
from logs import logger
from models import InvoiceDraft, ItemCategory, LineItem

log = logger(__file__)


def set_invoice_number(draft: InvoiceDraft, number: int) -> None:
    draft.invoice_number = int(number)


def set_start_date(draft: InvoiceDraft, value: str) -> None:
    draft.start_date = value


def set_end_date(draft: InvoiceDraft, value: str) -> None:
    draft.end_date = value


def _find_index(items: List[LineItem], item_id: int) -> Optional[int]:
    for i, existing in enumerate(items):
        if existing.id == item_id:
            return i
    return None


def upsert_item(draft: InvoiceDraft, item: LineItem) -> LineItem:
    """
    Add or update a line item and return the stored copy.

    - id None: a fresh id is taken from the draft counter, skipping any id
      already present, and the item is appended.
    - id matching an existing item: that item is replaced in place.
    - any other id: appended with the given id.
    """
    item = replace(item)
    if item.id is None:
        taken = {i.id for i in draft.items}
        draft.last_id += 1
        while draft.last_id in taken:
            draft.last_id += 1
        item.id = draft.last_id
        draft.items.append(item)
        log.debug("Added new item with id %s: %s", item.id, item)
        return item

    index = _find_index(draft.items, item.id)
    if index is not None:
        draft.items[index] = item
        log.debug("Updated existing item with id %s: %s", item.id, item)
    else:
        draft.items.append(item)
        log.debug("Added item with existing id %s: %s", item.id, item)
    return item


def remove_item(draft: InvoiceDraft, item_id: int) -> None:
    """Delete the item with this id; no-op when absent"""
    draft.items = [i for i in draft.items if i.id != item_id]


def remove_items_by_category(draft: InvoiceDraft, category: Union[ItemCategory, str]) -> int:
    """Delete every item of the category, returning how many were removed"""
    category = ItemCategory(category)
    before = len(draft.items)
    draft.items = [i for i in draft.items if i.category != category]
    return before - len(draft.items)


def recompute_total(draft: InvoiceDraft) -> float:
    """Set total_amount to the sum of item amounts (non-numeric counts as 0)"""
    draft.total_amount = sum_amounts(draft.items)
    return draft.total_amount


def reset_draft(draft: InvoiceDraft) -> None:
    """Return the draft to its empty state, id counter included"""
    draft.invoice_number = 0
    draft.start_date = ""
    draft.end_date = ""
    draft.items = []
    draft.total_amount = 0.0
    draft.last_id = 0
