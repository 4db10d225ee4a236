"""
Data models for QuickInvoice
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class ItemCategory(str, Enum):
    """Line item category tag, stored as the item's "type" field"""
    KITCHEN = "1"  # auto-generated service entries
    OTHER = "2"


class CleaningKind(str, Enum):
    """Recurring service kinds the calculator knows how to generate"""
    KITCHEN = "kitchen"
    NIGHT = "night"


@dataclass
class Employee:
    """Invoice issuer: identity, banking and tax details"""
    id: Optional[int] = 1
    email: str = ""
    name: str = ""
    lastname: str = ""
    birthdate: str = ""
    address: str = ""
    phone: str = ""
    abn: str = ""
    tax: str = ""
    bsb: str = ""
    acc: str = ""


@dataclass
class Company:
    """Billing recipient"""
    id: Optional[int] = None
    name: str = ""
    address: str = ""
    phone: str = ""
    postcode: str = ""
    city: str = ""
    state: str = ""  # persisted as "stateA"


@dataclass
class LineItem:
    """Single invoice line"""
    id: Optional[int]
    date: str  # YYYY/MM/DD or YYYY-MM-DD
    room: str
    category: ItemCategory = ItemCategory.OTHER  # persisted as "type"
    description: str = ""
    time: str = ""
    amount: Union[float, str] = 0.0  # may hold unparsed user/stored input


@dataclass
class ServiceEntry:
    """Recurring service produced by the recurrence calculator"""
    date: str
    room: str
    description: str
    amount: float


@dataclass
class CleaningSelections:
    """Which recurring service kinds are generated for a new draft"""
    kitchen: bool = False
    night: bool = True

    def enabled_kinds(self) -> List[CleaningKind]:
        kinds = []
        if self.kitchen:
            kinds.append(CleaningKind.KITCHEN)
        if self.night:
            kinds.append(CleaningKind.NIGHT)
        return kinds


@dataclass
class InvoiceDraft:
    """Invoice currently being built"""
    invoice_number: int = 0
    start_date: str = ""
    end_date: str = ""
    items: List[LineItem] = field(default_factory=list)
    total_amount: float = 0.0
    last_id: int = 0  # monotonic id counter


@dataclass
class SavedInvoice:
    """Immutable snapshot of a completed draft"""
    id: str
    invoice_number: int
    employee: Employee
    company: Company
    start_date: str
    end_date: str
    items: List[LineItem]
    total_amount: float
    created_at: str
